"""
Definition Shape Grammar.

Normalized definition text is classified by a small ordered grammar: each rule is
tried in priority order and the first match decides the node kind. Only the text
before the first ``=`` is inspected; everything after it is opaque body text.

Rules:
1.  ``name(p1, p2, ...) = body`` -> Function Definition.
2.  ``name = body`` -> Variable Definition.
3.  Anything else -> Expression.

The left-hand side token of rules 1 and 2 is any run of word characters or dots,
so that a shape like ``3 = x`` is still recognized as an (invalid) definition
rather than silently treated as an expression. Comparison operators (``==``,
``<=``, ``>=``, ``!=``) never act as a definition separator.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Pattern, Tuple

from symbuild.enums import NodeKind

IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*\Z")
"""A simple host identifier: declared names and parameter names."""

SLOT_RE = re.compile(r"\$\{[^{}]*\}")
"""An interpolation slot left in normalized text by the preprocessing stage."""

# Canonical symbols accepted by the rendering engine.
VARIABLE_SYMBOL_RE = re.compile(r"[A-Za-z](?:_\{[A-Za-z0-9]+\})?\Z")
FUNCTION_SYMBOL_RE = re.compile(r"(?:[A-Za-z](?:_\{[A-Za-z0-9]+\})?|[A-Za-z]{2,})\Z")

# Declared names that translate directly into a canonical symbol: ``x`` or ``x_1``.
_SUBSCRIPTED_NAME_RE = re.compile(r"(?P<letter>[A-Za-z])(?:_(?P<sub>[A-Za-z0-9]+))?\Z")
_MULTI_LETTER_NAME_RE = re.compile(r"[A-Za-z]{2,}\Z")


@dataclass(frozen=True)
class ShapeRule:
  """A single entry of the ordered definition grammar."""

  kind: NodeKind
  pattern: Pattern[str]


@dataclass(frozen=True)
class ShapeMatch:
  """
  Result of classifying a definition text.

  For expressions `name` and `params` are None and `body` is the whole text.
  """

  kind: NodeKind
  body: str
  name: Optional[str] = None
  params: Optional[List[str]] = None


DEFINITION_GRAMMAR: Tuple[ShapeRule, ...] = (
  ShapeRule(
    NodeKind.FUNCTION,
    re.compile(r"\s*(?P<name>[\w.]+)\s*\((?P<params>[^()]*)\)\s*=(?!=)(?P<body>.*)\Z", re.DOTALL),
  ),
  ShapeRule(
    NodeKind.VARIABLE,
    re.compile(r"\s*(?P<name>[\w.]+)\s*=(?!=)(?P<body>.*)\Z", re.DOTALL),
  ),
)


def classify(text: str) -> ShapeMatch:
  """
  Applies the ordered grammar to `text`.

  No validation of names or parameters happens here; the caller decides whether
  a matched left-hand side is acceptable.

  Args:
      text (str): Normalized definition text.

  Returns:
      ShapeMatch: The first matching rule's captures, or an Expression match.
  """
  for rule in DEFINITION_GRAMMAR:
    match = rule.pattern.match(text)
    if not match:
      continue
    groups = match.groupdict()
    params = None
    if "params" in groups:
      raw = groups["params"].strip()
      params = [p.strip() for p in raw.split(",")] if raw else []
    return ShapeMatch(kind=rule.kind, name=groups["name"], params=params, body=groups["body"].strip())

  return ShapeMatch(kind=NodeKind.EXPRESSION, body=text.strip())


def is_identifier(name: object) -> bool:
  """Checks that `name` is a simple identifier string."""
  return isinstance(name, str) and bool(IDENTIFIER_RE.match(name))


def count_slots(text: str) -> int:
  """Number of interpolation slots in `text`."""
  return len(SLOT_RE.findall(text))


def is_canonical_symbol(symbol: str, kind: NodeKind = NodeKind.VARIABLE) -> bool:
  """
  Checks a symbol against the engine's naming grammar.

  Variables are one letter with an optional subscript. Functions may also use a
  multi-letter name.
  """
  if kind == NodeKind.FUNCTION:
    return bool(FUNCTION_SYMBOL_RE.match(symbol))
  return bool(VARIABLE_SYMBOL_RE.match(symbol))


def symbol_from_name(name: str, kind: NodeKind = NodeKind.VARIABLE) -> Optional[str]:
  """
  Translates a declared name that already fits the naming grammar.

  ``x`` stays ``x`` and ``x_1`` becomes ``x_{1}``. Function names may also be a
  plain run of letters (``duplicate``).

  Returns:
      Optional[str]: The canonical spelling, or None if the name does not fit.
  """
  match = _SUBSCRIPTED_NAME_RE.match(name)
  if match:
    sub = match.group("sub")
    return match.group("letter") + (f"_{{{sub}}}" if sub else "")
  if kind == NodeKind.FUNCTION and _MULTI_LETTER_NAME_RE.match(name):
    return name
  return None

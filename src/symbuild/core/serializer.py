"""
Ordered Serializer.

Turns a validated DependencyGraph into the ordered list of definition strings
consumed by the rendering engine.

Rendering rules:
    - Variable Definition: ``symbol = body``
    - Function Definition: ``symbol(p1, p2) = body``
    - Expression: its text, emitted as a line only when marked top-level.

Each ``${...}`` slot in a body is replaced by the rendering of the dependency in
the same position: the dependency's canonical symbol for definitions, or its own
rendered text for expressions. Variable and expression substitutions are
parenthesized unless ``parenthesize_references`` is disabled; function symbols
are substituted bare so they remain callable.

The output is memoized against the graph's mutation counter. `render_count`
counts real recomputations so callers can observe cache hits.
"""

import logging
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from symbuild.core.grammar import SLOT_RE, count_slots
from symbuild.core.nodes import (
  Expression,
  FunctionDefinition,
  Node,
  VariableDefinition,
  body_text,
)
from symbuild.errors import ParseError

if TYPE_CHECKING:
  from symbuild.core.graph import DependencyGraph

logger = logging.getLogger(__name__)


class Serializer:
  """
  Memoizing renderer bound to one graph.

  Attributes:
      graph (DependencyGraph): The graph being rendered.
      render_count (int): Number of times the output was actually recomputed.
  """

  def __init__(self, graph: "DependencyGraph") -> None:
    self.graph = graph
    self.render_count = 0
    self._cache: Optional[Tuple[str, ...]] = None
    self._cache_version = -1

  def serialize(self) -> List[str]:
    """
    Renders every emitted node in topological order.

    Validation runs first; on any error nothing is returned.

    Returns:
        List[str]: One string per definition and per top-level expression.

    Raises:
        SymbuildError: Any validation error (cycle, dangling reference, duplicate name).
    """
    with self.graph.lock:
      if self._cache is not None and self._cache_version == self.graph.version:
        logger.debug("Serializer cache hit")
        return list(self._cache)

      self.graph.validate()
      order = self.graph.topological_order()

      inline: Dict[int, str] = {}
      lines: List[str] = []
      for node in order:
        rendered = self._render_body(node, inline)
        if isinstance(node, Expression):
          inline[node.id] = rendered
          if self.graph.is_top_level(node):
            lines.append(rendered)
        elif isinstance(node, VariableDefinition):
          lines.append(f"{self.graph.symbol_of(node)} = {rendered}")
        elif isinstance(node, FunctionDefinition):
          lines.append(f"{self.graph.symbol_of(node)}({', '.join(node.params)}) = {rendered}")
        else:
          raise TypeError(f"Unknown node kind: {type(node).__name__}")

      self.render_count += 1
      self._cache = tuple(lines)
      self._cache_version = self.graph.version
      logger.debug(f"Rendered {len(lines)} definition(s) from {len(order)} node(s)")
      return lines

  def _render_body(self, node: Node, inline: Dict[int, str]) -> str:
    text = body_text(node)
    if count_slots(text) > len(node.dependencies):
      raise ParseError(text, "more interpolation slots than dependencies")
    references = iter([self._render_reference(dep, inline) for dep in node.dependencies])
    return SLOT_RE.sub(lambda _: next(references), text)

  def _render_reference(self, ref, inline: Dict[int, str]) -> str:
    dep = self.graph.resolve(ref)
    if isinstance(dep, Expression):
      text = inline[dep.id]
    elif isinstance(dep, VariableDefinition):
      text = self.graph.symbol_of(dep)
    elif isinstance(dep, FunctionDefinition):
      # Stays callable: `f(x)`, never `(f)(x)`.
      return self.graph.symbol_of(dep)
    else:
      raise TypeError(f"Unknown node kind: {type(dep).__name__}")
    if self.graph.config.parenthesize_references:
      return f"({text})"
    return text

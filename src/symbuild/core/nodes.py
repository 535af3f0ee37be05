"""
Node Model.

Defines the closed set of node variants stored in a DependencyGraph and the
single parsing entry point that turns normalized definition text into one of
them.

Variants:
    - ``Expression``: anonymous text, rendered inline where referenced.
    - ``VariableDefinition``: ``name = body``.
    - ``FunctionDefinition``: ``name(p1, p2) = body``.

Nodes are frozen dataclasses that check their own shape on construction. The
graph sets the ``id`` of a fresh node exactly once, when it is inserted, so the
object the caller holds is the registered node and can be used as a reference.
Equality is identity; two nodes with identical text are still distinct nodes.

Dependencies are supplied by the caller in slot order (left to right). A
dependency reference is either another node or a declared name string, the
latter being a forward reference resolved when the graph is validated.
"""

import dataclasses
from dataclasses import dataclass
from typing import ClassVar, Iterable, Optional, Sequence, Tuple, Union

from symbuild.core import grammar
from symbuild.enums import NodeKind
from symbuild.errors import InvalidNameError, ParseError


@dataclass(frozen=True, eq=False)
class Expression:
  """
  Anonymous expression text. Has no symbol of its own.
  """

  text: str
  """Raw expression text, possibly containing interpolation slots."""

  dependencies: Tuple["Reference", ...] = ()
  """References substituted into the slots of `text`, in order."""

  id: Optional[int] = None
  """Graph-assigned identifier. None until inserted."""

  kind: ClassVar[NodeKind] = NodeKind.EXPRESSION

  def __post_init__(self) -> None:
    if not isinstance(self.text, str) or not self.text.strip():
      raise ParseError(str(self.text), "empty expression")
    _freeze_dependencies(self)


@dataclass(frozen=True, eq=False)
class VariableDefinition:
  """
  A named value: ``name = body``.
  """

  name: str
  """Declared host-level name."""

  body: str
  """Defining expression text."""

  dependencies: Tuple["Reference", ...] = ()
  id: Optional[int] = None

  kind: ClassVar[NodeKind] = NodeKind.VARIABLE

  def __post_init__(self) -> None:
    _check_name(self.name)
    _check_body(f"{self.name} = {self.body}", self.body)
    _freeze_dependencies(self)


@dataclass(frozen=True, eq=False)
class FunctionDefinition:
  """
  A named function: ``name(p1, p2, ...) = body``.
  """

  name: str
  """Declared host-level name."""

  params: Tuple[str, ...]
  """Ordered parameter names, rendered verbatim."""

  body: str
  """Function body text."""

  dependencies: Tuple["Reference", ...] = ()
  id: Optional[int] = None

  kind: ClassVar[NodeKind] = NodeKind.FUNCTION

  def __post_init__(self) -> None:
    _check_name(self.name)
    params = tuple(self.params)
    source = f"{self.name}({', '.join(map(str, params))}) = {self.body}"
    _check_params(source, params)
    _check_body(source, self.body)
    object.__setattr__(self, "params", params)
    _freeze_dependencies(self)


Node = Union[Expression, VariableDefinition, FunctionDefinition]
Reference = Union[Node, str]

NODE_TYPES = (Expression, VariableDefinition, FunctionDefinition)


def _freeze_dependencies(node: Node) -> None:
  deps = tuple(node.dependencies)
  for dep in deps:
    if isinstance(dep, str):
      if not grammar.is_identifier(dep):
        raise InvalidNameError(dep)
    elif not isinstance(dep, NODE_TYPES):
      raise TypeError(f"Dependency must be a node or a declared name, got {type(dep).__name__}")
  object.__setattr__(node, "dependencies", deps)


# --- Exhaustive accessors ---


def declared_name(node: Node) -> Optional[str]:
  """Returns the declared name of a definition, or None for an Expression."""
  if isinstance(node, Expression):
    return None
  if isinstance(node, VariableDefinition):
    return node.name
  if isinstance(node, FunctionDefinition):
    return node.name
  raise TypeError(f"Unknown node kind: {type(node).__name__}")


def body_text(node: Node) -> str:
  """Returns the text whose slots are filled by the node's dependencies."""
  if isinstance(node, Expression):
    return node.text
  if isinstance(node, VariableDefinition):
    return node.body
  if isinstance(node, FunctionDefinition):
    return node.body
  raise TypeError(f"Unknown node kind: {type(node).__name__}")


def label(node: Node) -> str:
  """Short display label: the declared name, or ``#id`` for expressions."""
  name = declared_name(node)
  if name is not None:
    return name
  return f"#{node.id}" if node.id is not None else repr(node.text)


def assign_id(node: Node, node_id: int) -> Node:
  """
  Sets the graph-assigned id of a fresh node in place.

  Raises:
      ValueError: If the node already carries an id.
  """
  if node.id is not None:
    raise ValueError(f"Node {label(node)} already has id {node.id}")
  object.__setattr__(node, "id", node_id)
  return node


def with_id(node: Node, node_id: int) -> Node:
  """Returns a copy of `node` carrying the graph-assigned `node_id`."""
  return dataclasses.replace(node, id=node_id)


def reference_key(ref: Reference) -> str:
  """Display form of a dependency reference."""
  if isinstance(ref, str):
    return ref
  return label(ref)


# --- Construction ---


def expression(text: str, dependencies: Iterable[Reference] = ()) -> Expression:
  """
  Builds an Expression, checking slot/dependency arity.

  Raises:
      ParseError: If the text is blank or has more slots than dependencies.
  """
  if not text or not text.strip():
    raise ParseError(text, "empty expression")
  deps = tuple(dependencies)
  _check_slots(text, text, deps)
  return Expression(text=text.strip(), dependencies=deps)


def variable(name: str, body: str, dependencies: Iterable[Reference] = ()) -> VariableDefinition:
  """
  Builds a VariableDefinition.

  Raises:
      InvalidNameError: If `name` is not an identifier.
      ParseError: If the body is empty or has more slots than dependencies.
  """
  _check_name(name)
  deps = tuple(dependencies)
  _check_body(f"{name} = {body}", body, deps)
  return VariableDefinition(name=name, body=body.strip(), dependencies=deps)


def function(
  name: str, params: Sequence[str], body: str, dependencies: Iterable[Reference] = ()
) -> FunctionDefinition:
  """
  Builds a FunctionDefinition.

  Raises:
      InvalidNameError: If `name` is not an identifier.
      ParseError: On an invalid or duplicate parameter, an empty body, or
          more slots than dependencies.
  """
  _check_name(name)
  params = tuple(params)
  source = f"{name}({', '.join(params)}) = {body}"
  _check_params(source, params)
  deps = tuple(dependencies)
  _check_body(source, body, deps)
  return FunctionDefinition(name=name, params=params, body=body.strip(), dependencies=deps)


def parse_definition(text: str, dependencies: Iterable[Reference] = ()) -> Node:
  """
  Turns normalized definition text into exactly one node variant.

  The text is classified by the ordered grammar in `symbuild.core.grammar`.
  Dependencies are not inferred from the text; they are supplied by the caller
  in the left-to-right order of the slots they fill.

  Args:
      text (str): Normalized definition text.
      dependencies: Ordered dependency references.

  Returns:
      Node: The parsed node (not yet registered in any graph).

  Raises:
      ParseError: If the text is blank, a definition shape has an invalid
          left-hand side, parameters are invalid or duplicated, the body is
          empty, or there are more slots than dependencies.
  """
  if not isinstance(text, str) or not text.strip():
    raise ParseError(str(text), "empty definition text")

  deps = tuple(dependencies)
  shape = grammar.classify(text)

  if shape.kind == NodeKind.EXPRESSION:
    return expression(shape.body, deps)

  if not grammar.is_identifier(shape.name):
    raise ParseError(text, f"invalid definition name {shape.name!r}")

  if shape.kind == NodeKind.VARIABLE:
    _check_body(text, shape.body, deps)
    return VariableDefinition(name=shape.name, body=shape.body, dependencies=deps)

  if shape.kind == NodeKind.FUNCTION:
    params = tuple(shape.params or ())
    _check_params(text, params)
    _check_body(text, shape.body, deps)
    return FunctionDefinition(name=shape.name, params=params, body=shape.body, dependencies=deps)

  raise TypeError(f"Unknown node kind: {shape.kind}")


def _check_name(name: str) -> None:
  if not grammar.is_identifier(name):
    raise InvalidNameError(name)


def _check_params(source: str, params: Sequence[str]) -> None:
  seen = set()
  for param in params:
    if not grammar.is_identifier(param):
      raise ParseError(source, f"invalid parameter name {param!r}")
    if param in seen:
      raise ParseError(source, f"duplicate parameter {param!r}")
    seen.add(param)


def _check_body(source: str, body: str, deps: Optional[Sequence[Reference]] = None) -> None:
  if not isinstance(body, str) or not body.strip():
    raise ParseError(source, "empty definition body")
  if deps is not None:
    _check_slots(source, body, deps)


def _check_slots(source: str, text: str, deps: Sequence[Reference]) -> None:
  slots = grammar.count_slots(text)
  if slots > len(deps):
    raise ParseError(source, f"{slots} interpolation slot(s) but only {len(deps)} dependencies")

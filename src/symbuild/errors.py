"""
Error Taxonomy.

All structural failures raised by the build pipeline derive from `SymbuildError`.
Errors are raised synchronously by the operation that detected them and are never
retried; each carries the structured fields a caller needs to report it without
parsing the message text.
"""

from typing import List, Optional, Sequence


class SymbuildError(Exception):
  """Base class for every error raised by symbuild."""


class ParseError(SymbuildError):
  """
  Definition text matches no recognized shape, or matched a definition shape
  with an invalid left-hand side.
  """

  def __init__(self, text: str, reason: str):
    """
    Args:
        text (str): The offending definition text.
        reason (str): Human readable explanation.
    """
    self.text = text
    self.reason = reason
    super().__init__(f"Cannot parse {text!r}: {reason}")


class InvalidNameError(SymbuildError):
  """A declared name is not a valid identifier for symbol allocation."""

  def __init__(self, name: object):
    self.name = name
    super().__init__(f"Invalid declared name: {name!r}")


class DuplicateDefinitionError(SymbuildError):
  """A declared name is already bound to a different live node."""

  def __init__(self, name: str, existing_id: Optional[int] = None):
    """
    Args:
        name (str): The declared name that collided.
        existing_id (Optional[int]): Id of the node currently holding the name.
    """
    self.name = name
    self.existing_id = existing_id
    super().__init__(f"Name {name!r} is already defined (node #{existing_id})")


class DependentsExistError(SymbuildError):
  """Removal was attempted on a node that other live nodes still depend on."""

  def __init__(self, node_id: int, dependents: Sequence[int]):
    self.node_id = node_id
    self.dependents: List[int] = list(dependents)
    ids = ", ".join(f"#{d}" for d in self.dependents)
    super().__init__(f"Node #{node_id} is still referenced by {ids}")


class UnresolvedReferenceError(SymbuildError):
  """A dependency reference points to a node absent from the graph."""

  def __init__(self, reference: object, node_id: Optional[int] = None):
    """
    Args:
        reference: The reference that failed to resolve (node or declared name).
        node_id (Optional[int]): Id of the node holding the reference, if any.
    """
    self.reference = reference
    self.node_id = node_id
    owner = f" (referenced by node #{node_id})" if node_id is not None else ""
    super().__init__(f"Unresolved reference {_describe(reference)}{owner}")


class CycleError(SymbuildError):
  """
  The dependency graph contains a cycle.

  Attributes:
      cycle (List[int]): Node ids on the cycle, starting at the first node the
          traversal revisited and following dependency edges back round to it.
      labels (List[str]): Display label for each id in `cycle` (declared name
          for definitions, ``#id`` for expressions).
  """

  def __init__(self, cycle: Sequence[int], labels: Optional[Sequence[str]] = None):
    self.cycle: List[int] = list(cycle)
    self.labels: List[str] = list(labels) if labels is not None else [f"#{i}" for i in self.cycle]
    path = " -> ".join(self.labels + self.labels[:1])
    super().__init__(f"Dependency cycle detected: {path}")


def _describe(reference: object) -> str:
  if isinstance(reference, str):
    return repr(reference)
  node_id = getattr(reference, "id", None)
  label = getattr(reference, "label", None)
  if label is not None:
    return f"{label!r} (node #{node_id})"
  return repr(reference)

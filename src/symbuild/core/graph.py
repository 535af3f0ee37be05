"""
Dependency Graph.

The `DependencyGraph` owns every node of a build session together with:

- the symbol table (`SymbolAllocator`),
- a forward index (node id -> ordered dependency references),
- a reverse index (node id -> ids of nodes depending on it),
- a pending index (declared name -> ids of nodes waiting for a definition
  with that name to be inserted).

Mutations (`insert`, `remove`, `set_top_level`) are atomic: every check runs
before any index is touched, so a failed call leaves the graph as it was. Each
successful mutation bumps `version`, which invalidates the cached topological
order and the serializer's memoized output.

All public operations hold a re-entrant lock owned by the graph instance, so a
graph may be shared between threads. There is no global state; each graph has
its own id counter and symbol table.
"""

import heapq
import logging
import threading
from typing import Dict, List, Optional, Set, Tuple, Union

from symbuild.config import BuildConfig
from symbuild.core.nodes import (
  NODE_TYPES,
  Expression,
  Node,
  Reference,
  assign_id,
  declared_name,
  label,
  parse_definition,
  with_id,
)
from symbuild.core.serializer import Serializer
from symbuild.core.symbols import SymbolAllocator
from symbuild.errors import (
  CycleError,
  DependentsExistError,
  DuplicateDefinitionError,
  UnresolvedReferenceError,
)

logger = logging.getLogger(__name__)

NodeLocator = Union[Node, str, int]

# DFS colouring for cycle detection.
_IN_PROGRESS = 1
_DONE = 2


class DependencyGraph:
  """
  Incrementally built graph of expressions and named definitions.

  Attributes:
      config (BuildConfig): Options shared with the allocator and serializer.
      symbols (SymbolAllocator): The graph's symbol table.
      serializer (Serializer): Renders the graph; exposes `render_count`.
      lock (threading.RLock): Guards every public operation.
  """

  def __init__(self, config: Optional[BuildConfig] = None) -> None:
    """
    Initializes an empty graph.

    Args:
        config (Optional[BuildConfig]): Build options. Defaults to `BuildConfig()`.
    """
    self.config = config or BuildConfig()
    self.symbols = SymbolAllocator(self.config)
    self.lock = threading.RLock()

    self._next_id = 1
    self._nodes: Dict[int, Node] = {}
    self._by_name: Dict[str, int] = {}
    self._forward: Dict[int, Tuple[Reference, ...]] = {}
    self._reverse: Dict[int, Set[int]] = {}
    self._pending: Dict[str, Set[int]] = {}
    self._top_level: Set[int] = set()

    self._version = 0
    self._validated_version = -1
    self._order_cache: Optional[List[Node]] = None

    self.serializer = Serializer(self)

  # ------------------------------------------------------------------
  # Mutation
  # ------------------------------------------------------------------

  def insert(self, node: Node, top_level: bool = True) -> Node:
    """
    Registers a node.

    A fresh node (``id`` is None) is registered as is: its id is set in place
    and the same object is returned. Inserting a registered node again is a
    no-op. A node that already carries an id from elsewhere is registered as a
    copy with a new id.

    Args:
        node (Node): A node produced by `parse_definition` or a constructor helper.
        top_level (bool): For expressions, whether the expression is emitted as
            its own output line. Definitions are always emitted.

    Returns:
        Node: The registered node, carrying its graph-assigned id.

    Raises:
        DuplicateDefinitionError: If the declared name is bound to another node.
        InvalidNameError: If the declared name cannot be allocated a symbol.
        TypeError: If `node` is not a node.
    """
    if not isinstance(node, NODE_TYPES):
      raise TypeError(f"Expected a node, got {type(node).__name__}")

    with self.lock:
      if node.id is not None and self._nodes.get(node.id) is node:
        return node

      name = declared_name(node)
      if name is not None:
        holder = self._by_name.get(name)
        if holder is not None:
          raise DuplicateDefinitionError(name, holder)
        self.symbols.allocate(name, node.kind)

      node_id = self._next_id
      self._next_id += 1
      if node.id is None:
        registered = assign_id(node, node_id)
      else:
        # Already owned by another graph or by an earlier, removed registration.
        registered = with_id(node, node_id)

      self._nodes[node_id] = registered
      self._forward[node_id] = registered.dependencies
      self._reverse[node_id] = set()
      for ref in registered.dependencies:
        self._link(node_id, ref)

      if name is not None:
        self._by_name[name] = node_id
        self._reverse[node_id] |= self._pending.pop(name, set())

      if isinstance(registered, Expression) and top_level:
        self._top_level.add(node_id)

      self._touch()
      logger.debug(f"Inserted {registered.kind.value} {label(registered)}")
      return registered

  def add(self, text: str, *dependencies: Reference, top_level: bool = True) -> Node:
    """
    Parses normalized definition text and inserts the resulting node.

    Args:
        text (str): Normalized definition text.
        *dependencies: Dependency references in slot order.
        top_level (bool): See `insert`.

    Returns:
        Node: The registered node.
    """
    return self.insert(parse_definition(text, dependencies), top_level=top_level)

  def remove(self, node: NodeLocator) -> Node:
    """
    Unregisters a node that nothing else depends on.

    Args:
        node: The registered node, its declared name, or its id.

    Returns:
        Node: The removed node.

    Raises:
        DependentsExistError: If another live node still depends on it.
        UnresolvedReferenceError: If the node is not registered in this graph.
    """
    with self.lock:
      node_id = self._locate(node)
      dependents = sorted(d for d in self._reverse[node_id] if d != node_id)
      if dependents:
        raise DependentsExistError(node_id, dependents)

      for ref in self._forward[node_id]:
        self._unlink(node_id, ref)
      removed = self._nodes.pop(node_id)
      del self._forward[node_id]
      del self._reverse[node_id]
      self._top_level.discard(node_id)

      name = declared_name(removed)
      if name is not None:
        del self._by_name[name]
        self.symbols.release(name)

      self._touch()
      logger.debug(f"Removed {removed.kind.value} {label(removed)}")
      return removed

  def set_top_level(self, node: NodeLocator, emit: bool = True) -> None:
    """
    Marks an expression for (or withdraws it from) standalone emission.

    Raises:
        ValueError: If `node` is a definition and `emit` is False.
        UnresolvedReferenceError: If the node is not registered.
    """
    with self.lock:
      node_id = self._locate(node)
      if not isinstance(self._nodes[node_id], Expression):
        if not emit:
          raise ValueError("Definitions are always emitted")
        return
      if emit == (node_id in self._top_level):
        return
      if emit:
        self._top_level.add(node_id)
      else:
        self._top_level.discard(node_id)
      self._touch()

  # ------------------------------------------------------------------
  # Validation and ordering
  # ------------------------------------------------------------------

  def validate(self) -> None:
    """
    Checks the whole graph.

    In order: every dependency reference resolves, declared names are unique,
    and the dependency edges are acyclic. A successful result is remembered
    until the next mutation.

    Raises:
        UnresolvedReferenceError: On the first dangling reference.
        DuplicateDefinitionError: If two live nodes share a declared name.
        CycleError: If a dependency cycle exists.
    """
    with self.lock:
      if self._validated_version == self._version:
        return

      for node_id, refs in self._forward.items():
        for ref in refs:
          if self._resolve(ref) is None:
            raise UnresolvedReferenceError(ref, node_id)

      owners: Dict[str, int] = {}
      for node_id, node in self._nodes.items():
        name = declared_name(node)
        if name is None:
          continue
        if name in owners or self._by_name.get(name) != node_id:
          raise DuplicateDefinitionError(name, owners.get(name, self._by_name.get(name)))
        owners[name] = node_id

      cycle = self._find_cycle()
      if cycle:
        raise CycleError(cycle, [label(self._nodes[i]) for i in cycle])

      self._validated_version = self._version

  def topological_order(self) -> List[Node]:
    """
    Orders nodes so each appears strictly after all of its dependencies.

    Nodes with no ordering constraint between them keep insertion order.

    Returns:
        List[Node]: Every registered node, dependencies first.

    Raises:
        SymbuildError: Any error raised by `validate`.
    """
    with self.lock:
      if self._order_cache is None:
        self.validate()
        self._order_cache = self._sorted()
      return list(self._order_cache)

  def serialize(self) -> List[str]:
    """Renders the graph; see `Serializer.serialize`."""
    return self.serializer.serialize()

  # ------------------------------------------------------------------
  # Introspection
  # ------------------------------------------------------------------

  @property
  def version(self) -> int:
    """Mutation counter; increases on every successful mutation."""
    return self._version

  def nodes(self) -> List[Node]:
    """Registered nodes in insertion order."""
    with self.lock:
      return list(self._nodes.values())

  def get(self, node_id: int) -> Optional[Node]:
    """Returns the node registered under `node_id`."""
    with self.lock:
      return self._nodes.get(node_id)

  def lookup(self, name: str) -> Optional[Node]:
    """Returns the definition currently bound to the declared `name`."""
    with self.lock:
      node_id = self._by_name.get(name)
      return self._nodes[node_id] if node_id is not None else None

  def resolve(self, ref: Reference) -> Node:
    """
    Resolves a dependency reference to its registered node.

    Raises:
        UnresolvedReferenceError: If the reference does not resolve.
    """
    with self.lock:
      node_id = self._resolve(ref)
      if node_id is None:
        raise UnresolvedReferenceError(ref)
      return self._nodes[node_id]

  def symbol_of(self, node: NodeLocator) -> Optional[str]:
    """Canonical symbol of a definition, or None for an expression."""
    with self.lock:
      name = declared_name(self._nodes[self._locate(node)])
      return self.symbols.symbol_for(name) if name is not None else None

  def is_top_level(self, node: NodeLocator) -> bool:
    """Whether the node is emitted as its own output line."""
    with self.lock:
      node_id = self._locate(node)
      return node_id in self._top_level or not isinstance(self._nodes[node_id], Expression)

  def dependencies_of(self, node: NodeLocator) -> List[Node]:
    """Resolved dependencies of a node, in slot order. Dangling ones are skipped."""
    with self.lock:
      resolved = (self._resolve(ref) for ref in self._forward[self._locate(node)])
      return [self._nodes[i] for i in resolved if i is not None]

  def dependents_of(self, node: NodeLocator) -> List[Node]:
    """Live nodes that depend on the given node, in insertion order."""
    with self.lock:
      return [self._nodes[i] for i in sorted(self._reverse[self._locate(node)])]

  def __len__(self) -> int:
    with self.lock:
      return len(self._nodes)

  def __contains__(self, item: object) -> bool:
    with self.lock:
      if isinstance(item, str):
        return item in self._by_name
      if isinstance(item, NODE_TYPES):
        return item.id is not None and self._nodes.get(item.id) is item
      return False

  # ------------------------------------------------------------------
  # Internals
  # ------------------------------------------------------------------

  def _touch(self) -> None:
    self._version += 1
    self._order_cache = None

  def _resolve(self, ref: Reference) -> Optional[int]:
    if isinstance(ref, str):
      return self._by_name.get(ref)
    if isinstance(ref, NODE_TYPES) and ref.id is not None and self._nodes.get(ref.id) is ref:
      return ref.id
    return None

  def _locate(self, item: NodeLocator) -> int:
    if isinstance(item, int) and not isinstance(item, bool):
      if item in self._nodes:
        return item
    else:
      node_id = self._resolve(item)
      if node_id is not None:
        return node_id
    raise UnresolvedReferenceError(item)

  def _link(self, node_id: int, ref: Reference) -> None:
    target = self._resolve(ref)
    if target is not None:
      self._reverse[target].add(node_id)
    elif isinstance(ref, str):
      self._pending.setdefault(ref, set()).add(node_id)

  def _unlink(self, node_id: int, ref: Reference) -> None:
    target = self._resolve(ref)
    if target is not None:
      self._reverse[target].discard(node_id)
    elif isinstance(ref, str):
      waiting = self._pending.get(ref)
      if waiting is not None:
        waiting.discard(node_id)
        if not waiting:
          del self._pending[ref]

  def _dependency_ids(self, node_id: int) -> List[int]:
    ids = []
    for ref in self._forward[node_id]:
      target = self._resolve(ref)
      if target is not None and target not in ids:
        ids.append(target)
    return ids

  def _find_cycle(self) -> Optional[List[int]]:
    """
    Depth-first search over the forward index.

    Returns:
        Optional[List[int]]: Ids from the first revisited node round the
        cycle, or None if the graph is acyclic.
    """
    state: Dict[int, int] = {}

    for root in self._nodes:
      if root in state:
        continue
      state[root] = _IN_PROGRESS
      path = [root]
      stack = [iter(self._dependency_ids(root))]

      while stack:
        advanced = False
        for dep in stack[-1]:
          mark = state.get(dep)
          if mark == _IN_PROGRESS:
            return path[path.index(dep) :]
          if mark is None:
            state[dep] = _IN_PROGRESS
            path.append(dep)
            stack.append(iter(self._dependency_ids(dep)))
            advanced = True
            break
        if not advanced:
          state[path.pop()] = _DONE
          stack.pop()

    return None

  def _sorted(self) -> List[Node]:
    """Kahn's algorithm with a min-heap on ids, giving insertion-order ties."""
    indegree: Dict[int, int] = {}
    successors: Dict[int, List[int]] = {node_id: [] for node_id in self._nodes}
    for node_id in self._nodes:
      deps = self._dependency_ids(node_id)
      indegree[node_id] = len(deps)
      for dep in deps:
        successors[dep].append(node_id)

    ready = [node_id for node_id, degree in indegree.items() if degree == 0]
    heapq.heapify(ready)
    order: List[Node] = []

    while ready:
      node_id = heapq.heappop(ready)
      order.append(self._nodes[node_id])
      for succ in successors[node_id]:
        indegree[succ] -= 1
        if indegree[succ] == 0:
          heapq.heappush(ready, succ)

    if len(order) != len(self._nodes):
      raise AssertionError("topological sort left nodes behind after validation")
    return order

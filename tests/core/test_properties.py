"""
Property-based tests for graph ordering, symbol allocation and atomic mutation.
"""

import pytest
from hypothesis import given, settings, strategies as st

from symbuild.core.graph import DependencyGraph
from symbuild.core.symbols import SymbolAllocator
from symbuild.errors import DuplicateDefinitionError

identifiers = st.from_regex(r"[A-Za-z][A-Za-z0-9_]{0,8}", fullmatch=True)


@st.composite
def acyclic_documents(draw):
  """
  Draws (insert order, name -> dependency names) for an acyclic graph.

  Node ``n<k>`` may only depend on ``n<j>`` with j < k, but nodes are inserted
  in an arbitrary order so forward references are exercised.
  """
  size = draw(st.integers(min_value=1, max_value=12))
  deps = {}
  for k in range(size):
    earlier = [f"n{j}" for j in range(k)]
    deps[f"n{k}"] = draw(st.lists(st.sampled_from(earlier), max_size=3)) if earlier else []
  order = draw(st.permutations(sorted(deps)))
  return order, deps


def _populate(order, deps):
  graph = DependencyGraph()
  for name in order:
    refs = deps[name]
    body = " + ".join(["1"] + ["${_}"] * len(refs))
    graph.add(f"{name} = {body}", *refs)
  return graph


@given(acyclic_documents())
@settings(max_examples=50, deadline=None)
def test_topological_order_respects_transitive_dependencies(document):
  order, deps = document
  graph = _populate(order, deps)

  position = {n.name: i for i, n in enumerate(graph.topological_order())}
  assert len(position) == len(deps)

  def ancestors(name, seen):
    for dep in deps[name]:
      if dep not in seen:
        seen.add(dep)
        ancestors(dep, seen)
    return seen

  for name in deps:
    for dep in ancestors(name, set()):
      assert position[dep] < position[name]


@given(acyclic_documents())
@settings(max_examples=30, deadline=None)
def test_serialize_is_deterministic_and_idempotent(document):
  order, deps = document
  first = _populate(order, deps)
  second = _populate(order, deps)

  output = first.serialize()
  assert first.serialize() == output
  assert first.serializer.render_count == 1
  assert second.serialize() == output
  assert len(output) == len(deps)


@given(st.lists(identifiers, max_size=80))
@settings(max_examples=50, deadline=None)
def test_allocation_is_deterministic_and_injective(names):
  left = SymbolAllocator()
  right = SymbolAllocator()
  left_symbols = [left.allocate(n) for n in names]
  assert left_symbols == [right.allocate(n) for n in names]

  bound = left.bindings()
  assert len(set(bound.values())) == len(bound)
  for name, symbol in zip(names, left_symbols):
    assert bound[name] == symbol
    assert left.allocate(name) == symbol


@given(acyclic_documents(), st.data())
@settings(max_examples=30, deadline=None)
def test_failed_insert_leaves_graph_unchanged(document, data):
  order, deps = document
  graph = _populate(order, deps)
  victim = data.draw(st.sampled_from(sorted(deps)))

  before = (
    len(graph),
    graph.symbols.bindings(),
    {n.id: [d.id for d in graph.dependents_of(n)] for n in graph.nodes()},
    graph.version,
  )
  with pytest.raises(DuplicateDefinitionError):
    graph.add(f"{victim} = 0", *sorted(deps))

  after = (
    len(graph),
    graph.symbols.bindings(),
    {n.id: [d.id for d in graph.dependents_of(n)] for n in graph.nodes()},
    graph.version,
  )
  assert after == before

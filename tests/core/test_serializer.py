"""
Tests for the Ordered Serializer.

Verifies:
1. Rendering of each node kind and slot substitution.
2. All-or-nothing behaviour on validation failures.
3. Memoization observable through `render_count`.
"""

import pytest

from symbuild.config import BuildConfig
from symbuild.core.graph import DependencyGraph
from symbuild.core.nodes import Expression
from symbuild.errors import CycleError, ParseError, UnresolvedReferenceError


def test_variables_then_expression(graph):
  """Scenario: two variables and an expression referencing both."""
  a = graph.add("a = 1 + 3")
  b = graph.add("b = pi ^ 2")
  graph.add("${a} + ${b}", a, b)
  assert graph.serialize() == ["a = 1 + 3", "b = pi ^ 2", "(a) + (b)"]


def test_function_definition(graph):
  """Scenario: a function keeps its parameter list."""
  graph.add("duplicate(L) = L ++ L")
  assert graph.serialize() == ["duplicate(L) = L ++ L"]


def test_function_with_several_params(graph):
  k = graph.add("k = 3")
  graph.add("scale(p, q) = ${k} * p + q", k)
  assert graph.serialize() == ["k = 3", "scale(p, q) = (k) * p + q"]


def test_cycle_fails_without_output(graph):
  """Scenario: mutually dependent definitions produce no partial output."""
  graph.add("ok = 1")
  x = graph.add("x = y + 1", "y")
  graph.add("y = x + 1", x)

  with pytest.raises(CycleError) as exc:
    graph.serialize()
  assert exc.value.labels == ["x", "y"]
  assert graph.serializer.render_count == 0


def test_dangling_reference_fails(graph):
  graph.add("a = ${missing} + 1", "missing")
  with pytest.raises(UnresolvedReferenceError):
    graph.serialize()


def test_expressions_are_inlined(graph):
  r = graph.add("r = 2")
  area = graph.add("pi * ${r} ^ 2", r, top_level=False)
  graph.add("area_total = 3 * ${area}", area)
  assert graph.serialize() == ["r = 2", "a = 3 * (pi * (r) ^ 2)"]


def test_nested_inline_expressions(graph):
  inner = graph.add("1 + 2", top_level=False)
  outer = graph.add("${i} * 3", inner, top_level=False)
  graph.add("total = ${o} - 1", outer)
  assert graph.serialize() == ["a = ((1 + 2) * 3) - 1"]


def test_top_level_expression_also_inlined(graph):
  e = graph.add("2 + 2")
  graph.add("v = ${e}", e)
  assert graph.serialize() == ["2 + 2", "v = (2 + 2)"]


def test_repeated_dependency_slots(graph):
  s = graph.add("s = 4")
  graph.add("${s} * ${s}", s, s)
  assert graph.serialize() == ["s = 4", "(s) * (s)"]


def test_canonical_symbols_replace_declared_names(graph):
  center = graph.add("center = [0, 0]")
  radius = graph.add("radius = 5")
  graph.add("dist(p) = distance(p, ${c}) - ${r}", center, radius)
  assert graph.serialize() == [
    "a = [0, 0]",
    "b = 5",
    "dist(p) = distance(p, (a)) - (b)",
  ]


def test_parenthesization_can_be_disabled():
  graph = DependencyGraph(BuildConfig(parenthesize_references=False))
  a = graph.add("a = 1")
  graph.add("${a} + 1", a)
  assert graph.serialize() == ["a = 1", "a + 1"]


def test_serialize_is_memoized(graph):
  a = graph.add("a = 1")
  graph.add("${a} * 2", a)

  first = graph.serialize()
  assert graph.serializer.render_count == 1
  second = graph.serialize()
  assert second == first
  assert graph.serializer.render_count == 1


def test_cached_output_not_affected_by_caller_mutation(graph):
  graph.add("a = 1")
  first = graph.serialize()
  first.append("junk")
  assert graph.serialize() == ["a = 1"]
  assert graph.serializer.render_count == 1


def test_mutation_invalidates_cache(graph):
  a = graph.add("a = 1")
  graph.serialize()
  b = graph.add("b = 2")
  assert graph.serialize() == ["a = 1", "b = 2"]
  assert graph.serializer.render_count == 2

  graph.remove(b)
  assert graph.serialize() == ["a = 1"]
  assert graph.serializer.render_count == 3

  graph.insert(a)
  graph.serialize()
  assert graph.serializer.render_count == 3


def test_top_level_toggle_invalidates_cache(graph):
  e = graph.add("1 + 1", top_level=False)
  assert graph.serialize() == []
  graph.set_top_level(e)
  assert graph.serialize() == ["1 + 1"]
  assert graph.serializer.render_count == 2


def test_retired_symbol_not_reused_after_remove(graph):
  first = graph.add("first = 1")
  graph.serialize()
  graph.remove(first)
  graph.add("second = 2")
  assert graph.serialize() == ["b = 2"]


def test_redefinition_keeps_symbol(graph):
  """Changing a definition is remove + insert; the name keeps its symbol."""
  old = graph.add("speed = 10")
  graph.add("other = 1")
  graph.remove(old)
  graph.add("speed = 20")
  assert graph.serialize() == ["b = 1", "a = 20"]


def test_function_redefined_as_variable_gets_letter_symbol(graph):
  graph.remove(graph.add("duplicate(L) = L ++ L"))
  graph.add("duplicate = 3")
  assert graph.symbol_of("duplicate") == "a"
  assert graph.serialize() == ["a = 3"]


def test_unchecked_slot_arity_is_rejected(graph):
  graph.insert(Expression(text="${a} + ${b}", dependencies=("a",)))
  graph.add("a = 1")
  with pytest.raises(ParseError):
    graph.serialize()
  assert graph.serializer.render_count == 0


def test_function_reference_stays_callable(graph):
  f = graph.add("double(t) = 2 t")
  x = graph.add("x = 4")
  graph.add("${f}(${x})", f, x)
  assert graph.serialize() == ["double(t) = 2 t", "x = 4", "double((x))"]

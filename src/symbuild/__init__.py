"""
symbuild Package.

An incremental build system for symbolic definitions. The host registers
expressions, variable definitions and function definitions (already normalized
text plus their ordered dependencies) in a `DependencyGraph`; the graph assigns
each named definition a canonical symbol, rejects structurally invalid graphs
and serializes the rest into an ordered list of definition strings for an
external rendering engine.

Usage
-----

.. code-block:: python

    from symbuild import DependencyGraph

    graph = DependencyGraph()
    a = graph.add("a = 1 + 3")
    b = graph.add("b = pi ^ 2")
    graph.add("${a} + ${b}", a, b)
    graph.serialize()
    # ['a = 1 + 3', 'b = pi ^ 2', '(a) + (b)']

Non-raising usage
^^^^^^^^^^^^^^^^^

.. code-block:: python

    import symbuild

    result = symbuild.build([("x = ${y} + 1", ["y"]), ("y = ${x} + 1", ["x"])])
    result.success  # False
    result.errors   # ['Dependency cycle detected: x -> y -> x']
"""

from typing import Iterable, Optional, Sequence, Tuple, Union

from symbuild.config import BuildConfig
from symbuild.core.graph import DependencyGraph
from symbuild.core.nodes import (
  Expression,
  FunctionDefinition,
  VariableDefinition,
  expression,
  function,
  parse_definition,
  variable,
)
from symbuild.core.result import BuildResult
from symbuild.errors import (
  CycleError,
  DependentsExistError,
  DuplicateDefinitionError,
  InvalidNameError,
  ParseError,
  SymbuildError,
  UnresolvedReferenceError,
)

__version__ = "0.1.0"

DefinitionSpec = Union[str, Tuple[str, Sequence[str]]]


def build(definitions: Iterable[DefinitionSpec], config: Optional[BuildConfig] = None) -> BuildResult:
  """
  Builds and serializes a graph in one call, collecting errors instead of raising.

  Dependencies are given by declared name, so definitions may reference names
  defined later in the sequence.

  Args:
      definitions: Definition texts, or ``(text, [dependency names])`` pairs.
      config (Optional[BuildConfig]): Build options.

  Returns:
      BuildResult: Rendered lines and symbol table, or the error that stopped the build.
  """
  graph = DependencyGraph(config)
  try:
    for item in definitions:
      text, deps = (item, ()) if isinstance(item, str) else item
      graph.add(text, *deps)
    lines = graph.serialize()
  except SymbuildError as e:
    return BuildResult(success=False, errors=[str(e)], symbols=graph.symbols.bindings())

  return BuildResult(lines=lines, symbols=graph.symbols.bindings())


__all__ = [
  "BuildConfig",
  "BuildResult",
  "CycleError",
  "DependencyGraph",
  "DependentsExistError",
  "DuplicateDefinitionError",
  "Expression",
  "FunctionDefinition",
  "InvalidNameError",
  "ParseError",
  "SymbuildError",
  "UnresolvedReferenceError",
  "VariableDefinition",
  "build",
  "expression",
  "function",
  "parse_definition",
  "variable",
  "__version__",
]

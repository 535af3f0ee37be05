"""
Core Package.

Node model, symbol allocation, dependency graph and serialization. The pieces
are layered leaves first:

- ``grammar`` / ``nodes``: definition shape recognition and the node variants.
- ``symbols``: declared name -> canonical symbol allocation.
- ``graph``: node ownership, edge indices, validation and ordering.
- ``serializer``: memoized rendering of the ordered graph.
"""

from symbuild.core.graph import DependencyGraph
from symbuild.core.nodes import (
  Expression,
  FunctionDefinition,
  Node,
  Reference,
  VariableDefinition,
  expression,
  function,
  parse_definition,
  variable,
)
from symbuild.core.result import BuildResult
from symbuild.core.serializer import Serializer
from symbuild.core.symbols import SymbolAllocator

__all__ = [
  "BuildResult",
  "DependencyGraph",
  "Expression",
  "FunctionDefinition",
  "Node",
  "Reference",
  "Serializer",
  "SymbolAllocator",
  "VariableDefinition",
  "expression",
  "function",
  "parse_definition",
  "variable",
]

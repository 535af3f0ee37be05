"""
Enumerations for symbuild.

This module defines the closed set of node kinds and the tiers of the canonical
symbol candidate sequence.
"""

from enum import Enum


class NodeKind(str, Enum):
  """
  The three node variants held by a DependencyGraph.

  The set is closed: every operation over nodes dispatches on all three members.
  """

  EXPRESSION = "expression"
  VARIABLE = "variable"
  FUNCTION = "function"


class SymbolTier(str, Enum):
  """
  Stages of the canonical symbol candidate sequence, in allocation order.
  """

  LETTER = "letter"  # a, b, ..., z
  NUMERIC_SUBSCRIPT = "numeric_subscript"  # a_{1}, b_{1}, ...
  ALPHA_SUBSCRIPT = "alpha_subscript"  # a_{aa}, a_{ab}, ...

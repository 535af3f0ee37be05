"""
Symbol Allocator.

Maps host-level declared names to canonical symbols accepted by the rendering
engine: one letter, optionally followed by a subscript (``a``, ``a_{1}``).

Allocation walks a fixed candidate sequence:

1.  **Letters**: every letter of the configured alphabet, in order.
2.  **Numeric subscripts**: ``a_{1}`` ... ``z_{1}``, ``a_{2}`` ... up to
    ``max_numeric_subscript`` (unbounded by default).
3.  **Alphabetic subscripts**: ``a_{aa}``, ``b_{aa}`` ... as a last resort once
    numeric subscripts are capped.

A declared name that already fits the grammar (``x``, ``x_1``, or a multi-letter
function name) is bound verbatim when free, if ``prefer_declared_names`` is set.

Released names keep their symbol retired: no other name may take it, and the
same name gets it back if it is allocated again for a kind whose grammar the
symbol fits. A function's multi-letter symbol stays retired when the name
comes back as a variable.
"""

import itertools
import logging
import string
from typing import Dict, Iterator, Optional, Set

from symbuild.config import BuildConfig
from symbuild.core import grammar
from symbuild.enums import NodeKind, SymbolTier
from symbuild.errors import InvalidNameError

logger = logging.getLogger(__name__)


class SymbolAllocator:
  """
  Bidirectional, monotonically growing symbol table for one graph.

  Attributes:
      config (BuildConfig): Alphabet, reserved symbols and fallback limits.
  """

  def __init__(self, config: Optional[BuildConfig] = None) -> None:
    """
    Initializes an empty table.

    Args:
        config (Optional[BuildConfig]): Allocation options. Defaults to `BuildConfig()`.
    """
    self.config = config or BuildConfig()
    self._by_name: Dict[str, str] = {}
    self._by_symbol: Dict[str, str] = {}
    self._retired: Dict[str, str] = {}
    self._issued: Set[str] = set()
    self._reserved: Set[str] = set(self.config.reserved_symbols)
    self._candidates: Iterator[str] = self._candidate_sequence()

  def allocate(self, name: str, kind: NodeKind = NodeKind.VARIABLE) -> str:
    """
    Binds `name` to a canonical symbol, or returns its existing binding.

    Args:
        name (str): Declared name.
        kind (NodeKind): Kind of the declaring node. Function names may be bound
            verbatim as multi-letter symbols.

    Returns:
        str: The canonical symbol.

    Raises:
        InvalidNameError: If `name` is not a simple identifier.
    """
    if not grammar.is_identifier(name):
      raise InvalidNameError(name)

    existing = self._by_name.get(name)
    if existing is not None:
      return existing

    symbol = None
    retired = self._retired.get(name)
    if retired is not None and grammar.is_canonical_symbol(retired, kind):
      symbol = self._retired.pop(name)
    if symbol is None and self.config.prefer_declared_names:
      preferred = grammar.symbol_from_name(name, kind)
      if preferred is not None and self._is_free(preferred):
        symbol = preferred
    if symbol is None:
      symbol = self._next_candidate()

    self._by_name[name] = symbol
    self._by_symbol[symbol] = name
    self._issued.add(symbol)
    logger.debug(f"Allocated symbol {symbol} for {name!r}")
    return symbol

  def release(self, name: str) -> Optional[str]:
    """
    Unbinds `name`. Its symbol is retired, not recycled.

    Returns:
        Optional[str]: The released symbol, or None if `name` was not bound.
    """
    symbol = self._by_name.pop(name, None)
    if symbol is None:
      return None
    del self._by_symbol[symbol]
    self._retired[name] = symbol
    logger.debug(f"Released {name!r}; symbol {symbol} retired")
    return symbol

  def symbol_for(self, name: str) -> Optional[str]:
    """Returns the symbol currently bound to `name`."""
    return self._by_name.get(name)

  def name_for(self, symbol: str) -> Optional[str]:
    """Returns the declared name currently bound to `symbol`."""
    return self._by_symbol.get(symbol)

  def bindings(self) -> Dict[str, str]:
    """Returns a copy of the live name -> symbol mapping, in allocation order."""
    return dict(self._by_name)

  @property
  def retired(self) -> Dict[str, str]:
    """Released names and the symbols they keep reserved."""
    return dict(self._retired)

  def __contains__(self, name: object) -> bool:
    return name in self._by_name

  def __len__(self) -> int:
    return len(self._by_name)

  def tier_of(self, symbol: str) -> SymbolTier:
    """
    Reports which stage of the candidate sequence `symbol` belongs to.

    Verbatim multi-letter function names are reported as `SymbolTier.LETTER`.
    """
    if "_{" not in symbol:
      return SymbolTier.LETTER
    subscript = symbol[symbol.index("_{") + 2 : -1]
    if subscript.isdigit():
      return SymbolTier.NUMERIC_SUBSCRIPT
    return SymbolTier.ALPHA_SUBSCRIPT

  # --- Internals ---

  def _is_free(self, symbol: str) -> bool:
    return symbol not in self._issued and symbol not in self._reserved

  def _next_candidate(self) -> str:
    for candidate in self._candidates:
      if self._is_free(candidate):
        return candidate
    # The alphabetic tier is infinite.
    raise AssertionError("symbol candidate sequence exhausted")

  def _candidate_sequence(self) -> Iterator[str]:
    letters = self.config.alphabet
    limit = self.config.max_numeric_subscript

    yield from letters

    for index in itertools.count(1):
      if limit is not None and index > limit:
        break
      for letter in letters:
        yield f"{letter}_{{{index}}}"

    for length in itertools.count(2):
      for chars in itertools.product(string.ascii_lowercase, repeat=length):
        subscript = "".join(chars)
        for letter in letters:
          yield f"{letter}_{{{subscript}}}"

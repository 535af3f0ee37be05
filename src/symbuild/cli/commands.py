"""
CLI Command Handlers.

Each handler loads a definition document, builds a graph from it and reports the
outcome through the shared console. Handlers return a process exit code instead
of raising: structural errors are reported with `log_error` and yield 1.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError
from rich.markup import escape
from rich.table import Table

from symbuild.config import BuildConfig
from symbuild.core.graph import DependencyGraph
from symbuild.core.nodes import declared_name
from symbuild.errors import SymbuildError
from symbuild.ingestion import build_graph, load_document
from symbuild.utils.console import console, log_error, log_success


def _load_graph(path: Path, overrides: Optional[Dict[str, Any]]) -> Optional[DependencyGraph]:
  """Builds a graph from `path`, logging and returning None on failure."""
  if not path.exists():
    log_error(f"File not found: {escape(str(path))}")
    return None
  try:
    config = BuildConfig.load(search_path=path.parent, **(overrides or {}))
    return build_graph(load_document(path), config=config)
  except (SymbuildError, ValidationError, ValueError) as e:
    log_error(escape(str(e)))
    return None


def handle_render(path: Path, json_mode: bool = False, overrides: Optional[Dict[str, Any]] = None) -> int:
  """
  Prints the serialized definitions of a document.

  Args:
      path (Path): Definition document (.json or .toml).
      json_mode (bool): Emit a JSON array instead of one definition per line.
      overrides (Optional[Dict]): Config overrides from ``--config``.

  Returns:
      int: Exit code.
  """
  graph = _load_graph(path, overrides)
  if graph is None:
    return 1
  try:
    lines = graph.serialize()
  except SymbuildError as e:
    log_error(escape(str(e)))
    return 1

  if json_mode:
    console.print(json.dumps(lines, indent=2), markup=False, highlight=False, soft_wrap=True)
  else:
    for line in lines:
      console.print(line, markup=False, highlight=False, soft_wrap=True)
  return 0


def handle_check(path: Path, overrides: Optional[Dict[str, Any]] = None) -> int:
  """
  Validates a document without rendering it.

  Returns:
      int: 0 if the graph is valid, 1 otherwise.
  """
  graph = _load_graph(path, overrides)
  if graph is None:
    return 1
  try:
    graph.validate()
  except SymbuildError as e:
    log_error(escape(str(e)))
    return 1

  log_success(f"{escape(str(path))}: {len(graph)} node(s), no structural errors")
  return 0


def handle_symbols(path: Path, overrides: Optional[Dict[str, Any]] = None) -> int:
  """
  Prints the declared name -> canonical symbol table of a document.

  Returns:
      int: Exit code.
  """
  graph = _load_graph(path, overrides)
  if graph is None:
    return 1

  table = Table(title="Symbols")
  table.add_column("Name", style="bold")
  table.add_column("Symbol", style="symbol")
  table.add_column("Kind")
  table.add_column("Tier", style="dim")

  for node in graph.nodes():
    name = declared_name(node)
    if name is None:
      continue
    symbol = graph.symbol_of(node)
    table.add_row(name, symbol, node.kind.value, graph.symbols.tier_of(symbol).value)

  console.print(table)
  return 0

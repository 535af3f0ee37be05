"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- A fresh graph per test.
- Console capture for CLI output assertions.
"""

import io
import sys
from pathlib import Path

import pytest
from rich.console import Console

# Add src to path so we can import 'symbuild' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from symbuild.core.graph import DependencyGraph  # noqa: E402
from symbuild.utils.console import reset_console, set_console  # noqa: E402


@pytest.fixture
def graph():
  """An empty graph with default configuration."""
  return DependencyGraph()


@pytest.fixture
def captured_console():
  """
  Redirects console output and logging into a buffer.

  Yields the buffer; read it with ``getvalue()``.
  """
  buffer = io.StringIO()
  set_console(Console(file=buffer, width=200, color_system=None))
  yield buffer
  reset_console()

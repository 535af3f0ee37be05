"""
Main Entry Point for the symbuild CLI.

Handles argument parsing and dispatches to the handlers in
`symbuild.cli.commands`.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from symbuild import __version__
from symbuild.cli import commands
from symbuild.config import parse_cli_key_values
from symbuild.utils.console import console, log_error


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 for success, non-zero for failure).
  """
  parser = argparse.ArgumentParser(description="symbuild: ordered symbolic definition builder")
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
  parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

  subparsers = parser.add_subparsers(dest="command", required=True)

  config_help = "Config overrides in key=value format (e.g. alphabet=xyz prefer_declared_names=false)"

  # --- Command: RENDER ---
  cmd_render = subparsers.add_parser("render", help="Print the ordered definition list")
  cmd_render.add_argument("path", type=Path, help="Definition document (.json or .toml)")
  cmd_render.add_argument("--json", action="store_true", help="Emit a JSON array")
  cmd_render.add_argument("--config", nargs="*", help=config_help)

  # --- Command: CHECK ---
  cmd_check = subparsers.add_parser("check", help="Validate a document (cycles, names, references)")
  cmd_check.add_argument("path", type=Path, help="Definition document (.json or .toml)")
  cmd_check.add_argument("--config", nargs="*", help=config_help)

  # --- Command: SYMBOLS ---
  cmd_symbols = subparsers.add_parser("symbols", help="Show the declared name -> symbol table")
  cmd_symbols.add_argument("path", type=Path, help="Definition document (.json or .toml)")
  cmd_symbols.add_argument("--config", nargs="*", help=config_help)

  args = parser.parse_args(argv)

  if args.verbose:
    console.set_level(logging.DEBUG)

  try:
    overrides = parse_cli_key_values(args.config)
  except ValueError as e:
    log_error(str(e))
    return 2

  if args.command == "render":
    return commands.handle_render(args.path, json_mode=args.json, overrides=overrides)
  if args.command == "check":
    return commands.handle_check(args.path, overrides=overrides)
  if args.command == "symbols":
    return commands.handle_symbols(args.path, overrides=overrides)

  parser.print_help()
  return 1


if __name__ == "__main__":
  sys.exit(main())

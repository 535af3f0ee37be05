"""
Build Configuration Store.

Holds the options that shape symbol allocation and rendering. Values may come
from a ``[tool.symbuild]`` table in the nearest ``pyproject.toml`` and are
overridden by explicit arguments (typically CLI flags).
"""

import string
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

if sys.version_info >= (3, 11):
  import tomllib
else:
  import tomli as tomllib

# Built-in names of the rendering engine. Binding a definition to one of these
# would shadow the engine's own function or constant.
DEFAULT_RESERVED = [
  "pi",
  "tau",
  "sin",
  "cos",
  "tan",
  "sec",
  "csc",
  "cot",
  "exp",
  "ln",
  "log",
  "sqrt",
  "abs",
  "min",
  "max",
  "mod",
  "floor",
  "ceil",
  "round",
  "sign",
  "mean",
  "total",
  "length",
]


class BuildConfig(BaseModel):
  """
  Options controlling symbol allocation and serialization.
  """

  alphabet: str = Field(
    default=string.ascii_lowercase,
    description="Ordered single letters used for canonical symbols.",
  )
  reserved_symbols: List[str] = Field(
    default_factory=lambda: list(DEFAULT_RESERVED),
    description="Symbols the allocator must never hand out.",
  )
  max_numeric_subscript: Optional[int] = Field(
    default=None,
    description="Highest numeric subscript before falling back to alphabetic subscripts. None means unbounded.",
  )
  prefer_declared_names: bool = Field(
    default=True,
    description="Bind a declared name verbatim when it already satisfies the naming grammar.",
  )
  parenthesize_references: bool = Field(
    default=True,
    description="Wrap every substituted dependency in parentheses.",
  )

  @field_validator("alphabet")
  @classmethod
  def _check_alphabet(cls, v: str) -> str:
    if not v:
      raise ValueError("alphabet must not be empty")
    if any(ch not in string.ascii_letters for ch in v):
      raise ValueError("alphabet may only contain ASCII letters")
    if len(set(v)) != len(v):
      raise ValueError("alphabet letters must be unique")
    return v

  @field_validator("reserved_symbols", mode="before")
  @classmethod
  def _split_reserved(cls, v: Any) -> Any:
    if isinstance(v, str):
      return [part.strip() for part in v.split(",") if part.strip()]
    return v

  @field_validator("max_numeric_subscript")
  @classmethod
  def _check_max_subscript(cls, v: Optional[int]) -> Optional[int]:
    if v is not None and v < 0:
      raise ValueError("max_numeric_subscript must be >= 0")
    return v

  @classmethod
  def load(cls, search_path: Optional[Path] = None, **overrides: Any) -> "BuildConfig":
    """
    Loads configuration from pyproject.toml and applies overrides.

    Args:
        search_path (Optional[Path]): Directory to start searching for TOML config.
            Defaults to the current working directory.
        **overrides: Explicit values. Keys set to None are ignored.

    Returns:
        BuildConfig: The fully resolved configuration object.
    """
    toml_config, _ = _load_toml_settings(search_path or Path.cwd())
    explicit = {k: v for k, v in overrides.items() if v is not None}
    return cls.model_validate({**toml_config, **explicit})


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Searches the start directory and its parents for 'pyproject.toml'.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The ``[tool.symbuild]`` table and the directory it was found in.
  """
  current = start_path.resolve()

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.is_file():
      with open(toml_path, "rb") as f:
        data = tomllib.load(f)
      return data.get("tool", {}).get("symbuild", {}), parent

  return {}, None


def parse_cli_key_values(items: Optional[List[str]]) -> Dict[str, Any]:
  """
  Parses a list of 'key=value' strings into a dictionary.

  Types are inferred (bool, int, or string). Comma separated values become lists.

  Args:
      items (Optional[List[str]]): Raw CLI strings directly from argparse.

  Returns:
      Dict[str, Any]: Parsed dictionary.

  Raises:
      ValueError: If an item has no '=' separator.
  """
  if not items:
    return {}

  config: Dict[str, Any] = {}
  for item in items:
    if "=" not in item:
      raise ValueError(f"Invalid config format: '{item}'. Expected 'key=value'.")

    key, val_str = item.split("=", 1)
    key = key.strip()
    val_str = val_str.strip()

    final_val: Any = val_str
    if val_str.lower() == "true":
      final_val = True
    elif val_str.lower() == "false":
      final_val = False
    elif val_str.lower() == "none":
      final_val = None
    elif "," in val_str:
      final_val = [part.strip() for part in val_str.split(",") if part.strip()]
    else:
      try:
        final_val = int(val_str)
      except ValueError:
        pass

    config[key] = final_val

  return config

"""
Tests for Build Configuration loading.
"""

import pytest
from pydantic import ValidationError

from symbuild.config import BuildConfig, parse_cli_key_values


def test_defaults():
  config = BuildConfig()
  assert config.alphabet == "abcdefghijklmnopqrstuvwxyz"
  assert "pi" in config.reserved_symbols
  assert config.max_numeric_subscript is None
  assert config.prefer_declared_names is True
  assert config.parenthesize_references is True


def test_load_from_pyproject(tmp_path):
  (tmp_path / "pyproject.toml").write_text(
    '[tool.symbuild]\nalphabet = "xyz"\nparenthesize_references = false\n',
    encoding="utf-8",
  )
  nested = tmp_path / "docs" / "graphs"
  nested.mkdir(parents=True)

  config = BuildConfig.load(search_path=nested)
  assert config.alphabet == "xyz"
  assert config.parenthesize_references is False


def test_overrides_win(tmp_path):
  (tmp_path / "pyproject.toml").write_text('[tool.symbuild]\nalphabet = "xyz"\n', encoding="utf-8")
  config = BuildConfig.load(search_path=tmp_path, alphabet="pq", prefer_declared_names=None)
  assert config.alphabet == "pq"
  assert config.prefer_declared_names is True


def test_pyproject_without_section(tmp_path):
  (tmp_path / "pyproject.toml").write_text('[project]\nname = "demo"\n', encoding="utf-8")
  assert BuildConfig.load(search_path=tmp_path) == BuildConfig()


@pytest.mark.parametrize(
  "kwargs",
  [
    {"alphabet": ""},
    {"alphabet": "aa"},
    {"alphabet": "a1"},
    {"max_numeric_subscript": -1},
  ],
)
def test_invalid_values(kwargs):
  with pytest.raises(ValidationError):
    BuildConfig(**kwargs)


def test_reserved_symbols_from_string():
  config = BuildConfig(reserved_symbols="e, i")
  assert config.reserved_symbols == ["e", "i"]


def test_parse_cli_key_values():
  parsed = parse_cli_key_values(
    ["alphabet=xyz", "prefer_declared_names=false", "max_numeric_subscript=3", "reserved_symbols=e,i"]
  )
  assert parsed == {
    "alphabet": "xyz",
    "prefer_declared_names": False,
    "max_numeric_subscript": 3,
    "reserved_symbols": ["e", "i"],
  }
  assert parse_cli_key_values(None) == {}


def test_parse_cli_key_values_rejects_bare_words():
  with pytest.raises(ValueError):
    parse_cli_key_values(["alphabet"])

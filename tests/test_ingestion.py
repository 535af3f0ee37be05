"""
Tests for Definition Document Ingestion.
"""

import json

import pytest
from pydantic import ValidationError

from symbuild.config import BuildConfig
from symbuild.errors import CycleError, DuplicateDefinitionError
from symbuild.ingestion import DefinitionDocument, build_graph, load_document

DOCUMENT = {
  "definitions": [
    {"text": "a = 1 + 3"},
    {"text": "${a} / 2", "deps": ["a"], "label": "half", "top_level": False},
    {"text": "b = ${half} + ${c}", "deps": ["half", "c"]},
    {"text": "c = 7"},
  ]
}


def test_build_graph_resolves_labels_and_forward_names():
  graph = build_graph(DOCUMENT)
  assert len(graph) == 4
  assert graph.serialize() == ["a = 1 + 3", "c = 7", "b = ((a) / 2) + (c)"]


def test_load_json(tmp_path):
  path = tmp_path / "defs.json"
  path.write_text(json.dumps(DOCUMENT), encoding="utf-8")
  document = load_document(path)
  assert isinstance(document, DefinitionDocument)
  assert [d.label for d in document.definitions] == [None, "half", None, None]


def test_load_json_bare_list(tmp_path):
  path = tmp_path / "defs.json"
  path.write_text(json.dumps([{"text": "x = 1"}]), encoding="utf-8")
  assert build_graph(load_document(path)).serialize() == ["x = 1"]


def test_load_toml(tmp_path):
  path = tmp_path / "defs.toml"
  path.write_text(
    '[[definitions]]\ntext = "duplicate(L) = L ++ L"\n\n'
    '[[definitions]]\ntext = "${d}([1, 2])"\ndeps = ["duplicate"]\n',
    encoding="utf-8",
  )
  graph = build_graph(load_document(path))
  assert graph.serialize() == ["duplicate(L) = L ++ L", "duplicate([1, 2])"]


def test_unsupported_extension(tmp_path):
  path = tmp_path / "defs.yaml"
  path.write_text("definitions: []", encoding="utf-8")
  with pytest.raises(ValueError, match="Unsupported document format"):
    load_document(path)


def test_duplicate_labels_rejected():
  with pytest.raises(ValidationError):
    DefinitionDocument.model_validate(
      {"definitions": [{"text": "1", "label": "k"}, {"text": "2", "label": "k"}]}
    )


def test_missing_text_rejected():
  with pytest.raises(ValidationError):
    DefinitionDocument.model_validate({"definitions": [{"deps": []}]})


def test_structural_errors_propagate():
  with pytest.raises(DuplicateDefinitionError):
    build_graph({"definitions": [{"text": "a = 1"}, {"text": "a = 2"}]})

  graph = build_graph(
    {"definitions": [{"text": "x = ${y}", "deps": ["y"]}, {"text": "y = ${x}", "deps": ["x"]}]}
  )
  with pytest.raises(CycleError):
    graph.serialize()


def test_config_and_existing_graph():
  graph = build_graph({"definitions": [{"text": "alpha = 1"}]}, config=BuildConfig(alphabet="q"))
  assert graph.serialize() == ["q = 1"]

  build_graph({"definitions": [{"text": "beta = 2"}]}, graph=graph)
  assert graph.serialize() == ["q = 1", "q_{1} = 2"]

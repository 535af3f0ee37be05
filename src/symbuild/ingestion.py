"""
Definition Document Ingestion.

Loads a document of already-normalized definitions (the hand-off format of the
preprocessing stage) and replays it into a `DependencyGraph`.

Document shape (JSON, or the equivalent TOML array of tables)::

    {
      "definitions": [
        {"text": "a = 1 + 3"},
        {"text": "${a} / 2", "deps": ["a"], "label": "half", "top_level": false},
        {"text": "b = ${half} + ${c}", "deps": ["half", "c"]},
        {"text": "c = 7"}
      ]
    }

Each ``deps`` entry is either the ``label`` of an earlier entry or a declared
name. Declared names may refer to definitions that appear later in the document.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, model_validator

from symbuild.config import BuildConfig
from symbuild.core.graph import DependencyGraph
from symbuild.core.nodes import Node, Reference, parse_definition

if sys.version_info >= (3, 11):
  import tomllib
else:
  import tomli as tomllib

logger = logging.getLogger(__name__)


class DefinitionEntry(BaseModel):
  """
  One normalized definition and its ordered dependency references.
  """

  text: str = Field(description="Normalized definition text.")
  deps: List[str] = Field(default_factory=list, description="Labels or declared names, in slot order.")
  label: Optional[str] = Field(default=None, description="Handle used by later entries to reference this one.")
  top_level: bool = Field(default=True, description="Emit an expression as its own output line.")


class DefinitionDocument(BaseModel):
  """
  An ordered list of definitions forming one build session.
  """

  definitions: List[DefinitionEntry] = Field(default_factory=list)

  @model_validator(mode="after")
  def _unique_labels(self) -> "DefinitionDocument":
    seen = set()
    for entry in self.definitions:
      if entry.label is None:
        continue
      if entry.label in seen:
        raise ValueError(f"Duplicate label: {entry.label!r}")
      seen.add(entry.label)
    return self


def load_document(path: Path) -> DefinitionDocument:
  """
  Reads a definition document from a ``.json`` or ``.toml`` file.

  Args:
      path (Path): Document location.

  Returns:
      DefinitionDocument: The validated document.

  Raises:
      ValueError: If the file extension is not supported.
      pydantic.ValidationError: If the document shape is invalid.
  """
  suffix = path.suffix.lower()
  if suffix == ".json":
    data = json.loads(path.read_text(encoding="utf-8"))
  elif suffix == ".toml":
    with open(path, "rb") as f:
      data = tomllib.load(f)
  else:
    raise ValueError(f"Unsupported document format: {path.suffix!r} (expected .json or .toml)")

  if isinstance(data, list):
    data = {"definitions": data}
  return DefinitionDocument.model_validate(data)


def build_graph(
  document: Union[DefinitionDocument, Dict[str, Any]],
  config: Optional[BuildConfig] = None,
  graph: Optional[DependencyGraph] = None,
) -> DependencyGraph:
  """
  Replays a document into a graph, in document order.

  Args:
      document: A `DefinitionDocument` or its raw dictionary form.
      config (Optional[BuildConfig]): Options for a newly created graph.
      graph (Optional[DependencyGraph]): Existing graph to extend instead.

  Returns:
      DependencyGraph: The populated graph (not yet validated).

  Raises:
      SymbuildError: On the first entry that fails to parse or insert.
  """
  if not isinstance(document, DefinitionDocument):
    document = DefinitionDocument.model_validate(document)
  graph = graph if graph is not None else DependencyGraph(config)

  labels: Dict[str, Node] = {}
  for entry in document.definitions:
    deps: List[Reference] = [labels.get(dep, dep) for dep in entry.deps]
    node = graph.insert(parse_definition(entry.text, deps), top_level=entry.top_level)
    if entry.label is not None:
      labels[entry.label] = node

  logger.debug(f"Ingested {len(document.definitions)} definition(s)")
  return graph

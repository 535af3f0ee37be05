"""
Data structures representing the outcome of a build.

`BuildResult` is the non-raising counterpart of `DependencyGraph.serialize`,
used by the `build()` helper and the CLI.
"""

from typing import Dict, List

from pydantic import BaseModel, Field


class BuildResult(BaseModel):
  """
  Container for the results of serializing a graph.
  """

  lines: List[str] = Field(default_factory=list, description="Ordered rendered definitions.")
  errors: List[str] = Field(default_factory=list, description="Error messages encountered.")
  success: bool = Field(default=True, description="True if serialization produced output.")
  symbols: Dict[str, str] = Field(default_factory=dict, description="Declared name -> canonical symbol.")

  @property
  def has_errors(self) -> bool:
    """
    Check if the result contains any error messages.

    Returns:
        True if one or more errors are present.
    """
    return len(self.errors) > 0

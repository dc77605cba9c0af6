"""
Studio Kernel — Shared Types

Constants, data classes and exceptions used across the tree library,
validator, reducer and session. These are the contracts that bind the kernel
together.

Documents are plain JSON-compatible dicts:

  ComponentNode = {
      "id": str, "type": str, "name"?: str, "props": dict,
      "children"?: [ComponentNode], "interactions"?: [Interaction],
      "is_global_instance"?: bool, "global_component_id"?: str,
      "width"?, "grid_column_start"?, "grid_column_span"?,
      "grid_row_span"?, "responsive_columns"?,
  }
  Interaction   = {"id": str, "trigger": str, "action": str, "target_id"?: str}
  Page          = {"id", "name", "tree": [ComponentNode], "theme"?, "canvas_position"?}
  Project       = {"id", "name", "pages": [Page], "current_page_id",
                   "global_components": [ComponentNode], "theme"?, "layout"?,
                   "description"?, "last_modified": int, "is_example_project"?}
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Literal

from studio.config import settings

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

ROOT_CONTAINER_ID: str = settings.ROOT_CONTAINER_ID
ROOT_CONTAINER_TYPE: str = settings.ROOT_CONTAINER_TYPE

# Layout-adjacent scalars stored on the node itself rather than in props.
# Incoming prop maps may spell them in camelCase; both spellings map here.
NODE_LEVEL_FIELDS: dict[str, str] = {
    "width": "width",
    "grid_column_start": "grid_column_start",
    "gridColumnStart": "grid_column_start",
    "grid_column_span": "grid_column_span",
    "gridColumnSpan": "grid_column_span",
    "grid_row_span": "grid_row_span",
    "gridRowSpan": "grid_row_span",
    "responsive_columns": "responsive_columns",
    "responsiveColumns": "responsive_columns",
}

STACK_TYPES: frozenset[str] = frozenset({"VStack", "HStack"})

Position = Literal["before", "after", "inside"]
Direction = Literal["up", "down"]
Severity = Literal["error", "warning"]


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class KernelError(Exception):
    """Base class for errors raised by the kernel."""


class TreeValidationError(KernelError):
    """A tree handed to a bulk-replace entry point failed validation."""

    def __init__(self, result: ValidationResult, context: str = "tree") -> None:
        self.result = result
        self.context = context
        super().__init__(f"Invalid {context} structure:\n{result.format()}")


class DocumentError(KernelError):
    """A persisted document does not have the expected shape."""


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class Warning:
    """A non-fatal issue encountered during reduction."""

    code: str
    message: str
    details: dict[str, Any] | None = None


@dataclass
class ReduceResult:
    """
    Result of applying one action to a state.

    The reducer only raises for structurally invalid bulk trees; every policy
    violation comes back as applied=False with the input state untouched.
    """

    state: dict[str, Any]
    applied: bool
    warnings: list[Warning] = field(default_factory=list)
    error: str | None = None


@dataclass
class ValidationIssue:
    path: str
    message: str
    severity: Severity = "error"


@dataclass
class ValidationResult:
    valid: bool
    errors: list[ValidationIssue] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [e for e in self.errors if e.severity == "warning"]

    def format(self) -> str:
        """Human-readable, one issue per line."""
        if self.valid and not self.errors:
            return "Tree is valid"
        lines = []
        for issue in self.errors:
            prefix = "ERROR" if issue.severity == "error" else "WARNING"
            lines.append(f"{prefix} at {issue.path}: {issue.message}")
        return "\n".join(lines)


@dataclass
class GridSpanResult:
    """Placement decision for a node about to join a grid."""

    span: int
    children_to_update: list[dict[str, Any]] = field(default_factory=list)

"""
Studio Kernel — the pure engine.

Components:
  tree        — lookup and copy-on-write updates over one page's node forest
  validation  — structural checks before any bulk tree replacement
  document    — projects, pages, global components; load/dump
  reducer     — (state, action) → ReduceResult  (pure, deterministic up to ids)
  history     — bounded undo/redo and dirty tracking
  session     — stateful wrapper + drag-gesture collapse
"""

from studio.kernel.actions import Action, make_action
from studio.kernel.document import dump_document, load_document, validate_project
from studio.kernel.reducer import empty_state, reduce, reduce_with_dirty_tracking, replay
from studio.kernel.registry import DEFAULT_REGISTRY, ComponentDefinition, ComponentRegistry
from studio.kernel.session import EditorSession
from studio.kernel.types import (
    DocumentError,
    KernelError,
    ReduceResult,
    TreeValidationError,
    ValidationResult,
)
from studio.kernel.validation import validate_pages, validate_tree

__all__ = [
    "Action",
    "make_action",
    "reduce",
    "reduce_with_dirty_tracking",
    "replay",
    "empty_state",
    "EditorSession",
    "load_document",
    "dump_document",
    "validate_project",
    "validate_tree",
    "validate_pages",
    "ComponentDefinition",
    "ComponentRegistry",
    "DEFAULT_REGISTRY",
    "KernelError",
    "DocumentError",
    "TreeValidationError",
    "ReduceResult",
    "ValidationResult",
]

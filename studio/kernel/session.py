"""
Studio Kernel — Editor Session

Stateful wrapper around the pure reducer for UI controllers: owns the current
state, routes every dispatch through dirty tracking, and collapses drag
gestures into a single undo step.

    session = EditorSession()
    with session.gesture():
        for span in (4, 5, 6):
            session.dispatch("UPDATE_COMPONENT_PROPS", id="card-1", props={"gridColumnSpan": span})
    session.undo()  # back to before the drag
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from studio.kernel import history
from studio.kernel.actions import HISTORY_ACTIONS, Action
from studio.kernel.document import dump_document, get_editing_tree, load_document
from studio.kernel.reducer import empty_state, reduce_with_dirty_tracking
from studio.kernel.registry import DEFAULT_REGISTRY, ComponentRegistry
from studio.kernel.types import ReduceResult

logger = logging.getLogger(__name__)


class EditorSession:
    """Single-writer owner of one editor state."""

    def __init__(
        self,
        state: dict[str, Any] | None = None,
        registry: ComponentRegistry = DEFAULT_REGISTRY,
    ) -> None:
        self.state = state if state is not None else empty_state()
        self.registry = registry
        self._gesture_depth = 0
        self._gesture_committable = False

    @classmethod
    def from_document(
        cls,
        data: dict[str, Any],
        registry: ComponentRegistry = DEFAULT_REGISTRY,
    ) -> EditorSession:
        """Open a persisted ``{projects, current_project_id}`` document."""
        projects, current_project_id = load_document(data, registry)
        return cls(empty_state(projects, current_project_id), registry)

    def to_document(self) -> dict[str, Any]:
        return dump_document(self.state)

    # -- dispatch --

    def apply(self, action: Action) -> ReduceResult:
        if self._gesture_depth:
            action = Action(action.type, action.payload, {**action.meta, "skip_history": True})
        result = reduce_with_dirty_tracking(self.state, action, registry=self.registry)
        self.state = result.state
        if self._gesture_depth and result.applied and action.type in HISTORY_ACTIONS:
            self._gesture_committable = True
        return result

    def dispatch(self, type: str, **payload: Any) -> ReduceResult:
        return self.apply(Action(type=type, payload=payload))

    def undo(self) -> ReduceResult:
        return self.dispatch("UNDO")

    def redo(self) -> ReduceResult:
        return self.dispatch("REDO")

    def mark_saved(self) -> None:
        self.dispatch("MARK_SAVED")

    # -- gestures --

    @contextmanager
    def gesture(self) -> Iterator[EditorSession]:
        """
        Collapse every update dispatched inside the block into one undo step.
        Nested gestures fold into the outermost one.
        """
        if self._gesture_depth:
            self._gesture_depth += 1
            try:
                yield self
            finally:
                self._gesture_depth -= 1
            return

        before = self.state
        self._gesture_depth = 1
        self._gesture_committable = False
        try:
            yield self
        except Exception:
            logger.warning("gesture aborted, restoring pre-gesture state")
            self.state = before
            raise
        finally:
            self._gesture_depth = 0

        if self._gesture_committable:
            # Transient updates never touched history, so its present is still
            # the pre-gesture document.
            self.state = history.commit(self.state)
        self._gesture_committable = False

    # -- read-only views --

    @property
    def can_undo(self) -> bool:
        return history.can_undo(self.state)

    @property
    def can_redo(self) -> bool:
        return history.can_redo(self.state)

    @property
    def is_dirty(self) -> bool:
        return bool(self.state.get("is_dirty"))

    @property
    def selected_node_ids(self) -> list[str]:
        return list(self.state.get("selected_node_ids") or [])

    @property
    def current_tree(self) -> list[dict[str, Any]]:
        """What the renderer shows: the page, or the definition in isolation mode."""
        return get_editing_tree(self.state)

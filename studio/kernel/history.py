"""
Studio Kernel — History & Dirty Tracking

Undo/redo over whole-document snapshots. A snapshot is a deep, independent
copy of ``{projects, current_project_id}``; ``present`` always mirrors the
last checkpointed document.

    commit:  past + [present] (oldest evicted past the bound), present = now, future = []
    undo:    future = [present] + future, present = past.pop()
    redo:    past = past + [present], present = future.pop(0)

UI-only state (selection aside) survives undo and redo untouched.
"""

from __future__ import annotations

import copy
from typing import Any

from studio.config import settings
from studio.kernel.actions import CONTENT_MODIFYING_ACTIONS
from studio.kernel.types import ROOT_CONTAINER_ID

State = dict[str, Any]


def snapshot(projects: list[dict[str, Any]], current_project_id: str) -> dict[str, Any]:
    return {"projects": copy.deepcopy(projects), "current_project_id": current_project_id}


def initial_history(projects: list[dict[str, Any]], current_project_id: str) -> dict[str, Any]:
    return {"past": [], "present": snapshot(projects, current_project_id), "future": []}


def commit(state: State, max_history: int | None = None) -> State:
    """Checkpoint the state's document. Clears the redo stack."""
    if max_history is None:
        max_history = settings.MAX_HISTORY
    history = state["history"]
    past = history["past"] + [history["present"]]
    if len(past) > max_history:
        past = past[len(past) - max_history :]
    return {
        **state,
        "history": {
            "past": past,
            "present": snapshot(state["projects"], state["current_project_id"]),
            "future": [],
        },
    }


def _restore(state: State, target: dict[str, Any], history: dict[str, Any]) -> State:
    return {
        **state,
        "projects": copy.deepcopy(target["projects"]),
        "current_project_id": target["current_project_id"],
        "selected_node_ids": [ROOT_CONTAINER_ID],
        "history": history,
    }


def undo(state: State) -> State | None:
    """Step back one checkpoint. None when there is nothing to undo."""
    history = state["history"]
    if not history["past"]:
        return None
    previous = history["past"][-1]
    return _restore(
        state,
        previous,
        {
            "past": history["past"][:-1],
            "present": previous,
            "future": [history["present"]] + history["future"],
        },
    )


def redo(state: State) -> State | None:
    """Step forward one checkpoint. None when there is nothing to redo."""
    history = state["history"]
    if not history["future"]:
        return None
    following = history["future"][0]
    return _restore(
        state,
        following,
        {
            "past": history["past"] + [history["present"]],
            "present": following,
            "future": history["future"][1:],
        },
    )


def clear(state: State) -> State:
    history = state["history"]
    return {**state, "history": {"past": [], "present": history["present"], "future": []}}


def can_undo(state: State) -> bool:
    return bool(state["history"]["past"])


def can_redo(state: State) -> bool:
    return bool(state["history"]["future"])


def track_dirty(state: State, action_type: str, applied: bool) -> State:
    """Flag unsaved changes after an applied content-modifying action."""
    if applied and action_type in CONTENT_MODIFYING_ACTIONS and not state.get("is_dirty"):
        return {**state, "is_dirty": True}
    return state

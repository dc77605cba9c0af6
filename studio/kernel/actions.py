"""
Studio Kernel — Actions

The action vocabulary of the reducer, which actions checkpoint history, which
ones dirty the document, and a factory for building well-formed actions.
Used by the session to wrap UI intents and by tests to build actions
concisely.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# ---------------------------------------------------------------------------
# Action types
# ---------------------------------------------------------------------------

TREE_ACTIONS: frozenset[str] = frozenset(
    {
        "UPDATE_COMPONENT_PROPS",
        "UPDATE_MULTIPLE_COMPONENT_PROPS",
        "UPDATE_COMPONENT_NAME",
        "INSERT_COMPONENT",
        "REMOVE_COMPONENT",
        "DUPLICATE_COMPONENT",
        "MOVE_COMPONENT",
        "REORDER_COMPONENT",
        "SET_TREE",
        "GROUP_COMPONENTS",
        "UNGROUP_COMPONENTS",
        "SWAP_LAYOUT_TYPE",
    }
)

GLOBAL_COMPONENT_ACTIONS: frozenset[str] = frozenset(
    {
        "MAKE_GLOBAL_COMPONENT",
        "INSERT_GLOBAL_COMPONENT_INSTANCE",
        "UPDATE_GLOBAL_COMPONENT",
        "DELETE_GLOBAL_COMPONENT",
        "DETACH_GLOBAL_COMPONENT_INSTANCE",
        "SET_EDITING_GLOBAL_COMPONENT",
    }
)

SELECTION_ACTIONS: frozenset[str] = frozenset({"SET_SELECTED_NODE_IDS", "TOGGLE_NODE_SELECTION"})

PAGE_ACTIONS: frozenset[str] = frozenset(
    {
        "SET_CURRENT_PAGE",
        "ADD_PAGE",
        "DELETE_PAGE",
        "RENAME_PAGE",
        "DUPLICATE_PAGE",
        "REORDER_PAGES",
        "UPDATE_PAGE_THEME",
        "UPDATE_PAGE_CANVAS_POSITION",
        "UPDATE_ALL_PAGE_CANVAS_POSITIONS",
        "SET_PAGES",
    }
)

PROJECT_ACTIONS: frozenset[str] = frozenset(
    {
        "CREATE_PROJECT",
        "SET_CURRENT_PROJECT",
        "DELETE_PROJECT",
        "RENAME_PROJECT",
        "DUPLICATE_PROJECT",
        "RESET_EXAMPLE_PROJECT",
        "UPDATE_PROJECT_THEME",
        "UPDATE_PROJECT_LAYOUT",
        "UPDATE_PROJECT_DESCRIPTION",
        "SET_PROJECTS",
    }
)

CLIPBOARD_ACTIONS: frozenset[str] = frozenset({"COPY_COMPONENT", "CUT_COMPONENT", "PASTE_COMPONENT"})

INTERACTION_ACTIONS: frozenset[str] = frozenset({"ADD_INTERACTION", "REMOVE_INTERACTION", "UPDATE_INTERACTION"})

EDITOR_ACTIONS: frozenset[str] = frozenset(
    {
        "TOGGLE_GRID_LINES",
        "TOGGLE_ALL_GRID_LINES",
        "SET_GRID_LINES",
        "SET_PLAY_MODE",
        "SET_EDITING_MODE",
        "MARK_SAVED",
        "MARK_DIRTY",
    }
)

HISTORY_CONTROL_ACTIONS: frozenset[str] = frozenset({"UNDO", "REDO", "CLEAR_HISTORY", "RESET_TREE"})

ACTION_TYPES: frozenset[str] = (
    TREE_ACTIONS
    | GLOBAL_COMPONENT_ACTIONS
    | SELECTION_ACTIONS
    | PAGE_ACTIONS
    | PROJECT_ACTIONS
    | CLIPBOARD_ACTIONS
    | INTERACTION_ACTIONS
    | EDITOR_ACTIONS
    | HISTORY_CONTROL_ACTIONS
)

# Actions that commit an undo checkpoint.
HISTORY_ACTIONS: frozenset[str] = (
    TREE_ACTIONS
    | (GLOBAL_COMPONENT_ACTIONS - {"SET_EDITING_GLOBAL_COMPONENT"})
    | (PAGE_ACTIONS - {"UPDATE_PAGE_CANVAS_POSITION", "UPDATE_ALL_PAGE_CANVAS_POSITIONS", "SET_PAGES"})
    | (PROJECT_ACTIONS - {"SET_PROJECTS"})
    | {"CUT_COMPONENT", "PASTE_COMPONENT"}
)

# Navigation checkpoints history but does not change content.
NAVIGATION_ACTIONS: frozenset[str] = frozenset({"SET_CURRENT_PAGE", "SET_CURRENT_PROJECT"})

# RESET_TREE rewrites history rather than checkpointing, but still changes content.
CONTENT_MODIFYING_ACTIONS: frozenset[str] = (HISTORY_ACTIONS | {"RESET_TREE"}) - NAVIGATION_ACTIONS


# ---------------------------------------------------------------------------
# Action
# ---------------------------------------------------------------------------


@dataclass
class Action:
    """
    One discrete request to the reducer. The reducer reads ``type`` and
    ``payload``; ``meta`` carries delivery hints such as ``skip_history``.
    """

    type: str
    payload: dict[str, Any] = field(default_factory=dict)
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def skip_history(self) -> bool:
        return bool(self.meta.get("skip_history"))

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"type": self.type, "payload": self.payload}
        if self.meta:
            d["meta"] = self.meta
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Action:
        return cls(type=d["type"], payload=d.get("payload") or {}, meta=d.get("meta") or {})


def make_action(type: str, *, meta: dict[str, Any] | None = None, **payload: Any) -> Action:
    """
    Build an Action from keyword payload fields.

        make_action("REMOVE_COMPONENT", id="btn-1")
        make_action("UPDATE_COMPONENT_PROPS", id="btn-1", props={"text": "Go"})
    """
    return Action(type=type, payload=payload, meta=dict(meta or {}))

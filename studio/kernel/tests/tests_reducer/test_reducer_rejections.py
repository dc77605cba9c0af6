"""
Studio Reducer -- Rejection Tests

Policy violations and not-found conditions never raise: they come back as
applied=False with the very same state object and an "<CODE>: <detail>"
error, and are logged as warnings.
"""

import logging

import pytest

from studio.kernel.actions import make_action
from studio.kernel.reducer import reduce
from studio.kernel.tests.builders import ROOT, apply, make_state, node, text, vstack


@pytest.fixture
def state():
    return make_state(
        vstack("stack", text("a"), vstack("inner", text("deep"))),
        node("row", "HStack", [text("r1")]),
        node("btn"),
    )


@pytest.mark.parametrize(
    "type,payload,code",
    [
        ("REMOVE_COMPONENT", {"id": ROOT}, "ROOT_PROTECTED"),
        ("REMOVE_COMPONENT", {"id": "ghost"}, "NODE_NOT_FOUND"),
        ("DUPLICATE_COMPONENT", {"id": ROOT}, "ROOT_PROTECTED"),
        ("DUPLICATE_COMPONENT", {"id": "ghost"}, "NODE_NOT_FOUND"),
        ("UPDATE_COMPONENT_PROPS", {"id": "ghost", "props": {}}, "NODE_NOT_FOUND"),
        ("UPDATE_COMPONENT_PROPS", {"props": {}}, "MISSING_FIELD"),
        ("MOVE_COMPONENT", {"id": "a", "direction": "left"}, "INVALID_DIRECTION"),
        ("REORDER_COMPONENT", {"active_id": "a", "over_id": "r1", "position": "before"}, "DIFFERENT_PARENTS"),
        ("REORDER_COMPONENT", {"active_id": "stack", "over_id": "inner", "position": "inside"}, "CYCLE"),
        ("REORDER_COMPONENT", {"active_id": "a", "over_id": "btn", "position": "inside"}, "NOT_A_CONTAINER"),
        ("REORDER_COMPONENT", {"active_id": "a", "over_id": "btn", "position": "sideways"}, "INVALID_POSITION"),
        ("INSERT_COMPONENT", {"node": {"id": "a", "type": "Text", "props": {}}}, "DUPLICATE_ID"),
        ("INSERT_COMPONENT", {"node": {"id": "new", "type": "Text", "props": {}}, "parent_id": "btn"}, "NOT_A_CONTAINER"),
        ("INSERT_COMPONENT", {"node": {"id": "new", "type": "Blink", "props": {}}}, "INVALID_NODE"),
        ("INSERT_COMPONENT", {"node": {"id": "new", "type": "Text", "props": {}}, "parent_id": "ghost"}, "NODE_NOT_FOUND"),
        ("INSERT_COMPONENT", {}, "MISSING_FIELD"),
        ("MAKE_GLOBAL_COMPONENT", {"node_id": ROOT}, "ROOT_PROTECTED"),
        ("MAKE_GLOBAL_COMPONENT", {"node_id": "ghost"}, "NODE_NOT_FOUND"),
        ("INSERT_GLOBAL_COMPONENT_INSTANCE", {"global_component_id": "ghost"}, "GLOBAL_COMPONENT_NOT_FOUND"),
        ("UPDATE_GLOBAL_COMPONENT", {"global_component_id": "ghost", "node": {}}, "GLOBAL_COMPONENT_NOT_FOUND"),
        ("DELETE_GLOBAL_COMPONENT", {"global_component_id": "ghost"}, "GLOBAL_COMPONENT_NOT_FOUND"),
        ("DETACH_GLOBAL_COMPONENT_INSTANCE", {"node_id": "btn"}, "NOT_AN_INSTANCE"),
        ("SET_CURRENT_PAGE", {"page_id": "ghost"}, "PAGE_NOT_FOUND"),
        ("DELETE_PAGE", {"page_id": "page-1"}, "LAST_PAGE"),
        ("DELETE_PROJECT", {"project_id": "project-1"}, "LAST_PROJECT"),
        ("UNDO", {}, "NOTHING_TO_UNDO"),
        ("FLY_TO_MOON", {}, "UNKNOWN_ACTION"),
    ],
)
def test_rejected_without_change(state, type, payload, code):
    result = reduce(state, make_action(type, **payload))
    assert not result.applied
    assert result.state is state
    assert result.error.startswith(f"{code}:")
    assert result.warnings[0].code == code


def test_rejection_is_logged(state, caplog):
    with caplog.at_level(logging.WARNING, logger="studio.kernel.reducer"):
        reduce(state, make_action("REMOVE_COMPONENT", id=ROOT))
    assert "REMOVE_COMPONENT: ROOT_PROTECTED" in caplog.text


def test_instance_cannot_be_promoted_again(state):
    state = apply(state, "MAKE_GLOBAL_COMPONENT", node_id="row")
    result = reduce(state, make_action("MAKE_GLOBAL_COMPONENT", node_id="gen-1"))
    assert "ALREADY_AN_INSTANCE" in result.error


def test_instance_of_deleted_definition_pastes_as_plain_nodes(state):
    state = apply(state, "MAKE_GLOBAL_COMPONENT", node_id="row")
    state = apply(state, "COPY_COMPONENT", id="gen-1")
    state = apply(state, "DELETE_GLOBAL_COMPONENT", global_component_id="row")
    result = reduce(state, make_action("PASTE_COMPONENT", parent_id=ROOT))
    assert result.applied
    assert result.warnings[0].code == "DETACHED"


def test_action_from_dict(state):
    result = reduce(state, {"type": "REMOVE_COMPONENT", "payload": {"id": "btn"}})
    assert result.applied

"""
Studio Reducer -- Clipboard and Selection Tests

Copy/cut/paste with smart target resolution (inside a selected container,
beside a selected leaf, beside a Card), and single / multi / range
selection toggling.
"""

import pytest

from studio.kernel.actions import make_action
from studio.kernel.reducer import reduce
from studio.kernel.tests.builders import (
    ROOT,
    apply,
    child_ids,
    find,
    make_state,
    node,
    parent_id_of,
    text,
    tree_of,
    vstack,
)
from studio.kernel.tree import iter_nodes


@pytest.fixture
def state():
    return make_state(
        vstack("stack", text("a"), text("b"), text("c"), text("d")),
        node("card", "Card", [node("body", "CardBody", [text("inner")])]),
        node("btn"),
    )


class TestCopyPaste:
    def test_copy_by_id_is_a_deep_snapshot(self, state):
        state = apply(state, "COPY_COMPONENT", id="stack")
        assert state["clipboard"]["id"] == "stack"
        assert state["cut_node_id"] is None
        state = apply(state, "UPDATE_COMPONENT_PROPS", id="a", props={"children": "changed"})
        assert state["clipboard"]["children"][0]["props"]["children"] == "Text"

    def test_paste_into_selected_container(self, state):
        state = apply(state, "COPY_COMPONENT", id="btn")
        state = apply(state, "SET_SELECTED_NODE_IDS", ids=["stack"])
        state = apply(state, "PASTE_COMPONENT")
        assert child_ids(state, "stack")[-1] == "gen-1"
        assert state["selected_node_ids"] == ["gen-1"]

    def test_paste_beside_selected_leaf(self, state):
        state = apply(state, "COPY_COMPONENT", id="btn")
        state = apply(state, "SET_SELECTED_NODE_IDS", ids=["b"])
        state = apply(state, "PASTE_COMPONENT")
        assert parent_id_of(state, "gen-1") == "stack"

    def test_paste_beside_card(self, state):
        state = apply(state, "COPY_COMPONENT", id="btn")
        state = apply(state, "SET_SELECTED_NODE_IDS", ids=["card"])
        state = apply(state, "PASTE_COMPONENT")
        assert parent_id_of(state, "gen-1") == ROOT

    def test_paste_with_explicit_parent(self, state):
        state = apply(state, "COPY_COMPONENT", id="btn")
        state = apply(state, "PASTE_COMPONENT", parent_id="body", index=0)
        assert child_ids(state, "body") == ["gen-1", "inner"]

    def test_every_paste_gets_fresh_ids(self, state):
        state = apply(state, "COPY_COMPONENT", id="stack")
        state = apply(state, "PASTE_COMPONENT", parent_id=ROOT)
        state = apply(state, "PASTE_COMPONENT", parent_id=ROOT)
        ids = [n["id"] for n in iter_nodes(tree_of(state))]
        assert len(ids) == len(set(ids))
        assert len(ids) == 1 + 5 + 3 + 1 + 5 + 5

    def test_paste_into_leaf_rejected(self, state):
        state = apply(state, "COPY_COMPONENT", id="btn")
        result = reduce(state, make_action("PASTE_COMPONENT", parent_id="a"))
        assert "NOT_A_CONTAINER" in result.error

    def test_empty_clipboard(self, state):
        result = reduce(state, make_action("PASTE_COMPONENT"))
        assert not result.applied
        assert "EMPTY_CLIPBOARD" in result.error

    def test_copy_given_node(self, state):
        state = apply(state, "COPY_COMPONENT", node=text("outside"))
        state = apply(state, "PASTE_COMPONENT", parent_id=ROOT)
        assert find(state, "gen-1")["props"] == {"children": "Text"}


class TestCut:
    def test_cut_removes_and_remembers(self, state):
        state = apply(state, "CUT_COMPONENT", id="btn")
        assert find(state, "btn") is None
        assert state["cut_node_id"] == "btn"
        assert state["clipboard"]["id"] == "btn"
        assert state["selected_node_ids"] == [ROOT]

    def test_cut_then_paste_clears_cut_marker(self, state):
        state = apply(state, "CUT_COMPONENT", id="btn")
        state = apply(state, "PASTE_COMPONENT", parent_id="stack")
        assert state["cut_node_id"] is None
        assert child_ids(state, "stack")[-1] == "gen-1"

    def test_cut_is_undoable(self, state):
        state = apply(state, "CUT_COMPONENT", id="btn")
        state = apply(state, "UNDO")
        assert find(state, "btn") is not None
        # the clipboard is editor state, not document state
        assert state["clipboard"]["id"] == "btn"

    def test_cut_root_rejected(self, state):
        result = reduce(state, make_action("CUT_COMPONENT", id=ROOT))
        assert "ROOT_PROTECTED" in result.error


class TestToggleSelection:
    def test_single_click_replaces(self, state):
        state = apply(state, "SET_SELECTED_NODE_IDS", ids=["a", "b"])
        state = apply(state, "TOGGLE_NODE_SELECTION", id="c")
        assert state["selected_node_ids"] == ["c"]

    def test_multi_select_adds_and_removes(self, state):
        state = apply(state, "TOGGLE_NODE_SELECTION", id="a")
        state = apply(state, "TOGGLE_NODE_SELECTION", id="c", multi_select=True)
        assert state["selected_node_ids"] == ["a", "c"]
        state = apply(state, "TOGGLE_NODE_SELECTION", id="a", multi_select=True)
        assert state["selected_node_ids"] == ["c"]

    def test_multi_select_falls_back_to_root(self, state):
        state = apply(state, "TOGGLE_NODE_SELECTION", id="a")
        state = apply(state, "TOGGLE_NODE_SELECTION", id="a", multi_select=True)
        assert state["selected_node_ids"] == [ROOT]

    def test_range_select_siblings(self, state):
        state = apply(state, "TOGGLE_NODE_SELECTION", id="a")
        state = apply(state, "TOGGLE_NODE_SELECTION", id="c", range_select=True)
        assert state["selected_node_ids"] == ["a", "b", "c"]

    def test_range_select_backwards(self, state):
        state = apply(state, "TOGGLE_NODE_SELECTION", id="d")
        state = apply(state, "TOGGLE_NODE_SELECTION", id="b", range_select=True)
        assert sorted(state["selected_node_ids"]) == ["b", "c", "d"]

    def test_range_select_across_parents_appends(self, state):
        state = apply(state, "TOGGLE_NODE_SELECTION", id="a")
        state = apply(state, "TOGGLE_NODE_SELECTION", id="btn", range_select=True)
        assert state["selected_node_ids"] == ["a", "btn"]

"""
Studio Reducer -- Group / Ungroup / Layout Swap Tests

GROUP_COMPONENTS wraps same-parent siblings in a new stack at the first
selected position; grid spans move from the children to the wrapper.
UNGROUP_COMPONENTS is the inverse and restores spans inside a grid.
"""

import pytest

from studio.kernel.actions import make_action
from studio.kernel.reducer import reduce
from studio.kernel.tests.builders import ROOT, apply, child_ids, find, make_state, node, text, vstack


@pytest.fixture
def state():
    return make_state(
        node("c1", "Card", [], grid_column_span=6),
        node("c2", "Card", [], grid_column_span=6, grid_row_span=2),
        node("c3", "Card", [], grid_column_span=12),
        vstack("stack", text("a"), text("b"), text("c"), props={"spacing": 4}),
    )


class TestGroup:
    def test_several_nodes_become_vstack(self, state):
        state = apply(state, "GROUP_COMPONENTS", ids=["c2", "c1"])
        assert child_ids(state) == ["gen-1", "c3", "stack"]
        wrapper = find(state, "gen-1")
        assert wrapper["type"] == "VStack"
        assert child_ids(state, "gen-1") == ["c1", "c2"]
        assert state["selected_node_ids"] == ["gen-1"]

    def test_single_node_becomes_hstack(self, state):
        state = apply(state, "GROUP_COMPONENTS", ids=["c3"])
        wrapper = find(state, "gen-1")
        assert wrapper["type"] == "HStack"
        assert wrapper["props"]["alignment"] == "center"

    def test_spans_move_to_wrapper_in_grid(self, state):
        state = apply(state, "GROUP_COMPONENTS", ids=["c1", "c2"])
        wrapper = find(state, "gen-1")
        assert wrapper["grid_column_span"] == 6
        assert wrapper["props"]["height"] == "auto"
        assert wrapper["props"]["alignment"] == "stretch"
        for child_id in ("c1", "c2"):
            child = find(state, child_id)
            assert "grid_column_span" not in child
            assert "grid_row_span" not in child

    def test_spacing_inherited_from_parent(self, state):
        state = apply(state, "GROUP_COMPONENTS", ids=["b", "c"])
        wrapper = find(state, "gen-1")
        assert wrapper["props"]["spacing"] == 4
        assert "height" not in wrapper["props"]
        assert child_ids(state, "stack") == ["a", "gen-1"]

    def test_spacing_defaults_outside_two_or_four(self, state):
        state = apply(state, "GROUP_COMPONENTS", ids=["c1"])
        assert find(state, "gen-1")["props"]["spacing"] == 2

    def test_different_parents_rejected(self, state):
        result = reduce(state, make_action("GROUP_COMPONENTS", ids=["c1", "a"]))
        assert not result.applied
        assert result.state is state
        assert "DIFFERENT_PARENTS" in result.error

    def test_root_rejected(self, state):
        result = reduce(state, make_action("GROUP_COMPONENTS", ids=[ROOT]))
        assert "ROOT_PROTECTED" in result.error
        assert result.state is state

    def test_unknown_id_rejected(self, state):
        result = reduce(state, make_action("GROUP_COMPONENTS", ids=["c1", "ghost"]))
        assert "NODE_NOT_FOUND" in result.error


class TestUngroup:
    def test_children_spliced_back_in_place(self, state):
        state = apply(state, "UNGROUP_COMPONENTS", id="stack")
        assert child_ids(state) == ["c1", "c2", "c3", "a", "b", "c"]
        assert state["selected_node_ids"] == ["a"]

    def test_grid_spans_restored_onto_children(self, state):
        state = apply(state, "GROUP_COMPONENTS", ids=["c1", "c2"])
        state = apply(state, "UNGROUP_COMPONENTS", id="gen-1")
        assert child_ids(state) == ["c1", "c2", "c3", "stack"]
        for child_id in ("c1", "c2"):
            child = find(state, child_id)
            assert child["grid_column_span"] == 6
            assert child["props"]["height"] == "auto"

    def test_only_stacks(self, state):
        result = reduce(state, make_action("UNGROUP_COMPONENTS", id="c1"))
        assert "NOT_A_STACK" in result.error

    def test_empty_stack(self):
        state = make_state(vstack("empty"))
        result = reduce(state, make_action("UNGROUP_COMPONENTS", id="empty"))
        assert "EMPTY_CONTAINER" in result.error


class TestSwapLayout:
    def test_vstack_to_hstack(self, state):
        state = apply(state, "SWAP_LAYOUT_TYPE", id="stack", new_type="HStack")
        swapped = find(state, "stack")
        assert swapped["type"] == "HStack"
        assert swapped["props"]["spacing"] == 4
        assert child_ids(state, "stack") == ["a", "b", "c"]

    def test_same_type_is_noop(self, state):
        result = reduce(state, make_action("SWAP_LAYOUT_TYPE", id="stack", new_type="VStack"))
        assert not result.applied
        assert result.error is None
        assert result.state is state

    def test_non_stack_rejected(self, state):
        result = reduce(state, make_action("SWAP_LAYOUT_TYPE", id="c1", new_type="HStack"))
        assert "NOT_A_STACK" in result.error

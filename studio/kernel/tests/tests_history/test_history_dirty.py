"""
Studio History -- Dirty Tracking Tests

The dirty flag rises on any applied content-modifying action, but not on
navigation, UI toggles or rejected actions. MARK_SAVED lowers it.
"""

import pytest

from studio.kernel.actions import CONTENT_MODIFYING_ACTIONS, HISTORY_ACTIONS, make_action
from studio.kernel.reducer import reduce_with_dirty_tracking, replay
from studio.kernel.tests.builders import ROOT, make_state, node


@pytest.fixture
def state():
    other = {"id": "page-2", "name": "Two", "tree": [{"id": ROOT, "type": "Grid", "props": {}, "children": []}]}
    return make_state(node("btn"), extra_pages=[other])


def run(state, type, **payload):
    return reduce_with_dirty_tracking(state, make_action(type, **payload))


class TestDirtyFlag:
    def test_content_change_marks_dirty(self, state):
        result = run(state, "UPDATE_COMPONENT_PROPS", id="btn", props={"text": "x"})
        assert result.state["is_dirty"] is True

    def test_page_navigation_is_not_dirty(self, state):
        result = run(state, "SET_CURRENT_PAGE", page_id="page-2")
        assert result.applied
        assert result.state["is_dirty"] is False

    def test_ui_toggle_is_not_dirty(self, state):
        assert run(state, "SET_PLAY_MODE", is_play=True).state["is_dirty"] is False

    def test_rejected_action_is_not_dirty(self, state):
        result = run(state, "REMOVE_COMPONENT", id="ghost")
        assert result.state is state
        assert state["is_dirty"] is False

    def test_mark_saved_clears(self, state):
        state = run(state, "REMOVE_COMPONENT", id="btn").state
        state = run(state, "MARK_SAVED").state
        assert state["is_dirty"] is False

    def test_mark_dirty(self, state):
        assert run(state, "MARK_DIRTY").state["is_dirty"] is True

    def test_reset_tree_is_dirty(self, state):
        assert run(state, "RESET_TREE").state["is_dirty"] is True


class TestActionSets:
    def test_navigation_checkpoints_but_does_not_dirty(self):
        assert "SET_CURRENT_PAGE" in HISTORY_ACTIONS
        assert "SET_CURRENT_PAGE" not in CONTENT_MODIFYING_ACTIONS
        assert "SET_CURRENT_PROJECT" not in CONTENT_MODIFYING_ACTIONS

    def test_bulk_replacements_do_not_checkpoint(self):
        assert "SET_PAGES" not in HISTORY_ACTIONS
        assert "SET_PROJECTS" not in HISTORY_ACTIONS
        assert "SET_EDITING_GLOBAL_COMPONENT" not in HISTORY_ACTIONS


class TestReplay:
    def test_replay_skips_rejected_actions(self, state):
        final = replay(
            [
                make_action("REMOVE_COMPONENT", id="ghost"),
                make_action("INSERT_COMPONENT", node={"id": "t", "type": "Text", "props": {}}),
                {"type": "UPDATE_COMPONENT_NAME", "payload": {"id": "t", "name": "Title"}},
            ],
            state,
        )
        root = final["projects"][0]["pages"][0]["tree"][0]
        assert [c["id"] for c in root["children"]] == ["btn", "t"]
        assert root["children"][1]["name"] == "Title"
        assert final["is_dirty"] is True
        assert len(final["history"]["past"]) == 2

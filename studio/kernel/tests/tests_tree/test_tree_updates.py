"""
Studio Tree -- Copy-on-Write Update Tests

Insertion, removal, duplication, sibling moves and drag-and-drop reordering.
Every no-op must hand back the same list object so callers can detect it
with ``is``; every real change must leave the input untouched and reuse
unaffected subtrees.
"""

import copy

import pytest

from studio.kernel.tests.builders import ROOT, hstack, node, page_tree, text, vstack
from studio.kernel.tree import (
    collect_ids,
    deep_clone_node,
    duplicate_node_in_tree,
    find_node_by_id,
    find_parent,
    insert_node_in_tree,
    iter_nodes,
    move_node_in_tree,
    remove_node_from_tree,
    reorder_node_in_tree,
    update_multiple_nodes_in_tree,
    update_node_in_tree,
)


def ids_under(tree, parent_id=ROOT):
    return [c["id"] for c in find_node_by_id(tree, parent_id).get("children") or []]


@pytest.fixture
def tree():
    return page_tree(
        node("a"),
        vstack("stack", text("s1"), text("s2"), text("s3")),
        node("b"),
        hstack("other", text("o1")),
    )


class TestUpdateNode:
    def test_updates_one_node(self, tree):
        new = update_node_in_tree(tree, "s2", lambda n: {**n, "props": {"children": "changed"}})
        assert find_node_by_id(new, "s2")["props"] == {"children": "changed"}
        assert find_node_by_id(tree, "s2")["props"] == {"children": "Text"}

    def test_unaffected_subtrees_are_shared(self, tree):
        new = update_node_in_tree(tree, "s2", lambda n: {**n, "name": "x"})
        assert find_node_by_id(new, "other") is find_node_by_id(tree, "other")
        assert find_node_by_id(new, "s1") is find_node_by_id(tree, "s1")
        assert find_node_by_id(new, "stack") is not find_node_by_id(tree, "stack")

    def test_unknown_id_returns_same_tree(self, tree):
        assert update_node_in_tree(tree, "ghost", lambda n: {**n, "name": "x"}) is tree

    def test_update_multiple(self, tree):
        new = update_multiple_nodes_in_tree(tree, ["a", "o1"], lambda n: {**n, "name": "hit"})
        assert find_node_by_id(new, "a")["name"] == "hit"
        assert find_node_by_id(new, "o1")["name"] == "hit"
        assert "name" not in find_node_by_id(new, "b")

    def test_update_multiple_with_no_ids(self, tree):
        assert update_multiple_nodes_in_tree(tree, [], lambda n: {**n, "name": "x"}) is tree


class TestInsertNode:
    def test_defaults_to_root_append(self, tree):
        new = insert_node_in_tree(tree, node("new"))
        assert ids_under(new)[-1] == "new"

    def test_at_index(self, tree):
        new = insert_node_in_tree(tree, text("new"), "stack", 1)
        assert ids_under(new, "stack") == ["s1", "new", "s2", "s3"]

    def test_out_of_range_index_appends(self, tree):
        new = insert_node_in_tree(tree, text("new"), "stack", 99)
        assert ids_under(new, "stack")[-1] == "new"

    def test_unknown_parent_returns_same_tree(self, tree):
        assert insert_node_in_tree(tree, node("new"), "ghost") is tree

    def test_input_not_mutated(self, tree):
        before = copy.deepcopy(tree)
        insert_node_in_tree(tree, node("new"), "stack", 0)
        assert tree == before


class TestRemoveNode:
    def test_removes_subtree(self, tree):
        new = remove_node_from_tree(tree, "stack")
        assert collect_ids(new) == {ROOT, "a", "b", "other", "o1"}

    def test_root_is_protected(self, tree):
        assert remove_node_from_tree(tree, ROOT) is tree

    def test_unknown_id(self, tree):
        assert remove_node_from_tree(tree, "ghost") is tree


class TestDuplicateNode:
    def test_clone_placed_right_after_original(self, tree):
        new, new_id = duplicate_node_in_tree(tree, "s2")
        assert new_id == "gen-1"
        assert ids_under(new, "stack") == ["s1", "s2", "gen-1", "s3"]

    def test_every_cloned_node_gets_fresh_id(self, tree):
        new, new_id = duplicate_node_in_tree(tree, "stack")
        clone = find_node_by_id(new, new_id)
        cloned_ids = [n["id"] for n in iter_nodes([clone])]
        assert cloned_ids == ["gen-1", "gen-2", "gen-3", "gen-4"]
        all_ids = [n["id"] for n in iter_nodes(new)]
        assert len(all_ids) == len(set(all_ids))

    def test_clone_props_are_independent(self, tree):
        new, new_id = duplicate_node_in_tree(tree, "s1")
        clone = find_node_by_id(new, new_id)
        clone["props"]["children"] = "edited"
        assert find_node_by_id(new, "s1")["props"]["children"] == "Text"

    def test_root_is_protected(self, tree):
        new, new_id = duplicate_node_in_tree(tree, ROOT)
        assert new is tree
        assert new_id is None

    def test_unknown_id(self, tree):
        new, new_id = duplicate_node_in_tree(tree, "ghost")
        assert new is tree
        assert new_id is None

    def test_clone_drops_grid_column_start(self):
        original = node("card", "Card", [], grid_column_start=3, grid_column_span=4)
        clone = deep_clone_node(original)
        assert "grid_column_start" not in clone
        assert clone["grid_column_span"] == 4
        assert original["grid_column_start"] == 3


class TestMoveNode:
    def test_move_up(self, tree):
        new = move_node_in_tree(tree, "s2", "up")
        assert ids_under(new, "stack") == ["s2", "s1", "s3"]

    def test_move_down(self, tree):
        new = move_node_in_tree(tree, "s2", "down")
        assert ids_under(new, "stack") == ["s1", "s3", "s2"]

    def test_first_cannot_move_up(self, tree):
        assert move_node_in_tree(tree, "s1", "up") is tree

    def test_last_cannot_move_down(self, tree):
        assert move_node_in_tree(tree, "s3", "down") is tree


class TestReorderNodeInTree:
    @pytest.mark.parametrize("position", ["before", "after", "inside"])
    def test_drop_on_itself_is_noop(self, tree, position):
        assert reorder_node_in_tree(tree, "stack", "stack", position) is tree

    def test_before_sibling(self, tree):
        new = reorder_node_in_tree(tree, "s3", "s1", "before")
        assert ids_under(new, "stack") == ["s3", "s1", "s2"]

    def test_after_sibling(self, tree):
        new = reorder_node_in_tree(tree, "s1", "s3", "after")
        assert ids_under(new, "stack") == ["s2", "s3", "s1"]

    def test_already_in_place_is_noop(self, tree):
        assert reorder_node_in_tree(tree, "s1", "s2", "before") is tree

    def test_different_parents_before_is_noop(self, tree):
        assert reorder_node_in_tree(tree, "s1", "o1", "before") is tree

    def test_inside_reparents_as_last_child(self, tree):
        new = reorder_node_in_tree(tree, "s1", "other", "inside")
        assert ids_under(new, "other") == ["o1", "s1"]
        assert ids_under(new, "stack") == ["s2", "s3"]
        assert find_parent(new, "s1")["id"] == "other"

    def test_inside_non_container_is_noop(self, tree):
        assert reorder_node_in_tree(tree, "s1", "a", "inside") is tree

    def test_inside_own_subtree_is_noop(self):
        tree = page_tree(vstack("outer", vstack("inner", text("t"))))
        assert reorder_node_in_tree(tree, "outer", "inner", "inside") is tree

    def test_root_cannot_move(self, tree):
        assert reorder_node_in_tree(tree, ROOT, "stack", "inside") is tree

    def test_unknown_ids(self, tree):
        assert reorder_node_in_tree(tree, "ghost", "a", "before") is tree

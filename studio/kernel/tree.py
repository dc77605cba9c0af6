"""
Studio Kernel — Tree Utilities

Pure functions over one page's node forest (a list of ComponentNode dicts).
No side effects. Inputs are never mutated.

Updates copy the path from the top of the forest down to the affected node and
reuse every untouched subtree. When nothing changes the original list object
is returned, so callers can detect a no-op with ``new is old``.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Iterable, Iterator
from typing import Any

from studio.config import settings
from studio.kernel import ids
from studio.kernel.registry import DEFAULT_REGISTRY, ComponentRegistry
from studio.kernel.types import ROOT_CONTAINER_ID, GridSpanResult

logger = logging.getLogger(__name__)

Node = dict[str, Any]
Tree = list[Node]
UpdateFn = Callable[[Node], Node]


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


def iter_nodes(tree: Iterable[Node]) -> Iterator[Node]:
    """Pre-order walk of every node in the forest."""
    stack = list(reversed(list(tree)))
    while stack:
        node = stack.pop()
        yield node
        children = node.get("children") or []
        stack.extend(reversed(children))


def flatten_tree(tree: Tree) -> list[Node]:
    """
    Every node in document order, root container first.
    Used for range-selection index arithmetic.
    """
    return list(iter_nodes(tree))


def collect_ids(tree: Iterable[Node]) -> set[str]:
    return {node["id"] for node in iter_nodes(tree)}


def find_node_by_id(tree: Tree, node_id: str) -> Node | None:
    for node in iter_nodes(tree):
        if node.get("id") == node_id:
            return node
    return None


def find_location(tree: Tree, node_id: str) -> tuple[Node | None, int] | None:
    """
    Return (parent, index) of a node; parent is None for top-level nodes.
    Returns None when the id is unknown.
    """
    for index, node in enumerate(tree):
        if node.get("id") == node_id:
            return None, index
    for parent in iter_nodes(tree):
        for index, child in enumerate(parent.get("children") or []):
            if child.get("id") == node_id:
                return parent, index
    return None


def find_parent(tree: Tree, node_id: str) -> Node | None:
    """Parent node, or None for top-level nodes (the root container) and unknown ids."""
    location = find_location(tree, node_id)
    if location is None:
        return None
    return location[0]


def is_descendant(node: Node, candidate_id: str) -> bool:
    """True if candidate_id is node itself or anywhere in its subtree."""
    return any(n.get("id") == candidate_id for n in iter_nodes([node]))


def find_path_between_nodes(tree: Tree, start_id: str, target_id: str) -> list[Node]:
    """
    Nodes from start to target inclusive when target lies in start's subtree.
    Empty list otherwise.
    """
    start = find_node_by_id(tree, start_id)
    if start is None:
        return []

    def walk(node: Node, path: list[Node]) -> list[Node] | None:
        path = path + [node]
        if node.get("id") == target_id:
            return path
        for child in node.get("children") or []:
            found = walk(child, path)
            if found is not None:
                return found
        return None

    return walk(start, []) or []


def find_top_most_container(
    tree: Tree,
    node_id: str,
    registry: ComponentRegistry = DEFAULT_REGISTRY,
    structural_types: frozenset[str] | None = None,
) -> Node | None:
    """
    The highest ancestor of node_id strictly below the root container,
    skipping pass-through structural wrappers (a card's body, a panel row).

    The root container resolves to itself. A direct child of the root
    resolves to itself. Returns None for unknown ids.
    """
    if structural_types is None:
        structural_types = settings.STRUCTURAL_CONTAINER_TYPES

    chain: list[Node] | None = None
    for top in tree:
        chain = find_path_between_nodes([top], top["id"], node_id)
        if chain:
            break
    if not chain:
        return None

    target = chain[-1]
    if target.get("id") == ROOT_CONTAINER_ID:
        return target

    candidates = chain[1:] if chain[0].get("id") == ROOT_CONTAINER_ID else chain
    for candidate in candidates:
        if candidate.get("type") in structural_types:
            continue
        if candidate is target or registry.accepts_children(candidate.get("type", "")):
            return candidate
    return target


# ---------------------------------------------------------------------------
# Copy-on-write updates
# ---------------------------------------------------------------------------


def _update_where(tree: Tree, match: Callable[[Node], bool], update_fn: UpdateFn) -> Tree:
    changed = False
    result: Tree = []
    for node in tree:
        new_node = update_fn(node) if match(node) else node
        children = new_node.get("children")
        if children:
            new_children = _update_where(children, match, update_fn)
            if new_children is not children:
                new_node = {**new_node, "children": new_children}
        if new_node is not node:
            changed = True
        result.append(new_node)
    return result if changed else tree


def update_node_in_tree(tree: Tree, node_id: str, update_fn: UpdateFn) -> Tree:
    """Apply update_fn to the node with node_id. Same list back if not found."""
    return _update_where(tree, lambda n: n.get("id") == node_id, update_fn)


def update_multiple_nodes_in_tree(tree: Tree, node_ids: Iterable[str], update_fn: UpdateFn) -> Tree:
    targets = set(node_ids)
    if not targets:
        return tree
    return _update_where(tree, lambda n: n.get("id") in targets, update_fn)


def _replace_children(tree: Tree, parent: Node | None, children: list[Node]) -> Tree:
    """Swap in a new child list for parent (None means the top-level list)."""
    if parent is None:
        return children
    return update_node_in_tree(tree, parent["id"], lambda n: {**n, "children": children})


def insert_node_in_tree(
    tree: Tree,
    node: Node,
    parent_id: str | None = None,
    index: int | None = None,
) -> Tree:
    """
    Insert node under parent_id (default: root container) at index
    (default or out of range: append). Capability checks are the caller's job.
    """
    target_id = parent_id or ROOT_CONTAINER_ID
    if find_node_by_id(tree, target_id) is None:
        logger.warning("insert_node_in_tree: parent %s not found", target_id)
        return tree

    def insert(parent: Node) -> Node:
        children = list(parent.get("children") or [])
        if index is None or not 0 <= index <= len(children):
            children.append(node)
        else:
            children.insert(index, node)
        return {**parent, "children": children}

    return update_node_in_tree(tree, target_id, insert)


def remove_node_from_tree(tree: Tree, node_id: str) -> Tree:
    """Remove the node and its whole subtree. The root container is never removed."""
    if node_id == ROOT_CONTAINER_ID:
        return tree
    location = find_location(tree, node_id)
    if location is None:
        return tree
    parent, index = location
    siblings = tree if parent is None else parent.get("children") or []
    remaining = siblings[:index] + siblings[index + 1 :]
    return _replace_children(tree, parent, remaining)


def deep_clone_node(node: Node, keep_placement: bool = False) -> Node:
    """
    Copy a subtree with a fresh id on every node.

    The clone root drops grid_column_start so it flows into the next free
    cell instead of stacking on top of the original, unless keep_placement
    is set (a copy placed somewhere else, such as a duplicated page).
    """

    def clone(source: Node) -> Node:
        cloned: Node = {**source, "id": ids.generate_id(), "props": copy.deepcopy(source.get("props") or {})}
        if source.get("interactions") is not None:
            cloned["interactions"] = copy.deepcopy(source["interactions"])
        if source.get("children") is not None:
            cloned["children"] = [clone(child) for child in source["children"]]
        return cloned

    cloned = clone(node)
    if not keep_placement:
        cloned.pop("grid_column_start", None)
        cloned["props"].pop("gridColumnStart", None)
    return cloned


def duplicate_node_in_tree(tree: Tree, node_id: str) -> tuple[Tree, str | None]:
    """Clone the subtree and splice it right after the original among its siblings."""
    if node_id == ROOT_CONTAINER_ID:
        return tree, None
    location = find_location(tree, node_id)
    if location is None:
        return tree, None
    parent, index = location
    siblings = tree if parent is None else parent.get("children") or []
    clone = deep_clone_node(siblings[index])
    new_siblings = siblings[: index + 1] + [clone] + siblings[index + 1 :]
    return _replace_children(tree, parent, new_siblings), clone["id"]


def move_node_in_tree(tree: Tree, node_id: str, direction: str) -> Tree:
    """Swap with the previous (up) or next (down) sibling. No-op at the edges."""
    location = find_location(tree, node_id)
    if location is None:
        return tree
    parent, index = location
    siblings = tree if parent is None else parent.get("children") or []
    other = index - 1 if direction == "up" else index + 1
    if direction not in ("up", "down") or not 0 <= other < len(siblings):
        return tree
    swapped = list(siblings)
    swapped[index], swapped[other] = swapped[other], swapped[index]
    return _replace_children(tree, parent, swapped)


def reorder_node_in_tree(
    tree: Tree,
    active_id: str,
    over_id: str,
    position: str = "before",
    registry: ComponentRegistry = DEFAULT_REGISTRY,
) -> Tree:
    """
    Drag-and-drop primitive.

    before/after: only between siblings of one parent; the active node is
    spliced out and reinserted next to the target.
    inside: reparent the active subtree as the last child of a container
    target, from anywhere in the tree.
    """
    if active_id == over_id:
        return tree
    if active_id == ROOT_CONTAINER_ID:
        logger.warning("reorder_node_in_tree: the root container cannot be moved")
        return tree

    active_loc = find_location(tree, active_id)
    over_loc = find_location(tree, over_id)
    if active_loc is None or over_loc is None:
        logger.warning("reorder_node_in_tree: node not found (active=%s, over=%s)", active_id, over_id)
        return tree

    active_parent, active_index = active_loc
    active_siblings = tree if active_parent is None else active_parent.get("children") or []
    active = active_siblings[active_index]

    if position == "inside":
        target = find_node_by_id(tree, over_id)
        if not registry.accepts_children(target.get("type", "")):
            logger.warning("reorder_node_in_tree: %s (%s) does not accept children", over_id, target.get("type"))
            return tree
        if is_descendant(active, over_id):
            logger.warning("reorder_node_in_tree: cannot move %s into its own subtree", active_id)
            return tree
        without = remove_node_from_tree(tree, active_id)
        return insert_node_in_tree(without, active, over_id)

    if position not in ("before", "after"):
        logger.warning("reorder_node_in_tree: unknown position %r", position)
        return tree

    over_parent, _ = over_loc
    active_parent_id = active_parent["id"] if active_parent else None
    over_parent_id = over_parent["id"] if over_parent else None
    if active_parent_id != over_parent_id:
        logger.warning(
            "reorder_node_in_tree: %s and %s have different parents (%s vs %s)",
            active_id,
            over_id,
            active_parent_id,
            over_parent_id,
        )
        return tree

    siblings = [n for n in active_siblings if n.get("id") != active_id]
    over_index = next(i for i, n in enumerate(siblings) if n.get("id") == over_id)
    insert_at = over_index if position == "before" else over_index + 1
    siblings.insert(insert_at, active)
    if [n["id"] for n in siblings] == [n["id"] for n in active_siblings]:
        return tree
    return _replace_children(tree, active_parent, siblings)


# ---------------------------------------------------------------------------
# Grid placement
# ---------------------------------------------------------------------------


def _span_of(child: Node, columns: int) -> int:
    span = child.get("grid_column_span")
    if isinstance(span, int) and not isinstance(span, bool) and span > 0:
        return span
    return columns


def calculate_smart_grid_span(grid_node: Node) -> GridSpanResult:
    """
    Pick a column span for a node about to be appended to a grid.

    In priority order: an empty grid gives full width; a single full-width
    child is halved along with the newcomer; spare capacity goes to the
    newcomer; a full grid of equal spans is rebalanced; anything else gets
    the default span and leaves existing children alone.
    Children without an explicit span count as full width.
    """
    columns = (grid_node.get("props") or {}).get("columns") or settings.DEFAULT_GRID_COLUMNS
    children = grid_node.get("children") or []

    if not children:
        return GridSpanResult(span=columns)

    spans = [_span_of(child, columns) for child in children]

    if len(children) == 1 and spans[0] >= columns:
        half = max(1, columns // 2)
        return GridSpanResult(
            span=half,
            children_to_update=[{"id": children[0]["id"], "grid_column_span": half}],
        )

    total = sum(spans)
    if total < columns:
        return GridSpanResult(span=columns - total)

    if len(set(spans)) == 1:
        share = max(1, columns // (len(children) + 1))
        return GridSpanResult(
            span=share,
            children_to_update=[{"id": child["id"], "grid_column_span": share} for child in children],
        )

    return GridSpanResult(span=min(settings.DEFAULT_GRID_SPAN, columns))

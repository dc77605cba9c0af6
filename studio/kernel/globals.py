"""
Studio Kernel — Global Components

A global component is a definition subtree stored on the project plus any
number of instances on its pages. An instance is a clone of the definition
in which every node carries ``is_global_instance=True`` and the
``global_component_id`` of the definition.

Re-sync rebuilds each instance from the definition. The instance root keeps
its own id (so selection and references to it survive) and its placement
fields; every descendant gets a fresh id.

Which pages hold which instances is derived with ``build_instance_index``
rather than stored, so the index can never drift from the trees.
"""

from __future__ import annotations

import copy
from typing import Any

from studio.kernel import ids
from studio.kernel.tree import Node, Tree, iter_nodes, update_multiple_nodes_in_tree

INSTANCE_TAGS = ("is_global_instance", "global_component_id")

# Placement belongs to the page, not the definition.
INSTANCE_PLACEMENT_FIELDS = ("width", "grid_column_start", "grid_column_span", "grid_row_span", "responsive_columns")

InstanceIndex = dict[str, list[tuple[str, str]]]


def is_instance(node: Node, gc_id: str | None = None) -> bool:
    if not node.get("is_global_instance"):
        return False
    return gc_id is None or node.get("global_component_id") == gc_id


def strip_instance_tags(node: Node) -> Node:
    """Copy of node with the instance tags removed from every node in the subtree."""
    stripped = {k: v for k, v in node.items() if k not in INSTANCE_TAGS}
    if node.get("children") is not None:
        stripped["children"] = [strip_instance_tags(child) for child in node["children"]]
    return stripped


def make_definition(node: Node, gc_id: str, name: str | None = None) -> Node:
    """Turn a subtree into a definition: untagged, id forced to gc_id."""
    definition = strip_instance_tags(node)
    definition["id"] = gc_id
    definition["name"] = name or node.get("name") or node.get("type")
    return definition


def clone_as_instance(definition: Node, gc_id: str, root_id: str | None = None) -> Node:
    """
    Tagged clone of a definition. Every node gets a fresh id except the root
    when ``root_id`` is given.
    """

    def clone(source: Node, node_id: str) -> Node:
        cloned: Node = {
            **source,
            "id": node_id,
            "props": copy.deepcopy(source.get("props") or {}),
            "is_global_instance": True,
            "global_component_id": gc_id,
        }
        if source.get("interactions") is not None:
            cloned["interactions"] = copy.deepcopy(source["interactions"])
        if source.get("children") is not None:
            cloned["children"] = [clone(child, ids.generate_id()) for child in source["children"]]
        return cloned

    return clone(definition, root_id or ids.generate_id())


def find_definition(project: dict[str, Any], gc_id: str) -> Node | None:
    for definition in project.get("global_components") or []:
        if definition.get("id") == gc_id:
            return definition
    return None


def instance_roots(tree: Tree) -> list[Node]:
    """Nodes that start an instance subtree (tagged, parent not tagged with the same id)."""
    roots: list[Node] = []
    stack: list[tuple[Node, str | None]] = [(node, None) for node in reversed(tree)]
    while stack:
        node, parent_gc = stack.pop()
        gc_id = node.get("global_component_id") if node.get("is_global_instance") else None
        if gc_id and gc_id != parent_gc:
            roots.append(node)
        for child in reversed(node.get("children") or []):
            stack.append((child, gc_id))
    return roots


def build_instance_index(project: dict[str, Any]) -> InstanceIndex:
    """``{gc_id: [(page_id, instance_root_id), ...]}`` in page then document order."""
    index: InstanceIndex = {}
    for page in project.get("pages") or []:
        for root in instance_roots(page.get("tree") or []):
            index.setdefault(root["global_component_id"], []).append((page["id"], root["id"]))
    return index


def resync_instances(project: dict[str, Any], gc_id: str, index: InstanceIndex | None = None) -> dict[str, Any]:
    """
    Rebuild every instance of gc_id from the project's current definition.
    Pages without instances keep their identity.
    """
    definition = find_definition(project, gc_id)
    if definition is None:
        return project
    if index is None:
        index = build_instance_index(project)

    by_page: dict[str, list[str]] = {}
    for page_id, root_id in index.get(gc_id, []):
        by_page.setdefault(page_id, []).append(root_id)
    if not by_page:
        return project

    def rebuild(instance: Node) -> Node:
        fresh = clone_as_instance(definition, gc_id, root_id=instance["id"])
        for field in INSTANCE_PLACEMENT_FIELDS:
            fresh.pop(field, None)
            if field in instance:
                fresh[field] = instance[field]
        return fresh

    pages = []
    for page in project["pages"]:
        root_ids = by_page.get(page["id"])
        if root_ids:
            page = {**page, "tree": update_multiple_nodes_in_tree(page["tree"], root_ids, rebuild)}
        pages.append(page)
    return {**project, "pages": pages}


def detach_instances(project: dict[str, Any], gc_id: str) -> dict[str, Any]:
    """Convert every instance of gc_id back into ordinary nodes, on every page."""
    index = build_instance_index(project)
    by_page: dict[str, list[str]] = {}
    for page_id, root_id in index.get(gc_id, []):
        by_page.setdefault(page_id, []).append(root_id)

    pages = []
    for page in project["pages"]:
        root_ids = by_page.get(page["id"])
        if root_ids:
            page = {**page, "tree": update_multiple_nodes_in_tree(page["tree"], root_ids, strip_instance_tags)}
        pages.append(page)
    return {**project, "pages": pages}


def dangling_instances(project: dict[str, Any]) -> list[tuple[str, str, str]]:
    """(page_id, node_id, gc_id) for tagged nodes whose definition is missing."""
    known = {d.get("id") for d in project.get("global_components") or []}
    found = []
    for page in project.get("pages") or []:
        for node in iter_nodes(page.get("tree") or []):
            gc_id = node.get("global_component_id")
            if node.get("is_global_instance") and gc_id not in known:
                found.append((page["id"], node["id"], gc_id))
    return found

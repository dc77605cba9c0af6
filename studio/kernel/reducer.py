"""
Studio Kernel — Reducer

Pure function: (state, action) → ReduceResult
No IO. The input state is never modified; unchanged parts of the document
are shared between the old and new state.

Policy violations and unknown ids come back as applied=False with the input
state object and an "<CODE>: <detail>" error. Only a structurally invalid
bulk replacement (SET_TREE, SET_PAGES, SET_PROJECTS) raises
TreeValidationError.

Applied actions on the history allow-list commit one checkpoint, unless the
action carries ``meta["skip_history"]``.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable
from typing import Any

from studio.config import settings
from studio.kernel import history, ids
from studio.kernel.actions import HISTORY_ACTIONS, Action
from studio.kernel.document import (
    clone_page_tree,
    find_page,
    find_project,
    get_current_project,
    get_current_tree,
    get_editing_tree,
    make_page,
    make_project,
    project_node_ids,
    replace_project,
    touch,
    validate_project,
    with_current_tree,
)
from studio.kernel.globals import (
    clone_as_instance,
    detach_instances,
    find_definition,
    instance_roots,
    is_instance,
    make_definition,
    resync_instances,
    strip_instance_tags,
)
from studio.kernel.layout import swap_stack_props
from studio.kernel.registry import DEFAULT_REGISTRY, ComponentRegistry
from studio.kernel.tree import (
    collect_ids,
    deep_clone_node,
    duplicate_node_in_tree,
    find_location,
    find_node_by_id,
    find_parent,
    insert_node_in_tree,
    is_descendant,
    iter_nodes,
    move_node_in_tree,
    remove_node_from_tree,
    reorder_node_in_tree,
    update_multiple_nodes_in_tree,
    update_node_in_tree,
)
from studio.kernel.types import (
    NODE_LEVEL_FIELDS,
    ROOT_CONTAINER_ID,
    STACK_TYPES,
    ReduceResult,
    TreeValidationError,
    ValidationIssue,
    ValidationResult,
    Warning,
)
from studio.kernel.validation import validate_tree

logger = logging.getLogger(__name__)

State = dict[str, Any]
Payload = dict[str, Any]

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def empty_state(
    projects: list[dict[str, Any]] | None = None,
    current_project_id: str | None = None,
) -> State:
    """
    A fresh editor state. Without arguments: one untitled project with one
    empty page.
    """
    if not projects:
        projects = [make_project()]
    if current_project_id is None:
        current_project_id = projects[0]["id"]
    return {
        "projects": projects,
        "current_project_id": current_project_id,
        "selected_node_ids": [ROOT_CONTAINER_ID],
        "grid_lines_visible": [],
        "clipboard": None,
        "cut_node_id": None,
        "is_play_mode": False,
        "editing_mode": "selection",
        "editing_global_component_id": None,
        "is_dirty": False,
        "history": history.initial_history(projects, current_project_id),
    }


def reduce(
    state: State,
    action: Action | dict[str, Any],
    *,
    registry: ComponentRegistry = DEFAULT_REGISTRY,
) -> ReduceResult:
    """
    Apply one action to the current state.
    Returns new state + applied flag + warnings/errors.
    """
    if isinstance(action, dict):
        action = Action.from_dict(action)

    handler = _HANDLERS.get(action.type)
    if handler is None:
        result = _reject(state, "UNKNOWN_ACTION", action.type)
    else:
        result = handler(state, action.payload or {}, registry)

    if result.error:
        logger.warning("%s: %s", action.type, result.error)
    elif result.applied and action.type in HISTORY_ACTIONS and not action.skip_history:
        result.state = history.commit(result.state)
    return result


def reduce_with_dirty_tracking(
    state: State,
    action: Action | dict[str, Any],
    *,
    registry: ComponentRegistry = DEFAULT_REGISTRY,
) -> ReduceResult:
    """reduce(), then flag unsaved changes for applied content-modifying actions."""
    if isinstance(action, dict):
        action = Action.from_dict(action)
    result = reduce(state, action, registry=registry)
    result.state = history.track_dirty(result.state, action.type, result.applied)
    return result


def replay(
    actions: Iterable[Action | dict[str, Any]],
    state: State | None = None,
    *,
    registry: ComponentRegistry = DEFAULT_REGISTRY,
) -> State:
    """Fold actions over a state (a fresh one by default), skipping rejected ones."""
    if state is None:
        state = empty_state()
    for action in actions:
        result = reduce_with_dirty_tracking(state, action, registry=registry)
        if result.applied:
            state = result.state
    return state


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _reject(state: State, code: str, msg: str) -> ReduceResult:
    return ReduceResult(state=state, applied=False, warnings=[Warning(code=code, message=msg)], error=f"{code}: {msg}")


def _noop(state: State, msg: str) -> ReduceResult:
    """A legal request that changes nothing."""
    return ReduceResult(state=state, applied=False, warnings=[Warning(code="NO_CHANGE", message=msg)])


def _ok(state: State, warnings: list[Warning] | None = None) -> ReduceResult:
    return ReduceResult(state=state, applied=True, warnings=warnings or [])


def _missing(p: Payload, *keys: str) -> str | None:
    for key in keys:
        if p.get(key) is None:
            return key
    return None


def _no_project(state: State) -> ReduceResult:
    return _reject(state, "PROJECT_NOT_FOUND", str(state.get("current_project_id")))


def _set_project(state: State, project: dict[str, Any], **changes: Any) -> State:
    projects = replace_project(state["projects"], project["id"], lambda _: project)
    return {**state, "projects": projects, **changes}


def _set_tree(state: State, project: dict[str, Any], tree: list[dict[str, Any]], **changes: Any) -> State:
    return _set_project(state, with_current_tree(project, tree), **changes)


def _split_props(props: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    """Separate node-level layout fields from ordinary props."""
    node_fields: dict[str, Any] = {}
    rest: dict[str, Any] = {}
    for key, value in props.items():
        if key in NODE_LEVEL_FIELDS:
            node_fields[NODE_LEVEL_FIELDS[key]] = value
        else:
            rest[key] = value
    return node_fields, rest


def _props_updater(props: dict[str, Any]):
    node_fields, rest = _split_props(props)

    def apply(node: dict[str, Any]) -> dict[str, Any]:
        updated = {**node, "props": {**(node.get("props") or {}), **rest}}
        for key, value in node_fields.items():
            # None clears a layout field
            if value is None:
                updated.pop(key, None)
            else:
                updated[key] = value
        return updated

    return apply


def _edit_nodes(state: State, node_ids: list[str], update_fn) -> ReduceResult:
    """
    Apply update_fn to nodes of the editing target: the page, or in isolation
    mode the definition, whose instances are then re-synced.
    """
    project = get_current_project(state)
    if project is None:
        return _no_project(state)

    gc_id = state.get("editing_global_component_id")
    if gc_id:
        definition = find_definition(project, gc_id)
        if definition is None:
            return _reject(state, "GLOBAL_COMPONENT_NOT_FOUND", gc_id)
        updated = update_multiple_nodes_in_tree([definition], node_ids, update_fn)
        if updated[0] is definition:
            return _reject(state, "NODE_NOT_FOUND", f"{', '.join(node_ids)} in global component {gc_id}")
        new_definition = {**updated[0], "id": gc_id}
        definitions = [new_definition if d.get("id") == gc_id else d for d in project["global_components"]]
        project = resync_instances({**project, "global_components": definitions}, gc_id)
        return _ok(_set_project(state, touch(project)))

    tree = get_current_tree(state)
    new_tree = update_multiple_nodes_in_tree(tree, node_ids, update_fn)
    if new_tree is tree:
        return _reject(state, "NODE_NOT_FOUND", ", ".join(node_ids))
    return _ok(_set_tree(state, project, new_tree))


def _check_insertable(
    state: State,
    project: dict[str, Any],
    tree: list[dict[str, Any]],
    node: dict[str, Any],
    parent_id: str,
    registry: ComponentRegistry,
) -> ReduceResult | None:
    """Reject result for a node that cannot go under parent_id, else None."""
    parent = find_node_by_id(tree, parent_id)
    if parent is None:
        return _reject(state, "NODE_NOT_FOUND", f"parent {parent_id}")
    if not registry.accepts_children(parent.get("type", "")):
        return _reject(state, "NOT_A_CONTAINER", f"{parent_id} ({parent.get('type')}) does not accept children")
    result = validate_tree([node], registry)
    if not result.valid:
        return _reject(state, "INVALID_NODE", result.format())
    clashes = collect_ids([node]) & project_node_ids(project)
    if clashes:
        return _reject(state, "DUPLICATE_ID", ", ".join(sorted(clashes)))
    return None


def _grid_ids(tree: list[dict[str, Any]]) -> list[str]:
    return [n["id"] for n in iter_nodes(tree) if n.get("type") == "Grid"]


# ---------------------------------------------------------------------------
# Component tree
# ---------------------------------------------------------------------------


def _handle_update_props(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "id", "props"):
        return _reject(state, "MISSING_FIELD", key)
    return _edit_nodes(state, [p["id"]], _props_updater(p["props"]))


def _handle_update_multiple_props(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "ids", "props"):
        return _reject(state, "MISSING_FIELD", key)
    if not p["ids"]:
        return _noop(state, "no ids given")
    return _edit_nodes(state, list(p["ids"]), _props_updater(p["props"]))


def _handle_update_name(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "id"):
        return _reject(state, "MISSING_FIELD", key)
    name = p.get("name")

    def rename(node: dict[str, Any]) -> dict[str, Any]:
        renamed = {k: v for k, v in node.items() if k != "name"}
        if name:
            renamed["name"] = name
        return renamed

    return _edit_nodes(state, [p["id"]], rename)


def _handle_insert(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    node = p.get("node")
    if not isinstance(node, dict) or not node.get("id"):
        return _reject(state, "MISSING_FIELD", "node")
    project = get_current_project(state)
    if project is None:
        return _no_project(state)

    tree = get_current_tree(state)
    parent_id = p.get("parent_id") or ROOT_CONTAINER_ID
    rejected = _check_insertable(state, project, tree, node, parent_id, registry)
    if rejected:
        return rejected

    new_tree = insert_node_in_tree(tree, node, parent_id, p.get("index"))
    parent = find_node_by_id(tree, parent_id)
    keep_parent = parent.get("type") in settings.INSERTION_CONTAINER_TYPES
    selected = [parent_id] if keep_parent else [node["id"]]
    return _ok(_set_tree(state, project, new_tree, selected_node_ids=selected))


def _handle_remove(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "id"):
        return _reject(state, "MISSING_FIELD", key)
    node_id = p["id"]
    if node_id == ROOT_CONTAINER_ID:
        return _reject(state, "ROOT_PROTECTED", "the root container cannot be removed")
    project = get_current_project(state)
    if project is None:
        return _no_project(state)

    tree = get_current_tree(state)
    new_tree = remove_node_from_tree(tree, node_id)
    if new_tree is tree:
        return _reject(state, "NODE_NOT_FOUND", node_id)

    remaining = set(collect_ids(new_tree))
    selected = [i for i in state["selected_node_ids"] if i in remaining] or [ROOT_CONTAINER_ID]
    return _ok(_set_tree(state, project, new_tree, selected_node_ids=selected))


def _handle_duplicate(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "id"):
        return _reject(state, "MISSING_FIELD", key)
    if p["id"] == ROOT_CONTAINER_ID:
        return _reject(state, "ROOT_PROTECTED", "the root container cannot be duplicated")
    project = get_current_project(state)
    if project is None:
        return _no_project(state)

    new_tree, new_id = duplicate_node_in_tree(get_current_tree(state), p["id"])
    if new_id is None:
        return _reject(state, "NODE_NOT_FOUND", p["id"])
    return _ok(_set_tree(state, project, new_tree, selected_node_ids=[new_id]))


def _handle_move(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "id", "direction"):
        return _reject(state, "MISSING_FIELD", key)
    if p["direction"] not in ("up", "down"):
        return _reject(state, "INVALID_DIRECTION", str(p["direction"]))
    project = get_current_project(state)
    if project is None:
        return _no_project(state)

    tree = get_current_tree(state)
    if find_location(tree, p["id"]) is None:
        return _reject(state, "NODE_NOT_FOUND", p["id"])
    new_tree = move_node_in_tree(tree, p["id"], p["direction"])
    if new_tree is tree:
        return _noop(state, f"{p['id']} is already at the {'top' if p['direction'] == 'up' else 'bottom'}")
    return _ok(_set_tree(state, project, new_tree))


def _handle_reorder(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "active_id", "over_id"):
        return _reject(state, "MISSING_FIELD", key)
    active_id, over_id = p["active_id"], p["over_id"]
    position = p.get("position") or "before"
    if active_id == over_id:
        return _noop(state, "node dropped onto itself")
    if position not in ("before", "after", "inside"):
        return _reject(state, "INVALID_POSITION", str(position))
    if active_id == ROOT_CONTAINER_ID:
        return _reject(state, "ROOT_PROTECTED", "the root container cannot be moved")
    project = get_current_project(state)
    if project is None:
        return _no_project(state)

    tree = get_current_tree(state)
    active = find_node_by_id(tree, active_id)
    over = find_node_by_id(tree, over_id)
    if active is None or over is None:
        return _reject(state, "NODE_NOT_FOUND", active_id if active is None else over_id)

    if position == "inside":
        if not registry.accepts_children(over.get("type", "")):
            return _reject(state, "NOT_A_CONTAINER", f"{over_id} ({over.get('type')}) does not accept children")
        if is_descendant(active, over_id):
            return _reject(state, "CYCLE", f"cannot move {active_id} into its own subtree")
    else:
        active_parent = find_parent(tree, active_id)
        over_parent = find_parent(tree, over_id)
        if (active_parent or {}).get("id") != (over_parent or {}).get("id"):
            return _reject(state, "DIFFERENT_PARENTS", f"{active_id} and {over_id} are not siblings")

    new_tree = reorder_node_in_tree(tree, active_id, over_id, position, registry)
    if new_tree is tree:
        return _noop(state, "order unchanged")
    return _ok(_set_tree(state, project, new_tree))


def _handle_set_tree(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    tree = p.get("tree")
    result = validate_tree(tree, registry)
    if result.valid:
        project = get_current_project(state)
        if project is None:
            return _no_project(state)
        elsewhere: set[str] = set()
        for page in project["pages"]:
            if page["id"] != project["current_page_id"]:
                elsewhere |= collect_ids(page["tree"])
        elsewhere |= collect_ids(project.get("global_components") or [])
        clashes = (collect_ids(tree) & elsewhere) - {ROOT_CONTAINER_ID}
        if clashes:
            result = ValidationResult(
                valid=False,
                errors=[ValidationIssue("tree", f'Node ID "{node_id}" is already used in this project') for node_id in sorted(clashes)],
            )
    if not result.valid:
        logger.error("SET_TREE validation failed:\n%s", result.format())
        raise TreeValidationError(result)

    return _ok(_set_tree(state, project, tree))


# ---------------------------------------------------------------------------
# Grouping and layout
# ---------------------------------------------------------------------------


def _handle_group(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    node_ids = list(dict.fromkeys(p.get("ids") or []))
    if not node_ids:
        return _reject(state, "MISSING_FIELD", "ids")
    if ROOT_CONTAINER_ID in node_ids:
        return _reject(state, "ROOT_PROTECTED", "the root container cannot be grouped")
    project = get_current_project(state)
    if project is None:
        return _no_project(state)

    tree = get_current_tree(state)
    locations = {}
    for node_id in node_ids:
        location = find_location(tree, node_id)
        if location is None:
            return _reject(state, "NODE_NOT_FOUND", node_id)
        locations[node_id] = location

    parent_ids = {(parent or {}).get("id") for parent, _ in locations.values()}
    if len(parent_ids) != 1:
        return _reject(state, "DIFFERENT_PARENTS", "cannot group nodes with different parents")
    parent = next(iter(locations.values()))[0]
    if parent is None:
        return _reject(state, "ROOT_PROTECTED", "top-level nodes cannot be grouped")

    siblings = parent["children"]
    indices = sorted(index for _, index in locations.values())
    spacing = (parent.get("props") or {}).get("spacing")
    wrapper_type = "HStack" if len(node_ids) == 1 else "VStack"
    is_grid = parent.get("type") == "Grid"

    children = []
    for index in indices:
        child = copy.deepcopy(siblings[index])
        child.pop("grid_column_span", None)
        child.pop("grid_row_span", None)
        children.append(child)

    wrapper: dict[str, Any] = {
        "id": ids.generate_id(),
        "type": wrapper_type,
        "props": {
            "spacing": spacing if spacing in (2, 4) else 2,
            "alignment": "center" if wrapper_type == "HStack" else "stretch",
        },
        "children": children,
    }
    first_span = siblings[indices[0]].get("grid_column_span")
    if first_span:
        wrapper["grid_column_span"] = first_span
    if is_grid:
        wrapper["props"]["height"] = "auto"

    grouped = set(node_ids)
    remaining = [child for child in siblings if child["id"] not in grouped]
    remaining.insert(indices[0], wrapper)
    new_tree = update_node_in_tree(tree, parent["id"], lambda n: {**n, "children": remaining})
    return _ok(_set_tree(state, project, new_tree, selected_node_ids=[wrapper["id"]]))


def _handle_ungroup(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "id"):
        return _reject(state, "MISSING_FIELD", key)
    project = get_current_project(state)
    if project is None:
        return _no_project(state)

    tree = get_current_tree(state)
    location = find_location(tree, p["id"])
    if location is None:
        return _reject(state, "NODE_NOT_FOUND", p["id"])
    parent, index = location
    container = (tree if parent is None else parent["children"])[index]
    if container.get("type") not in STACK_TYPES:
        return _reject(state, "NOT_A_STACK", f"can only ungroup VStack or HStack, got {container.get('type')}")
    if not container.get("children"):
        return _reject(state, "EMPTY_CONTAINER", f"{p['id']} has no children")
    if parent is None:
        return _reject(state, "ROOT_PROTECTED", "top-level nodes cannot be ungrouped")

    released = []
    for child in container["children"]:
        child = copy.deepcopy(child)
        if parent.get("type") == "Grid":
            for field in ("grid_column_span", "grid_row_span"):
                if container.get(field):
                    child[field] = container[field]
            child["props"] = {**(child.get("props") or {}), "height": "auto"}
        released.append(child)

    siblings = parent["children"]
    new_children = siblings[:index] + released + siblings[index + 1 :]
    new_tree = update_node_in_tree(tree, parent["id"], lambda n: {**n, "children": new_children})
    return _ok(_set_tree(state, project, new_tree, selected_node_ids=[released[0]["id"]]))


def _handle_swap_layout(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "id", "new_type"):
        return _reject(state, "MISSING_FIELD", key)
    project = get_current_project(state)
    if project is None:
        return _no_project(state)

    tree = get_current_tree(state)
    node = find_node_by_id(tree, p["id"])
    if node is None:
        return _reject(state, "NODE_NOT_FOUND", p["id"])
    new_type = p["new_type"]
    if node.get("type") not in STACK_TYPES or new_type not in STACK_TYPES:
        return _reject(state, "NOT_A_STACK", "can only swap VStack <-> HStack")
    if node["type"] == new_type:
        return _noop(state, f"{p['id']} is already a {new_type}")

    props = swap_stack_props(node["type"], node.get("props") or {}, registry.default_props(new_type))
    new_tree = update_node_in_tree(tree, p["id"], lambda n: {**n, "type": new_type, "props": props})
    return _ok(_set_tree(state, project, new_tree))


# ---------------------------------------------------------------------------
# Global components
# ---------------------------------------------------------------------------


def _handle_make_global(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "node_id"):
        return _reject(state, "MISSING_FIELD", key)
    node_id = p["node_id"]
    if node_id == ROOT_CONTAINER_ID:
        return _reject(state, "ROOT_PROTECTED", "the root container cannot become a global component")
    project = get_current_project(state)
    if project is None:
        return _no_project(state)

    tree = get_current_tree(state)
    node = find_node_by_id(tree, node_id)
    if node is None:
        return _reject(state, "NODE_NOT_FOUND", node_id)
    if is_instance(node):
        return _reject(state, "ALREADY_AN_INSTANCE", f"{node_id} must be detached first")
    if find_definition(project, node_id) is not None:
        return _reject(state, "ALREADY_EXISTS", f"global component {node_id}")

    definition = make_definition(node, node_id, p.get("name"))
    instance = clone_as_instance(definition, node_id)
    new_tree = update_node_in_tree(tree, node_id, lambda _: instance)
    project = with_current_tree(project, new_tree)
    project = {**project, "global_components": [*(project.get("global_components") or []), definition]}
    return _ok(_set_project(state, project, selected_node_ids=[instance["id"]]))


def _handle_insert_instance(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "global_component_id"):
        return _reject(state, "MISSING_FIELD", key)
    gc_id = p["global_component_id"]
    project = get_current_project(state)
    if project is None:
        return _no_project(state)
    definition = find_definition(project, gc_id)
    if definition is None:
        return _reject(state, "GLOBAL_COMPONENT_NOT_FOUND", gc_id)

    tree = get_current_tree(state)
    instance = clone_as_instance(definition, gc_id)
    parent_id = p.get("parent_id") or ROOT_CONTAINER_ID
    rejected = _check_insertable(state, project, tree, instance, parent_id, registry)
    if rejected:
        return rejected

    new_tree = insert_node_in_tree(tree, instance, parent_id, p.get("index"))
    return _ok(_set_tree(state, project, new_tree, selected_node_ids=[instance["id"]]))


def _handle_update_global(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "global_component_id", "node"):
        return _reject(state, "MISSING_FIELD", key)
    gc_id = p["global_component_id"]
    project = get_current_project(state)
    if project is None:
        return _no_project(state)
    current = find_definition(project, gc_id)
    if current is None:
        return _reject(state, "GLOBAL_COMPONENT_NOT_FOUND", gc_id)

    definition = make_definition(p["node"], gc_id, p["node"].get("name") or current.get("name"))
    result = validate_tree([definition], registry)
    if not result.valid:
        return _reject(state, "INVALID_NODE", result.format())
    clashes = (collect_ids([definition]) - collect_ids([current])) & project_node_ids(project)
    if clashes:
        return _reject(state, "DUPLICATE_ID", ", ".join(sorted(clashes)))

    definitions = [definition if d.get("id") == gc_id else d for d in project["global_components"]]
    project = resync_instances({**project, "global_components": definitions}, gc_id)
    return _ok(_set_project(state, touch(project)))


def _handle_delete_global(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "global_component_id"):
        return _reject(state, "MISSING_FIELD", key)
    gc_id = p["global_component_id"]
    project = get_current_project(state)
    if project is None:
        return _no_project(state)
    if find_definition(project, gc_id) is None:
        return _reject(state, "GLOBAL_COMPONENT_NOT_FOUND", gc_id)

    project = detach_instances(project, gc_id)
    definitions = [d for d in project["global_components"] if d.get("id") != gc_id]
    project = touch(project, global_components=definitions)

    editing = state.get("editing_global_component_id")
    return _ok(_set_project(state, project, editing_global_component_id=None if editing == gc_id else editing))


def _handle_detach_instance(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "node_id"):
        return _reject(state, "MISSING_FIELD", key)
    project = get_current_project(state)
    if project is None:
        return _no_project(state)

    tree = get_current_tree(state)
    node = find_node_by_id(tree, p["node_id"])
    if node is None:
        return _reject(state, "NODE_NOT_FOUND", p["node_id"])
    if not is_instance(node):
        return _reject(state, "NOT_AN_INSTANCE", p["node_id"])

    # A click inside an instance detaches the innermost instance around it.
    roots = [r for r in instance_roots(tree) if is_descendant(r, p["node_id"])]
    root = roots[-1] if roots else node
    new_tree = update_node_in_tree(tree, root["id"], strip_instance_tags)
    return _ok(_set_tree(state, project, new_tree))


def _handle_set_editing_global(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    gc_id = p.get("global_component_id")
    if gc_id is not None:
        project = get_current_project(state)
        if project is None:
            return _no_project(state)
        if find_definition(project, gc_id) is None:
            return _reject(state, "GLOBAL_COMPONENT_NOT_FOUND", gc_id)
    return _ok({**state, "editing_global_component_id": gc_id})


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


def _handle_set_selection(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    return _ok({**state, "selected_node_ids": list(p.get("ids") or [])})


def _handle_toggle_selection(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "id"):
        return _reject(state, "MISSING_FIELD", key)
    node_id = p["id"]
    current = list(state["selected_node_ids"])

    if p.get("range_select") and current:
        tree = get_editing_tree(state)
        last_id = current[-1]
        last_parent = find_parent(tree, last_id)
        clicked_parent = find_parent(tree, node_id)
        if last_parent is not None and clicked_parent is not None and last_parent["id"] == clicked_parent["id"]:
            sibling_ids = [c["id"] for c in last_parent.get("children") or []]
            start, end = sorted((sibling_ids.index(last_id), sibling_ids.index(node_id)))
            selected = list(dict.fromkeys(current + sibling_ids[start : end + 1]))
        else:
            selected = current + [node_id]
    elif p.get("multi_select"):
        if node_id in current:
            selected = [i for i in current if i != node_id] or [ROOT_CONTAINER_ID]
        else:
            selected = current + [node_id]
    else:
        selected = [node_id]

    return _ok({**state, "selected_node_ids": selected})


# ---------------------------------------------------------------------------
# Pages
# ---------------------------------------------------------------------------


def _handle_set_current_page(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "page_id"):
        return _reject(state, "MISSING_FIELD", key)
    project = get_current_project(state)
    if project is None:
        return _no_project(state)
    if find_page(project, p["page_id"]) is None:
        return _reject(state, "PAGE_NOT_FOUND", p["page_id"])
    if project["current_page_id"] == p["page_id"]:
        return _noop(state, f"{p['page_id']} is already the current page")
    return _ok(_set_project(state, touch(project, current_page_id=p["page_id"]), selected_node_ids=[ROOT_CONTAINER_ID]))


def _handle_add_page(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    project = get_current_project(state)
    if project is None:
        return _no_project(state)
    page = p.get("page") or make_page(name=p.get("name") or f"Page {len(project['pages']) + 1}")
    if find_page(project, page.get("id")) is not None:
        return _reject(state, "ALREADY_EXISTS", f"page {page.get('id')}")

    result = validate_project({**project, "pages": [*project["pages"], page]}, registry)
    if not result.valid:
        return _reject(state, "INVALID_PAGE", result.format())

    project = touch(project, pages=[*project["pages"], page], current_page_id=page["id"])
    return _ok(_set_project(state, project, selected_node_ids=[], grid_lines_visible=[]))


def _handle_delete_page(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "page_id"):
        return _reject(state, "MISSING_FIELD", key)
    project = get_current_project(state)
    if project is None:
        return _no_project(state)
    if find_page(project, p["page_id"]) is None:
        return _reject(state, "PAGE_NOT_FOUND", p["page_id"])
    if len(project["pages"]) == 1:
        return _reject(state, "LAST_PAGE", "a project needs at least one page")

    pages = [page for page in project["pages"] if page["id"] != p["page_id"]]
    current_page_id = project["current_page_id"]
    if current_page_id == p["page_id"]:
        current_page_id = pages[0]["id"]
    project = touch(project, pages=pages, current_page_id=current_page_id)
    return _ok(_set_project(state, project, selected_node_ids=[]))


def _handle_rename_page(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "page_id", "name"):
        return _reject(state, "MISSING_FIELD", key)
    project = get_current_project(state)
    if project is None:
        return _no_project(state)
    if find_page(project, p["page_id"]) is None:
        return _reject(state, "PAGE_NOT_FOUND", p["page_id"])
    pages = [{**page, "name": p["name"]} if page["id"] == p["page_id"] else page for page in project["pages"]]
    return _ok(_set_project(state, touch(project, pages=pages)))


def _handle_duplicate_page(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "page_id"):
        return _reject(state, "MISSING_FIELD", key)
    project = get_current_project(state)
    if project is None:
        return _no_project(state)
    source = find_page(project, p["page_id"])
    if source is None:
        return _reject(state, "PAGE_NOT_FOUND", p["page_id"])
    new_page_id = p.get("new_page_id") or ids.generate_page_id()
    if find_page(project, new_page_id) is not None:
        return _reject(state, "ALREADY_EXISTS", f"page {new_page_id}")

    page = {
        **copy.deepcopy(source),
        "id": new_page_id,
        "name": f"{source['name']} Copy",
        "tree": clone_page_tree(source["tree"]),
    }
    project = touch(project, pages=[*project["pages"], page], current_page_id=new_page_id)
    return _ok(_set_project(state, project, selected_node_ids=[ROOT_CONTAINER_ID]))


def _handle_reorder_pages(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "from_index", "to_index"):
        return _reject(state, "MISSING_FIELD", key)
    project = get_current_project(state)
    if project is None:
        return _no_project(state)
    pages = list(project["pages"])
    from_index, to_index = p["from_index"], p["to_index"]
    if not (0 <= from_index < len(pages) and 0 <= to_index < len(pages)):
        return _reject(state, "INVALID_INDEX", f"{from_index} -> {to_index} with {len(pages)} pages")
    if from_index == to_index:
        return _noop(state, "page order unchanged")
    pages.insert(to_index, pages.pop(from_index))
    return _ok(_set_project(state, touch(project, pages=pages)))


def _update_page(state: State, page_id: str, update_fn) -> ReduceResult:
    project = get_current_project(state)
    if project is None:
        return _no_project(state)
    if find_page(project, page_id) is None:
        return _reject(state, "PAGE_NOT_FOUND", page_id)
    pages = [update_fn(page) if page["id"] == page_id else page for page in project["pages"]]
    return _ok(_set_project(state, touch(project, pages=pages)))


def _handle_update_page_theme(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "page_id", "theme"):
        return _reject(state, "MISSING_FIELD", key)
    return _update_page(state, p["page_id"], lambda page: {**page, "theme": {**(page.get("theme") or {}), **p["theme"]}})


def _handle_update_page_canvas_position(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "page_id", "position"):
        return _reject(state, "MISSING_FIELD", key)
    return _update_page(state, p["page_id"], lambda page: {**page, "canvas_position": dict(p["position"])})


def _handle_update_all_canvas_positions(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    positions = p.get("positions") or {}
    project = get_current_project(state)
    if project is None:
        return _no_project(state)
    pages = [
        {**page, "canvas_position": dict(positions[page["id"]])} if page["id"] in positions else page
        for page in project["pages"]
    ]
    return _ok(_set_project(state, touch(project, pages=pages)))


def _handle_set_pages(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    pages = p.get("pages")
    project = get_current_project(state)
    if project is None:
        return _no_project(state)
    result = validate_project({**project, "pages": pages}, registry)
    if result.valid and not pages:
        result = ValidationResult(False, [ValidationIssue("pages", "A project needs at least one page")])
    if not result.valid:
        logger.error("SET_PAGES validation failed:\n%s", result.format())
        raise TreeValidationError(result, context="pages")

    current_page_id = project["current_page_id"]
    if not any(page["id"] == current_page_id for page in pages):
        current_page_id = pages[0]["id"]
    return _ok(_set_project(state, touch(project, pages=list(pages), current_page_id=current_page_id)))


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


def _switch_project(state: State, projects: list[dict[str, Any]], project_id: str) -> State:
    return {
        **state,
        "projects": projects,
        "current_project_id": project_id,
        "selected_node_ids": [ROOT_CONTAINER_ID],
        "grid_lines_visible": [],
        "editing_global_component_id": None,
    }


def _handle_create_project(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    project = p.get("project") or make_project(name=p.get("name") or "Untitled Project")
    if find_project(state["projects"], project.get("id")) is not None:
        return _reject(state, "ALREADY_EXISTS", f"project {project.get('id')}")
    result = validate_project(project, registry)
    if not result.valid:
        return _reject(state, "INVALID_PROJECT", result.format())
    return _ok(_switch_project(state, [*state["projects"], project], project["id"]))


def _handle_set_current_project(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "project_id"):
        return _reject(state, "MISSING_FIELD", key)
    if find_project(state["projects"], p["project_id"]) is None:
        return _reject(state, "PROJECT_NOT_FOUND", p["project_id"])
    if state["current_project_id"] == p["project_id"]:
        return _noop(state, f"{p['project_id']} is already the current project")
    return _ok(_switch_project(state, state["projects"], p["project_id"]))


def _handle_delete_project(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "project_id"):
        return _reject(state, "MISSING_FIELD", key)
    target = find_project(state["projects"], p["project_id"])
    if target is None:
        return _reject(state, "PROJECT_NOT_FOUND", p["project_id"])
    if len(state["projects"]) == 1:
        return _reject(state, "LAST_PROJECT", "at least one project must remain")
    if target.get("is_example_project"):
        return _reject(state, "EXAMPLE_PROJECT_PROTECTED", f"cannot delete example project {target.get('name')!r}")

    projects = [project for project in state["projects"] if project["id"] != p["project_id"]]
    if state["current_project_id"] == p["project_id"]:
        return _ok(_switch_project(state, projects, projects[0]["id"]))
    return _ok({**state, "projects": projects})


def _handle_rename_project(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "project_id", "name"):
        return _reject(state, "MISSING_FIELD", key)
    target = find_project(state["projects"], p["project_id"])
    if target is None:
        return _reject(state, "PROJECT_NOT_FOUND", p["project_id"])
    if target.get("is_example_project"):
        return _reject(state, "EXAMPLE_PROJECT_PROTECTED", f"cannot rename example project {target.get('name')!r}")
    return _ok(_set_project(state, touch(target, name=p["name"])))


def _handle_duplicate_project(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "project_id"):
        return _reject(state, "MISSING_FIELD", key)
    source = find_project(state["projects"], p["project_id"])
    if source is None:
        return _reject(state, "PROJECT_NOT_FOUND", p["project_id"])
    new_project_id = p.get("new_project_id") or ids.generate_project_id()
    if find_project(state["projects"], new_project_id) is not None:
        return _reject(state, "ALREADY_EXISTS", f"project {new_project_id}")

    duplicate = touch(
        copy.deepcopy(source),
        id=new_project_id,
        name=f"{source['name']} (Copy)",
        is_example_project=False,
    )
    return _ok(_switch_project(state, [*state["projects"], duplicate], new_project_id))


def _handle_reset_example_project(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "project"):
        return _reject(state, "MISSING_FIELD", key)
    if not any(project.get("is_example_project") for project in state["projects"]):
        return _reject(state, "PROJECT_NOT_FOUND", "there is no example project to reset")
    fresh = copy.deepcopy(p["project"])
    result = validate_project(fresh, registry)
    if not result.valid:
        return _reject(state, "INVALID_PROJECT", result.format())

    fresh = touch(fresh, current_page_id=fresh["pages"][0]["id"], is_example_project=True)
    projects = [fresh if project.get("is_example_project") else project for project in state["projects"]]
    return _ok(_switch_project(state, projects, fresh["id"]))


def _handle_update_project_theme(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    project = get_current_project(state)
    if project is None:
        return _no_project(state)
    return _ok(_set_project(state, touch(project, theme={**(project.get("theme") or {}), **(p.get("theme") or {})})))


def _handle_update_project_layout(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    project = get_current_project(state)
    if project is None:
        return _no_project(state)
    return _ok(_set_project(state, touch(project, layout={**(project.get("layout") or {}), **(p.get("layout") or {})})))


def _handle_update_project_description(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    project = get_current_project(state)
    if project is None:
        return _no_project(state)
    project = touch(project)
    if p.get("description"):
        project["description"] = p["description"]
    else:
        project.pop("description", None)
    return _ok(_set_project(state, project))


def _handle_set_projects(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    projects = p.get("projects")
    if not isinstance(projects, list) or not projects:
        result = ValidationResult(False, [ValidationIssue("projects", "At least one project is required")])
        raise TreeValidationError(result, context="projects")
    for project in projects:
        result = validate_project(project, registry)
        if not result.valid:
            logger.error("SET_PROJECTS validation failed for %s:\n%s", project.get("id"), result.format())
            raise TreeValidationError(result, context=f'project "{project.get("id")}"')

    current_project_id = p.get("current_project_id") or state.get("current_project_id")
    if find_project(projects, current_project_id) is None:
        current_project_id = projects[0]["id"]
    return _ok({**state, "projects": list(projects), "current_project_id": current_project_id})


# ---------------------------------------------------------------------------
# Clipboard
# ---------------------------------------------------------------------------


def _handle_copy(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    node = p.get("node")
    if node is None and p.get("id"):
        node = find_node_by_id(get_editing_tree(state), p["id"])
        if node is None:
            return _reject(state, "NODE_NOT_FOUND", p["id"])
    if node is None:
        return _reject(state, "MISSING_FIELD", "id")
    return _ok({**state, "clipboard": copy.deepcopy(node), "cut_node_id": None})


def _handle_cut(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "id"):
        return _reject(state, "MISSING_FIELD", key)
    node_id = p["id"]
    if node_id == ROOT_CONTAINER_ID:
        return _reject(state, "ROOT_PROTECTED", "the root container cannot be cut")
    project = get_current_project(state)
    if project is None:
        return _no_project(state)

    tree = get_current_tree(state)
    node = find_node_by_id(tree, node_id)
    if node is None:
        return _reject(state, "NODE_NOT_FOUND", node_id)
    new_tree = remove_node_from_tree(tree, node_id)
    return _ok(
        _set_tree(
            state,
            project,
            new_tree,
            clipboard=copy.deepcopy(node),
            cut_node_id=node_id,
            selected_node_ids=[ROOT_CONTAINER_ID],
        )
    )


def _paste_target(state: State, tree: list[dict[str, Any]], registry: ComponentRegistry) -> str:
    """Smart paste: into a selected container, else next to the selected node."""
    selected = state.get("selected_node_ids") or []
    if not selected:
        return ROOT_CONTAINER_ID
    node = find_node_by_id(tree, selected[0])
    if node is None:
        return ROOT_CONTAINER_ID
    if registry.accepts_children(node.get("type", "")) and node.get("type") not in settings.PASTE_AS_SIBLING_TYPES:
        return node["id"]
    parent = find_parent(tree, node["id"])
    return parent["id"] if parent is not None else ROOT_CONTAINER_ID


def _handle_paste(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    clipboard = state.get("clipboard")
    if clipboard is None:
        return _reject(state, "EMPTY_CLIPBOARD", "nothing to paste")
    project = get_current_project(state)
    if project is None:
        return _no_project(state)

    tree = get_current_tree(state)
    parent_id = p.get("parent_id") or _paste_target(state, tree, registry)
    node = deep_clone_node(clipboard)
    warnings = []
    if is_instance(node) and find_definition(project, node["global_component_id"]) is None:
        node = strip_instance_tags(node)
        warnings.append(Warning("DETACHED", "pasted instance's global component no longer exists"))

    rejected = _check_insertable(state, project, tree, node, parent_id, registry)
    if rejected:
        return rejected

    new_tree = insert_node_in_tree(tree, node, parent_id, p.get("index"))
    return _ok(_set_tree(state, project, new_tree, selected_node_ids=[node["id"]], cut_node_id=None), warnings)


# ---------------------------------------------------------------------------
# Interactions
# ---------------------------------------------------------------------------


def _find_editing_node(state: State, node_id: str) -> dict[str, Any] | None:
    return find_node_by_id(get_editing_tree(state), node_id)


def _handle_add_interaction(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "node_id", "interaction"):
        return _reject(state, "MISSING_FIELD", key)
    interaction = {"id": ids.generate_id(), **p["interaction"]}
    return _edit_nodes(
        state,
        [p["node_id"]],
        lambda n: {**n, "interactions": [*(n.get("interactions") or []), interaction]},
    )


def _handle_remove_interaction(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "node_id", "interaction_id"):
        return _reject(state, "MISSING_FIELD", key)
    node = _find_editing_node(state, p["node_id"])
    if node is None:
        return _reject(state, "NODE_NOT_FOUND", p["node_id"])
    if not any(i.get("id") == p["interaction_id"] for i in node.get("interactions") or []):
        return _reject(state, "INTERACTION_NOT_FOUND", p["interaction_id"])
    return _edit_nodes(
        state,
        [p["node_id"]],
        lambda n: {**n, "interactions": [i for i in n.get("interactions") or [] if i.get("id") != p["interaction_id"]]},
    )


def _handle_update_interaction(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "node_id", "interaction_id", "interaction"):
        return _reject(state, "MISSING_FIELD", key)
    node = _find_editing_node(state, p["node_id"])
    if node is None:
        return _reject(state, "NODE_NOT_FOUND", p["node_id"])
    if not any(i.get("id") == p["interaction_id"] for i in node.get("interactions") or []):
        return _reject(state, "INTERACTION_NOT_FOUND", p["interaction_id"])

    def update(n: dict[str, Any]) -> dict[str, Any]:
        interactions = [
            {**i, **p["interaction"], "id": i["id"]} if i.get("id") == p["interaction_id"] else i
            for i in n.get("interactions") or []
        ]
        return {**n, "interactions": interactions}

    return _edit_nodes(state, [p["node_id"]], update)


# ---------------------------------------------------------------------------
# Editor UI state
# ---------------------------------------------------------------------------


def _handle_toggle_grid_lines(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    if key := _missing(p, "id"):
        return _reject(state, "MISSING_FIELD", key)
    visible = list(state.get("grid_lines_visible") or [])
    if p["id"] in visible:
        visible.remove(p["id"])
    else:
        visible.append(p["id"])
    return _ok({**state, "grid_lines_visible": visible})


def _handle_toggle_all_grid_lines(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    grid_ids = _grid_ids(get_current_tree(state))
    visible = list(state.get("grid_lines_visible") or [])
    if all(grid_id in visible for grid_id in grid_ids):
        visible = [i for i in visible if i not in grid_ids]
    else:
        visible += [grid_id for grid_id in grid_ids if grid_id not in visible]
    return _ok({**state, "grid_lines_visible": visible})


def _handle_set_grid_lines(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    return _ok({**state, "grid_lines_visible": list(dict.fromkeys(p.get("ids") or []))})


def _handle_set_play_mode(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    return _ok({**state, "is_play_mode": bool(p.get("is_play"))})


def _handle_set_editing_mode(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    mode = p.get("mode")
    if mode not in ("selection", "text"):
        return _reject(state, "INVALID_MODE", str(mode))
    return _ok({**state, "editing_mode": mode})


def _handle_mark_saved(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    return _ok({**state, "is_dirty": False})


def _handle_mark_dirty(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    return _ok({**state, "is_dirty": True})


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


def _leave_missing_isolation(state: State) -> State:
    gc_id = state.get("editing_global_component_id")
    project = get_current_project(state)
    if gc_id and (project is None or find_definition(project, gc_id) is None):
        return {**state, "editing_global_component_id": None}
    return state


def _handle_undo(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    restored = history.undo(state)
    if restored is None:
        return _reject(state, "NOTHING_TO_UNDO", "history is empty")
    return _ok(_leave_missing_isolation(restored))


def _handle_redo(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    restored = history.redo(state)
    if restored is None:
        return _reject(state, "NOTHING_TO_REDO", "no undone changes")
    return _ok(_leave_missing_isolation(restored))


def _handle_clear_history(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    return _ok(history.clear(state))


def _handle_reset_tree(state: State, p: Payload, registry: ComponentRegistry) -> ReduceResult:
    project = p.get("default_project") or make_project()
    result = validate_project(project, registry)
    if not result.valid:
        return _reject(state, "INVALID_PROJECT", result.format())
    reset = _switch_project(state, [project], project["id"])
    reset["history"] = history.initial_history(reset["projects"], project["id"])
    return _ok(reset)


# ---------------------------------------------------------------------------
# Dispatch table
# ---------------------------------------------------------------------------

_HANDLERS = {
    # Component tree
    "UPDATE_COMPONENT_PROPS": _handle_update_props,
    "UPDATE_MULTIPLE_COMPONENT_PROPS": _handle_update_multiple_props,
    "UPDATE_COMPONENT_NAME": _handle_update_name,
    "INSERT_COMPONENT": _handle_insert,
    "REMOVE_COMPONENT": _handle_remove,
    "DUPLICATE_COMPONENT": _handle_duplicate,
    "MOVE_COMPONENT": _handle_move,
    "REORDER_COMPONENT": _handle_reorder,
    "SET_TREE": _handle_set_tree,
    "GROUP_COMPONENTS": _handle_group,
    "UNGROUP_COMPONENTS": _handle_ungroup,
    "SWAP_LAYOUT_TYPE": _handle_swap_layout,
    # Global components
    "MAKE_GLOBAL_COMPONENT": _handle_make_global,
    "INSERT_GLOBAL_COMPONENT_INSTANCE": _handle_insert_instance,
    "UPDATE_GLOBAL_COMPONENT": _handle_update_global,
    "DELETE_GLOBAL_COMPONENT": _handle_delete_global,
    "DETACH_GLOBAL_COMPONENT_INSTANCE": _handle_detach_instance,
    "SET_EDITING_GLOBAL_COMPONENT": _handle_set_editing_global,
    # Selection
    "SET_SELECTED_NODE_IDS": _handle_set_selection,
    "TOGGLE_NODE_SELECTION": _handle_toggle_selection,
    # Pages
    "SET_CURRENT_PAGE": _handle_set_current_page,
    "ADD_PAGE": _handle_add_page,
    "DELETE_PAGE": _handle_delete_page,
    "RENAME_PAGE": _handle_rename_page,
    "DUPLICATE_PAGE": _handle_duplicate_page,
    "REORDER_PAGES": _handle_reorder_pages,
    "UPDATE_PAGE_THEME": _handle_update_page_theme,
    "UPDATE_PAGE_CANVAS_POSITION": _handle_update_page_canvas_position,
    "UPDATE_ALL_PAGE_CANVAS_POSITIONS": _handle_update_all_canvas_positions,
    "SET_PAGES": _handle_set_pages,
    # Projects
    "CREATE_PROJECT": _handle_create_project,
    "SET_CURRENT_PROJECT": _handle_set_current_project,
    "DELETE_PROJECT": _handle_delete_project,
    "RENAME_PROJECT": _handle_rename_project,
    "DUPLICATE_PROJECT": _handle_duplicate_project,
    "RESET_EXAMPLE_PROJECT": _handle_reset_example_project,
    "UPDATE_PROJECT_THEME": _handle_update_project_theme,
    "UPDATE_PROJECT_LAYOUT": _handle_update_project_layout,
    "UPDATE_PROJECT_DESCRIPTION": _handle_update_project_description,
    "SET_PROJECTS": _handle_set_projects,
    # Clipboard
    "COPY_COMPONENT": _handle_copy,
    "CUT_COMPONENT": _handle_cut,
    "PASTE_COMPONENT": _handle_paste,
    # Interactions
    "ADD_INTERACTION": _handle_add_interaction,
    "REMOVE_INTERACTION": _handle_remove_interaction,
    "UPDATE_INTERACTION": _handle_update_interaction,
    # Editor UI state
    "TOGGLE_GRID_LINES": _handle_toggle_grid_lines,
    "TOGGLE_ALL_GRID_LINES": _handle_toggle_all_grid_lines,
    "SET_GRID_LINES": _handle_set_grid_lines,
    "SET_PLAY_MODE": _handle_set_play_mode,
    "SET_EDITING_MODE": _handle_set_editing_mode,
    "MARK_SAVED": _handle_mark_saved,
    "MARK_DIRTY": _handle_mark_dirty,
    # History
    "UNDO": _handle_undo,
    "REDO": _handle_redo,
    "CLEAR_HISTORY": _handle_clear_history,
    "RESET_TREE": _handle_reset_tree,
}

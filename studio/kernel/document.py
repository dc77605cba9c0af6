"""
Studio Kernel — Document Model

Projects own pages and global component definitions; pages own one node
forest rooted at the root container. Everything here is a plain dict so the
whole document stays JSON-compatible.

Helpers in this module look things up, build fresh projects and pages, and
move documents in and out of the persisted shape.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from studio.kernel import ids
from studio.kernel.globals import dangling_instances, find_definition
from studio.kernel.models import DocumentModel
from studio.kernel.registry import DEFAULT_REGISTRY, ComponentRegistry
from studio.kernel.tree import Tree, collect_ids, deep_clone_node
from studio.kernel.types import (
    ROOT_CONTAINER_ID,
    ROOT_CONTAINER_TYPE,
    DocumentError,
    TreeValidationError,
    ValidationIssue,
    ValidationResult,
    now_ms,
)
from studio.kernel.validation import validate_pages, validate_tree

logger = logging.getLogger(__name__)

Project = dict[str, Any]
Page = dict[str, Any]


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def make_root_container(children: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    return {
        "id": ROOT_CONTAINER_ID,
        "type": ROOT_CONTAINER_TYPE,
        "name": "Root",
        "props": {"columns": 12, "gap": 24},
        "children": list(children or []),
    }


def make_page(name: str = "Page 1", page_id: str | None = None, tree: Tree | None = None) -> Page:
    return {
        "id": page_id or ids.generate_page_id(),
        "name": name,
        "tree": tree if tree is not None else [make_root_container()],
    }


def make_project(
    name: str = "Untitled Project",
    project_id: str | None = None,
    pages: list[Page] | None = None,
    is_example_project: bool = False,
) -> Project:
    pages = pages or [make_page()]
    return {
        "id": project_id or ids.generate_project_id(),
        "name": name,
        "pages": pages,
        "current_page_id": pages[0]["id"],
        "global_components": [],
        "last_modified": now_ms(),
        "is_example_project": is_example_project,
    }


def clone_page_tree(tree: Tree) -> Tree:
    """
    Copy a page forest with fresh ids everywhere except the root container.
    Grid placement is kept, so the copy lays out like the source page.
    """
    cloned = []
    for node in tree:
        if node.get("id") == ROOT_CONTAINER_ID:
            children = [deep_clone_node(c, keep_placement=True) for c in node.get("children") or []]
            cloned.append({**node, "children": children})
        else:
            cloned.append(deep_clone_node(node, keep_placement=True))
    return cloned


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


def find_project(projects: list[Project], project_id: str | None) -> Project | None:
    for project in projects:
        if project.get("id") == project_id:
            return project
    return None


def find_page(project: Project, page_id: str | None) -> Page | None:
    for page in project.get("pages") or []:
        if page.get("id") == page_id:
            return page
    return None


def get_current_project(state: dict[str, Any]) -> Project | None:
    return find_project(state.get("projects") or [], state.get("current_project_id"))


def get_current_page(state: dict[str, Any]) -> Page | None:
    project = get_current_project(state)
    if project is None:
        return None
    return find_page(project, project.get("current_page_id"))


def get_current_tree(state: dict[str, Any]) -> Tree:
    """The current page's forest, or [] if the state points nowhere."""
    page = get_current_page(state)
    return (page.get("tree") or []) if page is not None else []


def get_editing_tree(state: dict[str, Any]) -> Tree:
    """
    The forest edits are addressed to: the definition being edited in
    isolation, or the current page.
    """
    gc_id = state.get("editing_global_component_id")
    project = get_current_project(state)
    if gc_id and project is not None:
        definition = find_definition(project, gc_id)
        if definition is not None:
            return [definition]
    return get_current_tree(state)


def project_node_ids(project: Project) -> set[str]:
    """Every node id in use on any page or global component definition."""
    found: set[str] = set()
    for page in project.get("pages") or []:
        found |= collect_ids(page.get("tree") or [])
    found |= collect_ids(project.get("global_components") or [])
    return found


# ---------------------------------------------------------------------------
# Copy-on-write updates
# ---------------------------------------------------------------------------


def replace_project(
    projects: list[Project],
    project_id: str,
    update_fn: Callable[[Project], Project],
) -> list[Project]:
    return [update_fn(p) if p.get("id") == project_id else p for p in projects]


def with_current_tree(project: Project, tree: Tree) -> Project:
    pages = [
        {**page, "tree": tree} if page.get("id") == project.get("current_page_id") else page
        for page in project["pages"]
    ]
    return {**project, "pages": pages, "last_modified": now_ms()}


def touch(project: Project, **changes: Any) -> Project:
    """Copy of project with changes applied and last_modified bumped."""
    return {**project, **changes, "last_modified": now_ms()}


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_project(project: Project, registry: ComponentRegistry = DEFAULT_REGISTRY) -> ValidationResult:
    """Page trees, definitions and ids across both."""
    result = validate_pages(project.get("pages"), registry)
    issues = list(result.errors)

    page_ids: set[str] = set()
    if result.valid:
        for page in project["pages"]:
            page_ids |= collect_ids(page["tree"])

    for index, definition in enumerate(project.get("global_components") or []):
        path = f"global_components[{index}]"
        found = validate_tree([definition], registry)
        issues.extend(ValidationIssue(f"{path}.{i.path}", i.message, i.severity) for i in found.errors)
        if found.valid:
            for node_id in collect_ids([definition]) & page_ids:
                issues.append(ValidationIssue(path, f'Node ID "{node_id}" is also used on a page'))

    if result.valid:
        for page_id, node_id, gc_id in dangling_instances(project):
            issues.append(
                ValidationIssue(
                    f"pages[{page_id}]",
                    f'Node "{node_id}" is an instance of missing global component "{gc_id}"',
                    "warning",
                )
            )

    return ValidationResult(valid=not any(i.severity == "error" for i in issues), errors=issues)


# ---------------------------------------------------------------------------
# Load / dump
# ---------------------------------------------------------------------------


def load_document(
    data: dict[str, Any],
    registry: ComponentRegistry = DEFAULT_REGISTRY,
) -> tuple[list[Project], str]:
    """
    Parse a persisted document into (projects, current_project_id).

    Raises DocumentError if the JSON shape is wrong and TreeValidationError
    if any tree breaks the structural rules.
    """
    try:
        model = DocumentModel.model_validate(data)
    except ValidationError as e:
        raise DocumentError(f"Malformed document: {e}") from e

    dumped = model.model_dump(exclude_unset=True)
    projects: list[Project] = dumped["projects"]
    for project in projects:
        project.setdefault("global_components", [])
        project.setdefault("last_modified", 0)
        project.setdefault("is_example_project", False)

        if find_page(project, project["current_page_id"]) is None:
            raise DocumentError(
                f'Project "{project["id"]}" points at missing page "{project["current_page_id"]}"'
            )
        result = validate_project(project, registry)
        if not result.valid:
            raise TreeValidationError(result, context=f'project "{project["id"]}"')
        for issue in result.warnings:
            logger.warning("load_document: %s: %s", issue.path, issue.message)

    current_project_id = dumped["current_project_id"]
    if find_project(projects, current_project_id) is None:
        raise DocumentError(f'current_project_id "{current_project_id}" is not one of the projects')
    return projects, current_project_id


def dump_document(state: dict[str, Any]) -> dict[str, Any]:
    """The persisted shape: ``{"projects", "current_project_id"}``."""
    return {"projects": state["projects"], "current_project_id": state["current_project_id"]}

"""
Studio Kernel — Tree Validation

Structural checks run before any action replaces a page tree wholesale
(SET_TREE, SET_PAGES, SET_PROJECTS, document load).

Validation is structural (is the tree well formed for the registry?), not
semantic. Findings carry a path, a message and a severity; only "error"
findings make the tree invalid.

One walk does everything: per-node checks, duplicate ids, cycle detection
by object identity along the current path, and a depth ceiling, so a cyclic
``children`` graph is reported instead of recursing forever.
"""

from __future__ import annotations

from typing import Any

from studio.config import settings
from studio.kernel.registry import DEFAULT_REGISTRY, ComponentRegistry
from studio.kernel.types import ValidationIssue, ValidationResult

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_tree(
    tree: Any,
    registry: ComponentRegistry = DEFAULT_REGISTRY,
    max_depth: int | None = None,
) -> ValidationResult:
    """Validate a page forest. Returns ValidationResult(valid, errors)."""
    if max_depth is None:
        max_depth = settings.MAX_TREE_DEPTH

    issues: list[ValidationIssue] = []

    if not isinstance(tree, list) or not tree:
        issues.append(ValidationIssue("root", "Tree must be a non-empty array"))
        return ValidationResult(valid=False, errors=issues)

    walker = _Walker(registry, max_depth, issues)
    for index, node in enumerate(tree):
        walker.visit(node, f"tree[{index}]", depth=1)

    return ValidationResult(valid=not any(i.severity == "error" for i in issues), errors=issues)


def validate_pages(pages: Any, registry: ComponentRegistry = DEFAULT_REGISTRY) -> ValidationResult:
    """Validate every page tree and the uniqueness of ids across pages."""
    issues: list[ValidationIssue] = []
    if not isinstance(pages, list):
        return ValidationResult(False, [ValidationIssue("pages", "Pages must be an array")])

    owners: dict[str, str] = {}
    for index, page in enumerate(pages):
        if not isinstance(page, dict) or not isinstance(page.get("id"), str):
            issues.append(ValidationIssue(f"pages[{index}]", 'Page must be an object with a string "id"'))
            continue
        result = validate_tree(page.get("tree"), registry)
        issues.extend(
            ValidationIssue(f"pages[{page['id']}].{i.path}", i.message, i.severity) for i in result.errors
        )
        if not result.valid:
            continue
        for node_id in _ids_in(page["tree"]):
            if node_id == settings.ROOT_CONTAINER_ID:
                continue
            if node_id in owners and owners[node_id] != page["id"]:
                issues.append(
                    ValidationIssue(
                        f"pages[{page['id']}]",
                        f'Node ID "{node_id}" is also used on page "{owners[node_id]}"',
                    )
                )
            owners.setdefault(node_id, page["id"])

    return ValidationResult(valid=not any(i.severity == "error" for i in issues), errors=issues)


def _ids_in(tree: list[dict[str, Any]]) -> list[str]:
    found: list[str] = []
    stack = list(tree)
    while stack:
        node = stack.pop()
        found.append(node["id"])
        stack.extend(node.get("children") or [])
    return found


# ---------------------------------------------------------------------------
# Walker
# ---------------------------------------------------------------------------


class _Walker:
    def __init__(self, registry: ComponentRegistry, max_depth: int, issues: list[ValidationIssue]) -> None:
        self.registry = registry
        self.max_depth = max_depth
        self.issues = issues
        self.seen_ids: set[str] = set()
        self.on_path: set[int] = set()

    def error(self, path: str, message: str) -> None:
        self.issues.append(ValidationIssue(path, message, "error"))

    def warn(self, path: str, message: str) -> None:
        self.issues.append(ValidationIssue(path, message, "warning"))

    def visit(self, node: Any, path: str, depth: int) -> None:
        if not isinstance(node, dict):
            self.error(path, "Node must be an object")
            return

        if id(node) in self.on_path:
            self.error(path, f'Circular reference detected for node ID: "{node.get("id")}"')
            return

        if depth > self.max_depth:
            self.error(path, f"Tree is nested deeper than {self.max_depth} levels")
            return

        node_id = node.get("id")
        if not node_id or not isinstance(node_id, str):
            self.error(path, 'Node must have a string "id" field')
            return
        here = f"{path}[{node_id}]"

        node_type = node.get("type")
        if not node_type or not isinstance(node_type, str):
            self.error(here, 'Node must have a string "type" field')
            return

        if node_id in self.seen_ids:
            self.error(here, f'Duplicate node ID: "{node_id}"')
        self.seen_ids.add(node_id)

        props = node.get("props")
        if not isinstance(props, dict):
            self.error(here, 'Node must have a "props" object')

        children = node.get("children")
        if children is not None and not isinstance(children, list):
            self.error(here, '"children" must be an array if present')
            children = None

        interactions = node.get("interactions")
        if interactions is not None and not isinstance(interactions, list):
            self.error(here, '"interactions" must be an array if present')
            interactions = None

        if node.get("is_global_instance"):
            gc_id = node.get("global_component_id")
            if not gc_id or not isinstance(gc_id, str):
                self.error(here, 'Global component instance must have a string "global_component_id"')

        name = node.get("name")
        if name is not None and not isinstance(name, str):
            self.warn(here, '"name" must be a string if present')

        if node_type not in self.registry:
            known = ", ".join(self.registry.types())
            self.error(here, f'Unknown component type: "{node_type}". Must be one of: {known}')
        else:
            self._check_children_policy(node_type, children, here)

        for index, interaction in enumerate(interactions or []):
            self._check_interaction(interaction, f"{here}.interactions[{index}]")

        if children:
            self.on_path.add(id(node))
            for index, child in enumerate(children):
                self.visit(child, f"{here}.children[{index}]", depth + 1)
            self.on_path.discard(id(node))

    def _check_children_policy(self, node_type: str, children: list | None, here: str) -> None:
        if self.registry.is_text_leaf(node_type) and children:
            self.error(
                here,
                f"{node_type} components cannot have children. Text content belongs in props.",
            )
            return
        if self.registry.accepts_children(node_type):
            if children is None:
                self.warn(here, f"{node_type} is a container component and should have a children array (can be empty)")
        elif children:
            self.error(here, f"{node_type} does not accept children but has {len(children)} child(ren)")

    def _check_interaction(self, interaction: Any, path: str) -> None:
        if not isinstance(interaction, dict):
            self.error(path, "Interaction must be an object")
            return
        for key in ("id", "trigger", "action"):
            value = interaction.get(key)
            if not value or not isinstance(value, str):
                self.error(path, f'Interaction must have a string "{key}"')

"""Pydantic models of the persisted document shape.

These check the envelope of a saved document (projects, pages, node fields
and their types). Tree structure rules (registry types, child policy,
duplicate ids) are the validator's job, so node models allow extra keys.

Input may use snake_case or camelCase keys; dumps are always snake_case.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

_CONFIG = {"alias_generator": to_camel, "populate_by_name": True}


class InteractionModel(BaseModel):
    """A trigger/action pair attached to a node."""

    model_config = {**_CONFIG, "extra": "allow"}

    id: str
    trigger: str
    action: str
    target_id: str | None = None


class ComponentNodeModel(BaseModel):
    """One node of a page tree or a global component definition."""

    model_config = {**_CONFIG, "extra": "allow"}

    id: str
    type: str
    name: str | None = None
    props: dict[str, Any]
    children: list[ComponentNodeModel] | None = None
    interactions: list[InteractionModel] | None = None
    is_global_instance: bool | None = None
    global_component_id: str | None = None

    # Node-level layout fields
    width: Any = None
    grid_column_start: int | None = None
    grid_column_span: int | None = None
    grid_row_span: int | None = None
    responsive_columns: dict[str, Any] | None = None


class PageModel(BaseModel):
    model_config = {**_CONFIG, "extra": "forbid"}

    id: str
    name: str
    tree: list[ComponentNodeModel] = Field(min_length=1)
    theme: dict[str, Any] | None = None
    canvas_position: dict[str, float] | None = None


class ProjectModel(BaseModel):
    model_config = {**_CONFIG, "extra": "forbid"}

    id: str
    name: str
    pages: list[PageModel] = Field(min_length=1)
    current_page_id: str
    global_components: list[ComponentNodeModel] = Field(default_factory=list)
    theme: dict[str, Any] | None = None
    layout: dict[str, Any] | None = None
    description: str | None = None
    last_modified: int = 0
    is_example_project: bool = False


class DocumentModel(BaseModel):
    """What the persistence layer saves: every project plus the open one."""

    model_config = {**_CONFIG, "extra": "forbid"}

    projects: list[ProjectModel] = Field(min_length=1)
    current_project_id: str

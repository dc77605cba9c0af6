"""
Studio Kernel — Component Registry

The registry answers two questions about a component type: does it accept
children, and what are its default props. The kernel only reads it; callers
merge defaults into nodes before handing them over.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

# Leaf types whose text lives in props and which must never carry children.
TEXT_LEAF_TYPES: frozenset[str] = frozenset({"Text", "Heading"})


@dataclass(frozen=True)
class ComponentDefinition:
    name: str
    accepts_children: bool
    default_props: dict[str, Any] = field(default_factory=dict)


class ComponentRegistry:
    """Lookup ``type -> ComponentDefinition``."""

    def __init__(self, definitions: Iterable[ComponentDefinition] = ()) -> None:
        self._definitions: dict[str, ComponentDefinition] = {d.name: d for d in definitions}

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Mapping[str, Any] | bool]) -> ComponentRegistry:
        """
        Build from ``{"Grid": {"accepts_children": True, "default_props": {...}}}``
        or the shorthand ``{"Grid": True}``.
        """
        definitions = []
        for name, spec in mapping.items():
            if isinstance(spec, bool):
                definitions.append(ComponentDefinition(name=name, accepts_children=spec))
                continue
            accepts = spec.get("accepts_children", spec.get("acceptsChildren", False))
            defaults = spec.get("default_props", spec.get("defaultProps", {})) or {}
            definitions.append(ComponentDefinition(name=name, accepts_children=bool(accepts), default_props=dict(defaults)))
        return cls(definitions)

    def __contains__(self, type_name: object) -> bool:
        return type_name in self._definitions

    def get(self, type_name: str) -> ComponentDefinition | None:
        return self._definitions.get(type_name)

    def types(self) -> list[str]:
        return sorted(self._definitions)

    def accepts_children(self, type_name: str) -> bool:
        definition = self._definitions.get(type_name)
        return definition is not None and definition.accepts_children

    def default_props(self, type_name: str) -> dict[str, Any]:
        definition = self._definitions.get(type_name)
        return dict(definition.default_props) if definition else {}

    def is_text_leaf(self, type_name: str) -> bool:
        return type_name in TEXT_LEAF_TYPES


_CONTAINERS: dict[str, dict[str, Any]] = {
    "Grid": {"columns": 12, "gap": 24},
    "Card": {"size": "medium", "elevation": 0, "isBorderless": False},
    "CardBody": {},
    "CardHeader": {},
    "CardFooter": {},
    "VStack": {"spacing": 2, "alignment": "stretch", "justify": "flex-start", "expanded": False},
    "HStack": {"spacing": 2, "alignment": "center", "justify": "flex-start", "expanded": False},
    "Panel": {},
    "PanelBody": {"opened": True},
    "PanelRow": {},
    "Flex": {"direction": "row", "gap": 2},
    "FlexBlock": {},
    "FlexItem": {},
    "Truncate": {},
    "Tooltip": {},
    "Modal": {"title": "Modal"},
    "Popover": {},
    "MenuGroup": {},
    "MenuItem": {},
    "Notice": {"status": "info", "isDismissible": False},
}

_LEAVES: dict[str, dict[str, Any]] = {
    "Button": {"text": "Button", "variant": "primary"},
    "Text": {"children": "Text"},
    "Heading": {"children": "Heading", "level": 2},
    "Badge": {"children": "Badge"},
    "Icon": {"icon": "star-filled", "size": 24},
    "Image": {"src": "", "alt": ""},
    "TextControl": {"label": "Label", "value": ""},
    "TextareaControl": {"label": "Label", "value": ""},
    "SelectControl": {"label": "Label", "options": []},
    "ToggleControl": {"label": "Toggle", "checked": False},
    "CheckboxControl": {"label": "Checkbox", "checked": False},
    "SearchControl": {"value": ""},
    "NumberControl": {"value": 0},
    "RadioControl": {"label": "Radio", "options": []},
    "RangeControl": {"value": 50, "min": 0, "max": 100},
    "ColorPicker": {},
    "ColorPalette": {},
    "Spacer": {},
    "Divider": {},
    "TabPanel": {"tabs": []},
    "Spinner": {},
    "DateTimePicker": {},
    "FontSizePicker": {},
    "AnglePickerControl": {},
    "BoxControl": {},
    "BorderControl": {},
    "FormTokenField": {"value": []},
    "DataViews": {"data": []},
}

DEFAULT_REGISTRY = ComponentRegistry(
    [ComponentDefinition(name, True, props) for name, props in _CONTAINERS.items()]
    + [ComponentDefinition(name, False, props) for name, props in _LEAVES.items()]
)

"""
Studio Kernel — Stack Layout Mapping

Translates VStack/HStack props through a direction-independent description
(primary axis alignment, cross axis alignment, gap, primary-axis fill) so a
stack can switch direction while keeping its visual intent.

Named alignment presets are read relative to the source direction ("top" is
the primary axis start for a VStack but the cross axis start for an HStack).
Output always uses ``justify`` plus a CSS ``alignment`` value.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

_JUSTIFY_TO_PRIMARY = {
    "flex-start": "start",
    "start": "start",
    "center": "center",
    "flex-end": "end",
    "end": "end",
    "space-between": "space-between",
}
_PRIMARY_TO_JUSTIFY = {
    "start": "flex-start",
    "center": "center",
    "end": "flex-end",
    "space-between": "space-between",
}
_CSS_CROSS = {"flex-start": "start", "center": "center", "flex-end": "end", "stretch": "stretch"}
_CROSS_TO_CSS = {"start": "flex-start", "center": "center", "end": "flex-end", "stretch": "stretch"}

# preset -> (primary, cross)
_VSTACK_PRESETS = {
    "topLeft": ("start", "start"),
    "top": ("start", "center"),
    "topRight": ("start", "end"),
    "left": ("center", "start"),
    "center": ("center", "center"),
    "right": ("center", "end"),
    "bottomLeft": ("end", "start"),
    "bottom": ("end", "center"),
    "bottomRight": ("end", "end"),
    "edge": ("space-between", "center"),
    "stretch": ("start", "stretch"),
}
_HSTACK_PRESETS = {
    "topLeft": ("start", "start"),
    "left": ("start", "center"),
    "bottomLeft": ("start", "end"),
    "top": ("center", "start"),
    "center": ("center", "center"),
    "bottom": ("center", "end"),
    "topRight": ("end", "start"),
    "right": ("end", "center"),
    "bottomRight": ("end", "end"),
    "edge": ("space-between", "center"),
    "stretch": ("start", "stretch"),
}


@dataclass
class StackLayout:
    primary: str = "start"
    cross: str = "center"
    spacing: Any = 2
    fill_primary: bool = False


def read_stack_layout(stack_type: str, props: dict[str, Any]) -> StackLayout:
    """Describe a VStack/HStack's props independently of its direction."""
    presets = _VSTACK_PRESETS if stack_type == "VStack" else _HSTACK_PRESETS
    layout = StackLayout(spacing=props.get("spacing", 2), fill_primary=bool(props.get("expanded", False)))

    alignment = props.get("alignment")
    if alignment in _CSS_CROSS:
        layout.cross = _CSS_CROSS[alignment]
    elif alignment in presets:
        layout.primary, layout.cross = presets[alignment]

    # An explicit justify wins over whatever a preset implied for the primary axis.
    justify = props.get("justify")
    if justify in _JUSTIFY_TO_PRIMARY:
        layout.primary = _JUSTIFY_TO_PRIMARY[justify]
    return layout


def write_stack_props(layout: StackLayout) -> dict[str, Any]:
    return {
        "justify": _PRIMARY_TO_JUSTIFY[layout.primary],
        "alignment": _CROSS_TO_CSS[layout.cross],
        "spacing": layout.spacing,
        "expanded": layout.fill_primary,
    }


def swap_stack_props(
    from_type: str,
    props: dict[str, Any],
    default_props: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Props for the opposite stack that keep the layout ``props`` had on ``from_type``.
    Unrelated props (padding, className, ...) carry over untouched.
    """
    layout = read_stack_layout(from_type, props)
    return {**(default_props or {}), **props, **write_stack_props(layout)}

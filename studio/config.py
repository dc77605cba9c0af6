"""
Studio configuration — all environment variables in one place.

Read from environment at import time. Every value has a working default so the
kernel can be imported and tested without any environment set up.
"""

from __future__ import annotations

import os


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _env_set(name: str, default: frozenset[str]) -> frozenset[str]:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return frozenset(item.strip() for item in raw.split(",") if item.strip())


class Settings:
    """Kernel settings from environment variables."""

    # History
    MAX_HISTORY: int = _env_int("STUDIO_MAX_HISTORY", 50)

    # Tree structure
    MAX_TREE_DEPTH: int = _env_int("STUDIO_MAX_TREE_DEPTH", 256)
    ROOT_CONTAINER_ID: str = os.environ.get("STUDIO_ROOT_CONTAINER_ID", "root-grid")
    ROOT_CONTAINER_TYPE: str = "Grid"

    # Selection / clipboard policy
    PASTE_AS_SIBLING_TYPES: frozenset[str] = _env_set("STUDIO_PASTE_AS_SIBLING_TYPES", frozenset({"Card"}))
    STRUCTURAL_CONTAINER_TYPES: frozenset[str] = _env_set(
        "STUDIO_STRUCTURAL_CONTAINER_TYPES",
        frozenset({"CardBody", "CardHeader", "CardFooter", "PanelBody", "PanelRow", "FlexBlock", "FlexItem"}),
    )
    INSERTION_CONTAINER_TYPES: frozenset[str] = frozenset(
        {
            "Grid",
            "VStack",
            "HStack",
            "Flex",
            "FlexBlock",
            "FlexItem",
            "CardBody",
            "CardHeader",
            "CardFooter",
            "PanelBody",
            "PanelRow",
        }
    )

    # Grid placement
    DEFAULT_GRID_COLUMNS: int = 12
    DEFAULT_GRID_SPAN: int = 3

    # Logging
    LOG_LEVEL: str = os.environ.get("STUDIO_LOG_LEVEL", "WARNING").upper()


# Singleton instance
settings = Settings()

"""Id generation for nodes and pages.

Callers go through the module attribute (``ids.generate_id()``) so tests can
swap in a deterministic counter with ``monkeypatch``.
"""

from __future__ import annotations

import uuid


def generate_id() -> str:
    """Fresh node id, collision-free for the lifetime of a project."""
    return f"node-{uuid.uuid4().hex[:12]}"


def generate_page_id() -> str:
    return f"page-{uuid.uuid4().hex[:12]}"


def generate_project_id() -> str:
    return f"project-{uuid.uuid4().hex[:12]}"

"""
Studio kernel test configuration.

Ids are generated from counters so clones, groups and instances get
predictable ids ("gen-1", "gen-2", ...) in every test.
"""

import itertools

import pytest

from studio.kernel import ids


@pytest.fixture(autouse=True)
def sequential_ids(monkeypatch):
    nodes = itertools.count(1)
    pages = itertools.count(1)
    projects = itertools.count(1)
    monkeypatch.setattr(ids, "generate_id", lambda: f"gen-{next(nodes)}")
    monkeypatch.setattr(ids, "generate_page_id", lambda: f"page-gen-{next(pages)}")
    monkeypatch.setattr(ids, "generate_project_id", lambda: f"project-gen-{next(projects)}")
    return nodes

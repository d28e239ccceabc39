"""
Shared pytest fixtures and configuration for docspine tests.

This module provides:
- Fake engine models seeded with posts and tags
- Log-context cleanup for test isolation

Usage:
    Fixtures are auto-discovered by pytest. Use them as function arguments:

    async def test_find(posts):
        class Post(DocumentGateway):
            model = posts
"""

from typing import Generator

import pytest

from docspine.core.logging import clear_context
from tests._support.fake_engine import FakeModel


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark every test under tests/ as a unit test unless marked otherwise."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if "unit" not in markers:
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_log_context() -> Generator[None, None, None]:
    """Clear structlog context variables before and after each test."""
    clear_context()
    yield
    clear_context()


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def tags() -> FakeModel:
    return FakeModel([
        {"_id": "t1", "label": "python"},
        {"_id": "t2", "label": "databases"},
    ])


@pytest.fixture
def posts(tags: FakeModel) -> FakeModel:
    """Three posts; ``tags`` holds tag ids resolvable through population."""
    return FakeModel(
        [
            {"_id": "p1", "title": "Hooks", "author_id": "u1", "rank": 2, "draft": False, "tags": ["t1"]},
            {"_id": "p2", "title": "Relations", "author_id": "u2", "rank": 1, "draft": False, "tags": ["t1", "t2"]},
            {"_id": "p3", "title": "Drafts", "author_id": "u1", "rank": 3, "draft": True, "tags": []},
        ],
        refs={"tags": tags},
    )

"""
Pytest Configuration and Fixtures

This module provides:
- Shared fixtures for all tests (sample ideas, in-memory backends, service)
- Test category markers
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

# Import test configuration
from tests.test_config import (
    CONFIG, EXPECTED, TEST_DATA, MESSAGES, TEST_CATEGORIES,
    get_idea_row, get_all_idea_rows
)


# =============================================================================
# SHARED FIXTURES
# =============================================================================

@pytest.fixture
def sample_row():
    """Provide a single raw idea row."""
    return get_idea_row(0)


@pytest.fixture
def sample_rows():
    """Provide all raw idea rows (owner user-a)."""
    return get_all_idea_rows()


@pytest.fixture
def sample_ideas(sample_rows):
    """Provide parsed Idea objects, newest first."""
    from ideavault.models import Idea

    ideas = [Idea.from_row(row) for row in sample_rows]
    return sorted(ideas, key=lambda i: i.created_at, reverse=True)


@pytest.fixture
def test_config():
    """Provide access to test configuration."""
    return CONFIG


@pytest.fixture
def expected_values():
    """Provide access to expected values."""
    return EXPECTED


@pytest.fixture
def test_data():
    """Provide access to test data."""
    return TEST_DATA


@pytest.fixture
def idea_store():
    """Provide an empty in-memory idea store."""
    from ideavault.storage import InMemoryIdeaStore
    return InMemoryIdeaStore()


@pytest.fixture
def seeded_store(idea_store, sample_rows):
    """Provide an in-memory store holding the sample rows."""
    for row in sample_rows:
        idea_store.insert_row(row)
    return idea_store


@pytest.fixture
def image_store():
    """Provide an empty in-memory image store."""
    from ideavault.storage import InMemoryImageStore
    return InMemoryImageStore()


@pytest.fixture
def service(idea_store, image_store):
    """Provide an IdeaService for owner user-a."""
    from ideavault.services import IdeaService
    return IdeaService(idea_store, image_store, CONFIG["owner_a"])


@pytest.fixture
def png_upload():
    """Provide a small PNG attachment."""
    from ideavault.services import ImageUpload
    return ImageUpload(
        data=TEST_DATA["png_bytes"],
        filename="sketch.png",
        content_type="image/png",
    )


@pytest.fixture
def mock_idea_store():
    """Provide a mock idea store."""
    from unittest.mock import Mock
    from ideavault.storage.base import IdeaStore

    store = Mock(spec=IdeaStore)
    store.name = "mock_store"
    store.list_ideas.return_value = []
    return store


@pytest.fixture
def mock_image_store():
    """Provide a mock image store."""
    from unittest.mock import Mock
    from ideavault.storage.base import ImageStore

    images = Mock(spec=ImageStore)
    images.name = "mock_images"
    images.upload_image.return_value = "https://cdn.example.com/idea-1-sketch.png"
    return images


# =============================================================================
# MARKERS FOR TEST CATEGORIES
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    for name, description in TEST_CATEGORIES.items():
        config.addinivalue_line("markers", f"{name}: {description}")

# tests/conftest.py

"""Shared pytest fixtures for all provider and service tests."""

from collections.abc import Generator
from unittest.mock import patch

import pytest

from src.config.settings import Settings


@pytest.fixture(autouse=True)
def pinned_api_keys() -> Generator[None, None, None]:
    """Pin API credentials so tests never depend on the local .env."""
    with patch.object(Settings, "GOOGLE_API_KEY", "test-google-key"), \
            patch.object(Settings, "GOOGLE_SEARCH_ENGINE_ID", "test-cx"), \
            patch.object(Settings, "BARCODELOOKUP_KEY", "test-bl-key"), \
            patch.object(Settings, "LLM_API_KEY", "test-llm-key"):
        yield

"""Root conftest — shared test configuration."""

import os

import pytest

# Tests run with development verbosity unless a test overrides it
os.environ.setdefault("ENV", "test")


@pytest.fixture(autouse=True)
def _fresh_settings():
    """get_settings() is lru_cached; drop it so env overrides take effect."""
    from minuscule.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()

"""Pytest configuration and shared fixtures."""

import pytest

# Load env vars
from dotenv import load_dotenv
load_dotenv()


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "online: mark test as online test (hits real DNS / external APIs)")


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def isolate_places_key(monkeypatch):
    """Keep a developer's real GOOGLE_MAPS_API_KEY out of unit tests.

    Tests that need a key build their own LeadFinderConfig.
    """
    monkeypatch.delenv("GOOGLE_MAPS_API_KEY", raising=False)
    yield

"""
Pytest configuration and shared fixtures
"""
import os
import pytest
from pathlib import Path

# Load .env from project root for all tests (override=True to ensure fresh values)
from dotenv import load_dotenv
load_dotenv(Path(__file__).parent.parent / ".env", override=True)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "live: mark test as requiring a running Docker daemon"
    )


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless RUN_LIVE_TESTS is set."""
    if os.getenv('RUN_LIVE_TESTS', 'false').lower() == 'true':
        return
    skip_live = pytest.mark.skip(reason="set RUN_LIVE_TESTS=true to run against a Docker daemon")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


@pytest.fixture(scope="session")
def docker_base_url():
    """Docker daemon URL for live tests, None for the SDK default"""
    return os.getenv('TEST_DOCKER_HOST') or None

"""Pytest configuration and shared fixtures."""

import os
import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

# Keep the config singleton away from any real config.json while importing
os.environ["JIRA_MCP_CONFIG"] = str(PROJECT_ROOT / "tests" / "nonexistent-config.json")

from jira_mcp.config_manager import config  # noqa: E402

SITE_URL = "https://paddock.atlassian.net"


@pytest.fixture(autouse=True)
def setup_env():
    """Isolate environment variables for every test."""
    original_env = dict(os.environ)

    for var in ("JIRA_HOST", "JIRA_EMAIL", "JIRA_API_TOKEN"):
        os.environ.pop(var, None)
    os.environ.setdefault("TESTING", "1")

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path):
    """Point the config singleton at an empty per-test config file path."""
    config_file = tmp_path / "config.json"
    config.use_file(config_file)
    return config_file


@pytest.fixture
def jira_env():
    """Jira credentials in the environment."""
    os.environ["JIRA_HOST"] = "paddock.atlassian.net"
    os.environ["JIRA_EMAIL"] = "bot@example.com"
    os.environ["JIRA_API_TOKEN"] = "secret-token"


@pytest.fixture
def mock_jira():
    """A JiraClient stand-in usable as an async context manager.

    Configure ``mock_jira.get/post/put.return_value`` (or ``side_effect``)
    with ``(success, data)`` tuples.
    """
    client = MagicMock()
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=None)
    client.get = AsyncMock(return_value=(True, None))
    client.post = AsyncMock(return_value=(True, None))
    client.put = AsyncMock(return_value=(True, None))
    client.site_url = SITE_URL
    client.browse_url = lambda key: f"{SITE_URL}/browse/{key}"
    return client

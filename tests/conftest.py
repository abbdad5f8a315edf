"""
Pytest configuration and fixtures for SiteForge tests.
"""

import os
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add the project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment variables
os.environ.setdefault("GITHUB_TOKEN", "test-github-token")
os.environ.setdefault("GITHUB_ORG", "test-org")
os.environ.setdefault("NETLIFY_AUTH_TOKEN", "test-netlify-token")
os.environ.setdefault("NETLIFY_ACCOUNT_SLUG", "test-team")
os.environ.setdefault("NETLIFY_GITHUB_INSTALLATION_ID", "12345")
os.environ.setdefault("ANTHROPIC_API_KEY", "test-anthropic-key")


def _build_response(status_code: int = 200, json_data=None, text: str = "", headers=None):
    """Build a fake requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.headers = headers or {}
    response.text = text
    if json_data is None:
        response.content = text.encode("utf-8")
        response.json.side_effect = ValueError("no json")
    else:
        response.content = b"{...}"
        response.json.return_value = json_data
    return response


@pytest.fixture
def mock_github():
    """GitHubClient double with the calls a site pipeline makes."""
    github = MagicMock()
    github.org = "test-org"
    github.create_org_repo.return_value = {
        "html_url": "https://github.com/test-org/my-photo-site-abc123",
        "created_at": "2026-01-01T00:00:00Z",
    }
    github.put_file.return_value = {}
    github.list_workflow_runs.return_value = []
    return github


@pytest.fixture
def mock_netlify():
    """NetlifyClient double with a working site creation."""
    netlify = MagicMock()
    netlify.is_configured.return_value = True
    netlify.create_deploy_key.return_value = {"id": "key-1", "public_key": "ssh-rsa AAA"}
    netlify.create_site.return_value = {
        "id": "netlify-site-1",
        "name": "my-photo-site-abc123",
        "ssl_url": "https://my-photo-site-abc123.netlify.app",
        "admin_url": "https://app.netlify.com/sites/my-photo-site-abc123",
    }
    return netlify


@pytest.fixture
def make_response():
    """Factory for fake requests.Response objects."""
    return _build_response

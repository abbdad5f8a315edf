# =============================================================================
# SITEFORGE GITHUB CLIENT TESTS
# =============================================================================
# Tests for the GitHub REST wrapper.
# =============================================================================

import base64
from unittest.mock import patch

import pytest
import requests

from siteforge.infra.github_client import GitHubAPIError, GitHubClient


@pytest.fixture
def client():
    return GitHubClient(token="tok", org="acme")


class TestGitHubClientConfig:
    """Test credential handling."""

    def test_configured_with_token_and_org(self, client):
        assert client.is_configured() is True
        assert client.org == "acme"

    def test_not_configured_without_org(self):
        with patch.dict("os.environ", {"GITHUB_ORG": ""}):
            client = GitHubClient(token="tok")
            assert client.is_configured() is False

    def test_unconfigured_request_raises(self):
        with patch.dict("os.environ", {"GITHUB_TOKEN": "", "GITHUB_ORG": ""}):
            client = GitHubClient()
            with pytest.raises(GitHubAPIError) as exc_info:
                client.get_repo("anything")
            assert "not configured" in str(exc_info.value)


class TestGitHubClientErrors:
    """Test status code mapping."""

    def test_invalid_token(self, client, make_response):
        with patch("requests.request", return_value=make_response(401, {"message": "Bad credentials"})):
            with pytest.raises(GitHubAPIError) as exc_info:
                client.get_repo("site")
        assert exc_info.value.status_code == 401
        assert str(exc_info.value) == "Invalid GitHub token"

    def test_rate_limited(self, client, make_response):
        response = make_response(403, {"message": "API rate limit"}, headers={"X-RateLimit-Remaining": "0"})
        with patch("requests.request", return_value=response):
            with pytest.raises(GitHubAPIError) as exc_info:
                client.get_repo("site")
        assert "rate limit" in str(exc_info.value)

    def test_error_details_kept(self, client, make_response):
        """GitHub's nested error messages survive into the exception."""
        body = {
            "message": "Repository creation failed.",
            "errors": [{"message": "name already exists on this account"}],
        }
        with patch("requests.request", return_value=make_response(422, body)):
            with pytest.raises(GitHubAPIError) as exc_info:
                client.create_org_repo("taken", "desc")
        assert exc_info.value.status_code == 422
        assert "name already exists on this account" in str(exc_info.value)

    def test_not_found(self, client, make_response):
        with patch("requests.request", return_value=make_response(404, {"message": "Not Found"})):
            with pytest.raises(GitHubAPIError) as exc_info:
                client.get_repo("missing")
        assert exc_info.value.status_code == 404

    def test_transport_failure(self, client):
        with patch("requests.request", side_effect=requests.ConnectionError("boom")):
            with pytest.raises(GitHubAPIError) as exc_info:
                client.get_repo("site")
        assert exc_info.value.status_code is None


class TestGitHubClientCalls:
    """Test request shapes."""

    def test_create_org_repo(self, client, make_response):
        with patch("requests.request", return_value=make_response(201, {"name": "site"})) as mock_request:
            client.create_org_repo("site", "SiteForge site [owner:u1] [display:site]")

        method, url = mock_request.call_args.args
        assert method == "POST"
        assert url.endswith("/orgs/acme/repos")
        body = mock_request.call_args.kwargs["json"]
        assert body["auto_init"] is True
        assert body["private"] is False
        assert body["description"] == "SiteForge site [owner:u1] [display:site]"

    def test_put_file_encodes_content(self, client, make_response):
        with patch("requests.request", return_value=make_response(201, {})) as mock_request:
            client.put_file("site", "index.html", "<h1>Hi</h1>", "Add index.html")

        _method, url = mock_request.call_args.args
        assert url.endswith("/repos/acme/site/contents/index.html")
        body = mock_request.call_args.kwargs["json"]
        assert base64.b64decode(body["content"]).decode("utf-8") == "<h1>Hi</h1>"
        assert body["message"] == "Add index.html"

    def test_dispatch_returns_none_on_204(self, client, make_response):
        with patch("requests.request", return_value=make_response(204)) as mock_request:
            result = client.dispatch_workflow("site", "ai-edit.yml", "main", {"prompt": "x"})

        assert result is None
        _method, url = mock_request.call_args.args
        assert url.endswith("/repos/acme/site/actions/workflows/ai-edit.yml/dispatches")
        assert mock_request.call_args.kwargs["json"] == {"ref": "main", "inputs": {"prompt": "x"}}

    def test_list_workflow_runs(self, client, make_response):
        runs = {"total_count": 1, "workflow_runs": [{"status": "queued"}]}
        with patch("requests.request", return_value=make_response(200, runs)) as mock_request:
            result = client.list_workflow_runs("site")

        assert result == [{"status": "queued"}]
        assert mock_request.call_args.kwargs["params"] == {"per_page": 1}

    @pytest.mark.parametrize("body", [[{"status": "queued"}], {"workflow_runs": "oops"}, {}])
    def test_list_workflow_runs_unexpected_body(self, client, make_response, body):
        """A 200 without a run list reads as no runs."""
        with patch("requests.request", return_value=make_response(200, body)):
            assert client.list_workflow_runs("site") == []

    def test_put_actions_secret(self, client, make_response):
        with patch("requests.request", return_value=make_response(201)) as mock_request:
            client.put_actions_secret("site", "ANTHROPIC_API_KEY", "c2VhbGVk", "kid")

        _method, url = mock_request.call_args.args
        assert url.endswith("/repos/acme/site/actions/secrets/ANTHROPIC_API_KEY")
        assert mock_request.call_args.kwargs["json"] == {"encrypted_value": "c2VhbGVk", "key_id": "kid"}

# =============================================================================
# SITEFORGE NETLIFY CLIENT TESTS
# =============================================================================

from unittest.mock import patch

import pytest
import requests

from siteforge.infra.netlify_client import NetlifyAPIError, NetlifyClient


@pytest.fixture
def client():
    return NetlifyClient(token="tok", account_slug="team")


class TestNetlifyClient:
    """Test the Netlify REST wrapper."""

    def test_not_configured_raises(self):
        with patch.dict("os.environ", {"NETLIFY_AUTH_TOKEN": "", "NETLIFY_ACCOUNT_SLUG": ""}):
            client = NetlifyClient()
            assert client.is_configured() is False
            with pytest.raises(NetlifyAPIError):
                client.create_deploy_key()

    def test_create_site_posts_to_account(self, client, make_response):
        with patch("requests.request", return_value=make_response(201, {"id": "s1"})) as mock_request:
            result = client.create_site({"name": "blog-abc123"})

        assert result == {"id": "s1"}
        method, url = mock_request.call_args.args
        assert method == "POST"
        assert url.endswith("/team/sites")
        assert mock_request.call_args.kwargs["headers"]["Authorization"] == "Bearer tok"

    def test_error_keeps_status_and_body(self, client, make_response):
        response = make_response(422, {"errors": {"subdomain": ["must be unique"]}}, text="subdomain must be unique")
        with patch("requests.request", return_value=response):
            with pytest.raises(NetlifyAPIError) as exc_info:
                client.create_site({"name": "taken"})
        assert exc_info.value.status_code == 422
        assert "must be unique" in str(exc_info.value)

    def test_transport_failure(self, client):
        with patch("requests.request", side_effect=requests.Timeout("slow")):
            with pytest.raises(NetlifyAPIError) as exc_info:
                client.get_site("blog.netlify.app")
        assert "request failed" in str(exc_info.value)

    def test_get_site_by_domain(self, client, make_response):
        with patch("requests.request", return_value=make_response(200, {"id": "s1"})) as mock_request:
            client.get_site("blog-abc123.netlify.app")

        _method, url = mock_request.call_args.args
        assert url.endswith("/sites/blog-abc123.netlify.app")

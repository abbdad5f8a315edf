# -----------------------------------------------------------------------------
# NETLIFY INFRASTRUCTURE - REST API Wrapper
# -----------------------------------------------------------------------------
# Responsibility: HTTP calls to api.netlify.com.
# Netlify builds nothing for us: it pulls the repository on every push and
# publishes the root directory as-is.
# -----------------------------------------------------------------------------

import os

import requests
from rich.console import Console

console = Console()

NETLIFY_API_URL = "https://api.netlify.com/api/v1"
REQUEST_TIMEOUT_SECONDS = 30


class NetlifyAPIError(Exception):
    """Raised when a Netlify API call fails or cannot be made."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NetlifyClient:
    """
    Thin wrapper around the Netlify REST API.

    Credentials come from NETLIFY_AUTH_TOKEN and NETLIFY_ACCOUNT_SLUG.
    """

    def __init__(self, token: str | None = None, account_slug: str | None = None) -> None:
        self._token = token or os.getenv("NETLIFY_AUTH_TOKEN")
        self._account = account_slug or os.getenv("NETLIFY_ACCOUNT_SLUG")

        if not self._token:
            console.print("[yellow][NETLIFY API] NETLIFY_AUTH_TOKEN not set - hosting disabled[/yellow]")
        if not self._account:
            console.print("[yellow][NETLIFY API] NETLIFY_ACCOUNT_SLUG not set - hosting disabled[/yellow]")

    def is_configured(self) -> bool:
        return bool(self._token and self._account)

    def _request(self, method: str, path: str, json: dict | None = None):
        if not self.is_configured():
            raise NetlifyAPIError(
                "Netlify credentials not configured. "
                "Set NETLIFY_AUTH_TOKEN and NETLIFY_ACCOUNT_SLUG environment variables."
            )

        try:
            response = requests.request(
                method,
                f"{NETLIFY_API_URL}{path}",
                headers={
                    "Authorization": f"Bearer {self._token}",
                    "Content-Type": "application/json",
                },
                json=json,
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
        except requests.RequestException as e:
            raise NetlifyAPIError(f"Netlify API request failed: {e}")

        if response.status_code >= 400:
            raise NetlifyAPIError(
                f"Netlify API error {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        return response.json()

    def create_deploy_key(self) -> dict:
        """Issue a deploy key Netlify uses to pull from GitHub."""
        return self._request("POST", "/deploy_keys")

    def create_site(self, payload: dict) -> dict:
        """Create a site in the configured account."""
        return self._request("POST", f"/{self._account}/sites", json=payload)

    def get_site(self, site_id: str) -> dict:
        """Get a site by id or by its netlify.app domain."""
        return self._request("GET", f"/sites/{site_id}")

    def list_sites(self) -> list[dict]:
        return self._request("GET", f"/{self._account}/sites") or []

# -----------------------------------------------------------------------------
# GITHUB INFRASTRUCTURE - REST API Wrapper
# -----------------------------------------------------------------------------
# Responsibility: The only module that talks HTTP to api.github.com.
# Every site lives as a repository in one organization; this wrapper covers
# the handful of endpoints SiteForge needs:
#
# - Repositories: create in org, get, list for org
# - Contents: create/update a file
# - Actions: secrets public key, secret upload, workflow dispatch, run listing
#
# Security:
# - The PAT is sent only in the Authorization header
# - Tokens are NEVER logged
# -----------------------------------------------------------------------------

import base64
import os

import requests
from rich.console import Console

console = Console()

# GitHub API configuration
GITHUB_API_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
REQUEST_TIMEOUT_SECONDS = 30


class GitHubAPIError(Exception):
    """Raised when a GitHub API call fails or cannot be made."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _describe_error(response: requests.Response) -> str:
    """
    Build a readable message from a failed GitHub response.

    GitHub returns {"message": "...", "errors": [{"message": "..."}]};
    both parts are kept so "name already exists on this account" survives.
    """
    try:
        data = response.json()
    except ValueError:
        return response.text or "no response body"

    if not isinstance(data, dict):
        return str(data)

    message = data.get("message", "")
    details = [
        err["message"]
        for err in data.get("errors", [])
        if isinstance(err, dict) and err.get("message")
    ]
    if details:
        return f"{message} ({'; '.join(details)})"
    return message or response.text


class GitHubClient:
    """
    Thin wrapper around the GitHub REST API for one organization.

    Credentials come from GITHUB_TOKEN and GITHUB_ORG unless passed in.
    """

    def __init__(self, token: str | None = None, org: str | None = None) -> None:
        self._token = token or os.getenv("GITHUB_TOKEN")
        self._org = org or os.getenv("GITHUB_ORG")

        if not self._token:
            console.print("[yellow][GITHUB API] GITHUB_TOKEN not set - GitHub calls disabled[/yellow]")
        if not self._org:
            console.print("[yellow][GITHUB API] GITHUB_ORG not set - GitHub calls disabled[/yellow]")

    @property
    def org(self) -> str | None:
        return self._org

    def is_configured(self) -> bool:
        """Check if GitHub credentials are available."""
        return bool(self._token and self._org)

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }

    def _request(
        self,
        method: str,
        path: str,
        json: dict | None = None,
        params: dict | None = None,
    ):
        """
        Perform one API call.

        Returns:
            Decoded JSON body, or None for empty (204) responses

        Raises:
            GitHubAPIError: On missing credentials, transport failure or
                any 4xx/5xx status
        """
        if not self.is_configured():
            raise GitHubAPIError(
                "GitHub credentials not configured. "
                "Set GITHUB_TOKEN and GITHUB_ORG environment variables."
            )

        try:
            response = requests.request(
                method,
                f"{GITHUB_API_URL}{path}",
                headers=self._headers(),
                json=json,
                params=params,
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
        except requests.RequestException as e:
            raise GitHubAPIError(f"GitHub API request failed: {e}")

        if response.status_code == 401:
            raise GitHubAPIError("Invalid GitHub token", status_code=401)

        if response.status_code == 403 and response.headers.get("X-RateLimit-Remaining") == "0":
            raise GitHubAPIError("GitHub API rate limit exceeded", status_code=403)

        if response.status_code >= 400:
            raise GitHubAPIError(
                f"GitHub API error {response.status_code}: {_describe_error(response)}",
                status_code=response.status_code,
            )

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # =========================================================================
    # REPOSITORIES
    # =========================================================================

    def create_org_repo(
        self, name: str, description: str, private: bool = False, auto_init: bool = True
    ) -> dict:
        """
        Create a repository in the organization.

        auto_init creates the main branch so the contents API works at once.
        """
        console.print(f"[cyan][GITHUB API] Creating repository: {self._org}/{name}[/cyan]")
        return self._request(
            "POST",
            f"/orgs/{self._org}/repos",
            json={
                "name": name,
                "description": description,
                "private": private,
                "auto_init": auto_init,
            },
        )

    def get_repo(self, name: str) -> dict:
        return self._request("GET", f"/repos/{self._org}/{name}")

    def list_org_repos(self, repo_type: str = "all", sort: str = "updated") -> list[dict]:
        """List the organization's repositories (first page only)."""
        return self._request(
            "GET", f"/orgs/{self._org}/repos", params={"type": repo_type, "sort": sort}
        ) or []

    # =========================================================================
    # CONTENTS
    # =========================================================================

    def put_file(self, repo: str, path: str, content: str, message: str) -> dict:
        """Create or update a single file on the default branch."""
        encoded = base64.b64encode(content.encode("utf-8")).decode("ascii")
        return self._request(
            "PUT",
            f"/repos/{self._org}/{repo}/contents/{path}",
            json={"message": message, "content": encoded},
        )

    # =========================================================================
    # ACTIONS
    # =========================================================================

    def get_actions_public_key(self, repo: str) -> dict:
        """Fetch the repository's current secrets key: {"key_id", "key"}."""
        return self._request("GET", f"/repos/{self._org}/{repo}/actions/secrets/public-key")

    def put_actions_secret(
        self, repo: str, secret_name: str, encrypted_value: str, key_id: str
    ) -> None:
        self._request(
            "PUT",
            f"/repos/{self._org}/{repo}/actions/secrets/{secret_name}",
            json={"encrypted_value": encrypted_value, "key_id": key_id},
        )

    def dispatch_workflow(self, repo: str, workflow_id: str, ref: str, inputs: dict) -> None:
        """Trigger a workflow_dispatch run. GitHub answers 204 with no run id."""
        self._request(
            "POST",
            f"/repos/{self._org}/{repo}/actions/workflows/{workflow_id}/dispatches",
            json={"ref": ref, "inputs": inputs},
        )

    def list_workflow_runs(self, repo: str, per_page: int = 1) -> list[dict]:
        """Most recent workflow runs of the repository, newest first."""
        data = self._request(
            "GET", f"/repos/{self._org}/{repo}/actions/runs", params={"per_page": per_page}
        )
        if not isinstance(data, dict):
            return []
        runs = data.get("workflow_runs")
        return runs if isinstance(runs, list) else []

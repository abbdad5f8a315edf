# -----------------------------------------------------------------------------
# THE SECRET PROVISIONER - ACTIONS SECRETS
# -----------------------------------------------------------------------------
# Responsibility: Put the agent's API key into a repository so only that
# repository's workflows can read it.
#
# GitHub only accepts values sealed with the repository's public key
# (libsodium crypto_box_seal). The key may rotate, so it is fetched before
# every upload. Write-only: re-running overwrites the previous value.
# -----------------------------------------------------------------------------

import base64

from nacl import encoding, public
from rich.console import Console

from siteforge.infra.github_client import GitHubAPIError, GitHubClient

console = Console()

AGENT_SECRET_NAME = "ANTHROPIC_API_KEY"


class SecretProvisionError(Exception):
    """Raised when a repository secret cannot be uploaded."""

    pass


def seal_secret(public_key_b64: str, value: str) -> str:
    """Encrypt `value` for the holder of `public_key_b64`; returns base64."""
    key = public.PublicKey(public_key_b64.encode("utf-8"), encoding.Base64Encoder())
    sealed = public.SealedBox(key).encrypt(value.encode("utf-8"))
    return base64.b64encode(sealed).decode("utf-8")


class SecretProvisioner:
    """Uploads sealed Actions secrets to site repositories."""

    def __init__(self, github: GitHubClient) -> None:
        self._github = github

    def provision(self, repo: str, secret_name: str, value: str) -> None:
        """
        Seal and upload one secret.

        Raises:
            SecretProvisionError: If the key fetch or the upload fails
        """
        if not value:
            raise SecretProvisionError(f"No value configured for secret {secret_name}")

        console.print(f"[cyan][SECRETS] Setting {secret_name} on {repo}[/cyan]")

        try:
            key = self._github.get_actions_public_key(repo)
            encrypted = seal_secret(key["key"], value)
            self._github.put_actions_secret(repo, secret_name, encrypted, key["key_id"])
        except GitHubAPIError as e:
            console.print(f"[red][SECRETS] Failed to set {secret_name}: {e}[/red]")
            raise SecretProvisionError(str(e))

        console.print(f"[green][SECRETS] {secret_name} stored on {repo}[/green]")

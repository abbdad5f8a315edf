# =============================================================================
# SITEFORGE SECRET PROVISIONER TESTS
# =============================================================================

import base64

import pytest
from nacl import encoding, public

from siteforge.core.repo_secrets import (
    AGENT_SECRET_NAME,
    SecretProvisionError,
    SecretProvisioner,
    seal_secret,
)
from siteforge.infra.github_client import GitHubAPIError


@pytest.fixture
def repo_key():
    """A repository key pair as GitHub would hold it."""
    private_key = public.PrivateKey.generate()
    public_b64 = private_key.public_key.encode(encoding.Base64Encoder()).decode("utf-8")
    return private_key, public_b64


class TestSealSecret:
    """Test sealed-box encryption."""

    def test_only_key_holder_can_open(self, repo_key):
        private_key, public_b64 = repo_key

        sealed = seal_secret(public_b64, "sk-ant-secret")

        opened = public.SealedBox(private_key).decrypt(base64.b64decode(sealed))
        assert opened == b"sk-ant-secret"

    def test_ciphertext_differs_per_call(self, repo_key):
        _private_key, public_b64 = repo_key
        assert seal_secret(public_b64, "same") != seal_secret(public_b64, "same")


class TestSecretProvisioner:
    """Test secret upload."""

    def test_provision_uploads_sealed_value(self, mock_github, repo_key):
        private_key, public_b64 = repo_key
        mock_github.get_actions_public_key.return_value = {"key_id": "kid-1", "key": public_b64}

        SecretProvisioner(mock_github).provision("blog-abc123", AGENT_SECRET_NAME, "sk-ant-1")

        mock_github.get_actions_public_key.assert_called_once_with("blog-abc123")
        repo, name, encrypted, key_id = mock_github.put_actions_secret.call_args.args
        assert (repo, name, key_id) == ("blog-abc123", "ANTHROPIC_API_KEY", "kid-1")
        assert public.SealedBox(private_key).decrypt(base64.b64decode(encrypted)) == b"sk-ant-1"

    def test_missing_value_rejected(self, mock_github):
        with pytest.raises(SecretProvisionError):
            SecretProvisioner(mock_github).provision("blog-abc123", AGENT_SECRET_NAME, "")
        mock_github.get_actions_public_key.assert_not_called()

    def test_upstream_failure_wrapped(self, mock_github):
        mock_github.get_actions_public_key.side_effect = GitHubAPIError("GitHub API error 404: Not Found", 404)
        with pytest.raises(SecretProvisionError) as exc_info:
            SecretProvisioner(mock_github).provision("blog-abc123", AGENT_SECRET_NAME, "sk")
        assert "404" in str(exc_info.value)

# -----------------------------------------------------------------------------
# INFRASTRUCTURE LAYER
# -----------------------------------------------------------------------------
# Contains low-level HTTP wrappers:
# - GitHubClient: repositories, contents, Actions secrets and workflows
# - NetlifyClient: deploy keys and repository-linked sites
# -----------------------------------------------------------------------------

from .github_client import GitHubAPIError, GitHubClient
from .netlify_client import NetlifyAPIError, NetlifyClient

__all__ = ["GitHubAPIError", "GitHubClient", "NetlifyAPIError", "NetlifyClient"]

# Copyright 2026 Pramod Kumar Voola
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

# -----------------------------------------------------------------------------
# THE SITE REGISTRY - OWNERSHIP TAGS
# -----------------------------------------------------------------------------
# Responsibility: Answer "which sites belong to this user?" without a
# database.
#
# Ownership and display name are packed into the repository description:
#
#     SiteForge site [owner:<user id>] [display:<name>]
#
# Listing is a full scan of the organization's repositories filtered by an
# exact substring match on the owner tag. No index, no cache, first page
# only. Fine at small scale; a known limit beyond it.
# -----------------------------------------------------------------------------

import re

from rich.console import Console

from siteforge.domain.models import SiteSummary
from siteforge.infra.github_client import GitHubAPIError, GitHubClient

console = Console()

DESCRIPTION_PREFIX = "SiteForge site"
_DISPLAY_RE = re.compile(r"\[display:(.+?)\]")


def owner_tag(owner_id: str) -> str:
    return f"[owner:{owner_id}]"


def display_tag(display_name: str) -> str:
    return f"[display:{display_name}]"


def build_description(owner_id: str, display_name: str) -> str:
    """Repository description carrying both tags."""
    return f"{DESCRIPTION_PREFIX} {owner_tag(owner_id)} {display_tag(display_name)}"


def parse_display_name(description: str | None) -> str | None:
    """Extract the display name from a description, or None if untagged."""
    if not description:
        return None
    match = _DISPLAY_RE.search(description)
    return match.group(1) if match else None


def is_owned_by(description: str | None, owner_id: str) -> bool:
    """
    Exact tag match: "[owner:ab]" does not match "[owner:abc]" because the
    closing bracket is part of the tag.
    """
    return bool(description) and owner_tag(owner_id) in description


def site_url(slug: str) -> str:
    return f"https://{slug}.netlify.app"


def to_summary(repo: dict) -> SiteSummary:
    """Map a GitHub repository payload to a listing entry."""
    slug = repo["name"]
    return SiteSummary(
        id=slug,
        name=parse_display_name(repo.get("description")) or slug,
        url=site_url(slug),
        github_url=repo.get("html_url", ""),
        created_at=repo.get("created_at"),
    )


class SiteRegistry:
    """
    Virtual registry of sites, derived from repository descriptions.
    """

    def __init__(self, github: GitHubClient) -> None:
        self._github = github

    def list_sites(self, owner_id: str) -> list[SiteSummary]:
        """
        Return every site whose description carries the owner's tag, in the
        order GitHub lists them (most recently updated first).

        Raises:
            GitHubAPIError: If the listing call fails
        """
        repos = self._github.list_org_repos(repo_type="all", sort="updated")
        owned = [repo for repo in repos if is_owned_by(repo.get("description"), owner_id)]
        console.print(
            f"[cyan][REGISTRY] {len(owned)} of {len(repos)} repositories owned by {owner_id}[/cyan]"
        )
        return [to_summary(repo) for repo in owned]

    def get_site(self, owner_id: str, slug: str) -> SiteSummary | None:
        """Return one site if it exists and belongs to the owner."""
        try:
            repo = self._github.get_repo(slug)
        except GitHubAPIError as e:
            if e.status_code == 404:
                return None
            raise

        if not is_owned_by(repo.get("description"), owner_id):
            return None
        return to_summary(repo)

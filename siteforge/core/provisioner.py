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
# THE REPOSITORY PROVISIONER
# -----------------------------------------------------------------------------
# Responsibility: Turn a user-chosen name into a GitHub repository that
# Netlify can publish and the AI workflow can edit.
#
# Flow:
# 1. Slug = <name>-<6 hex chars> (unique across the organization)
# 2. Create the repo with auto_init, ownership tags in the description
# 3. Wait REPO_SETTLE_SECONDS (GitHub answers "not found" right after creation)
# 4. Commit each template file through the contents API
#
# A failure after step 2 leaves a half-populated repository behind. No
# cleanup is attempted.
# -----------------------------------------------------------------------------

import time
import uuid

from rich.console import Console

from siteforge.core.registry import build_description
from siteforge.core.templates import get_template_files
from siteforge.domain.models import ProvisionedRepo
from siteforge.infra.github_client import GitHubAPIError, GitHubClient

console = Console()

# Delay between repository creation and the first content write
REPO_SETTLE_SECONDS = 2

SLUG_SUFFIX_LENGTH = 6


class ProvisionError(Exception):
    """Raised when a site repository cannot be created or populated."""

    pass


def generate_slug(name: str) -> str:
    """`<name>-<suffix>`; a collision surfaces as a creation failure upstream."""
    return f"{name}-{uuid.uuid4().hex[:SLUG_SUFFIX_LENGTH]}"


class RepoProvisioner:
    """Creates template-populated site repositories."""

    def __init__(self, github: GitHubClient) -> None:
        self._github = github

    def create_repo(self, name: str, owner_id: str) -> ProvisionedRepo:
        """
        Create and populate a site repository.

        Args:
            name: Validated site name (also the display name)
            owner_id: Opaque user id from the identity provider

        Returns:
            The provisioned repository

        Raises:
            ProvisionError: Name taken, permissions, rate limit, or any
                other upstream failure (message kept verbatim)
        """
        slug = generate_slug(name)
        description = build_description(owner_id, name)

        console.print(f"[cyan][PROVISIONER] Provisioning {slug} for {owner_id}[/cyan]")

        try:
            repo = self._github.create_org_repo(slug, description, private=False, auto_init=True)
        except GitHubAPIError as e:
            console.print(f"[red][PROVISIONER] Repository creation failed: {e}[/red]")
            raise ProvisionError(str(e))

        time.sleep(REPO_SETTLE_SECONDS)

        files = get_template_files(name)
        try:
            for file in files:
                self._github.put_file(slug, file.path, file.content, message=f"Add {file.path}")
        except GitHubAPIError as e:
            console.print(f"[red][PROVISIONER] Template push failed on {slug}: {e}[/red]")
            raise ProvisionError(str(e))

        console.print(f"[green][PROVISIONER] {slug} ready ({len(files)} template files)[/green]")

        return ProvisionedRepo(
            slug=slug,
            display_name=name,
            html_url=repo.get("html_url") or f"https://github.com/{self._github.org}/{slug}",
            description=description,
            created_at=repo.get("created_at"),
        )

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
# THE HOST LINKER - NETLIFY CONTINUOUS DEPLOYMENT
# -----------------------------------------------------------------------------
# Responsibility: Create a Netlify site bound to a site repository so every
# push to main is deployed.
#
# No build command: the repository root is published as-is. The AI workflow
# pushes, Netlify deploys, and this process never sees the deploy itself.
# -----------------------------------------------------------------------------

import os

from rich.console import Console

from siteforge.core.registry import site_url
from siteforge.domain.models import HostSite
from siteforge.infra.netlify_client import NetlifyAPIError, NetlifyClient

console = Console()

DEPLOY_BRANCH = "main"


class HostLinkError(Exception):
    """Raised when the Netlify site cannot be created."""

    pass


def _to_host_site(site: dict) -> HostSite:
    return HostSite(
        id=site["id"],
        name=site["name"],
        url=site.get("ssl_url") or site_url(site["name"]),
        admin_url=site.get("admin_url"),
        deploy_state=(site.get("published_deploy") or {}).get("state"),
    )


class HostLinker:
    """
    Netlify site creation for site repositories.

    Requirements:
    - NETLIFY_GITHUB_INSTALLATION_ID: the Netlify GitHub App installation
      that can read the organization's repositories
    """

    def __init__(
        self,
        netlify: NetlifyClient,
        github_org: str | None = None,
        installation_id: str | None = None,
    ) -> None:
        self._netlify = netlify
        self._github_org = github_org or os.getenv("GITHUB_ORG")
        self._installation_id = installation_id or os.getenv("NETLIFY_GITHUB_INSTALLATION_ID")

        if not self._installation_id:
            console.print(
                "[yellow][HOST] NETLIFY_GITHUB_INSTALLATION_ID not set - repo linking disabled[/yellow]"
            )

    def is_configured(self) -> bool:
        return bool(self._netlify.is_configured() and self._github_org and self._installation_id)

    def link_site(self, slug: str) -> HostSite:
        """
        Create a Netlify site named `slug` that deploys from `<org>/<slug>`.

        Returns:
            The new site with its public and admin URLs

        Raises:
            HostLinkError: If the deploy key or the site cannot be created
                (e.g., the name is already taken on Netlify)
        """
        if not self.is_configured():
            raise HostLinkError("Netlify hosting not configured")

        console.print(f"[cyan][HOST] Linking {self._github_org}/{slug} to Netlify...[/cyan]")

        try:
            deploy_key = self._netlify.create_deploy_key()
            site = self._netlify.create_site(
                {
                    "name": slug,
                    "repo": {
                        "provider": "github",
                        "repo": f"{self._github_org}/{slug}",
                        "branch": DEPLOY_BRANCH,
                        "cmd": "",
                        "dir": ".",
                        "installation_id": self._installation_id,
                        "deploy_key_id": deploy_key["id"],
                    },
                }
            )
        except NetlifyAPIError as e:
            console.print(f"[red][HOST] Site creation failed: {e}[/red]")
            raise HostLinkError(str(e))

        host = _to_host_site(site)
        console.print(f"[green][HOST] LIVE: {host.url}[/green]")
        return host

    def get_site(self, slug: str) -> HostSite | None:
        """Look up the Netlify site for `slug`; None if it does not exist."""
        try:
            return _to_host_site(self._netlify.get_site(f"{slug}.netlify.app"))
        except NetlifyAPIError as e:
            if e.status_code == 404:
                return None
            raise HostLinkError(str(e))

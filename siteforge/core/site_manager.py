# -----------------------------------------------------------------------------
# THE SITE MANAGER - ORCHESTRATOR
# -----------------------------------------------------------------------------
# Orchestrates the site pipeline for the HTTP API and the CLI.
#
# Functions:
# - create_site: Policy -> Repo -> Secret -> Host -> (fire-and-forget) first build
# - trigger_edit: Policy -> Dispatch (awaited, retries included)
# - get_status: Latest run, classified
# - list_sites / get_site: Owner-filtered registry lookups
# - drain: Wait for background dispatches (application shutdown)
#
# The provisioners use blocking HTTP, so each step runs in a worker thread.
# Steps run strictly in order; a failing step aborts the rest and nothing
# already created upstream is rolled back.
# -----------------------------------------------------------------------------

import asyncio
import os
import traceback
from collections.abc import Coroutine

from rich.console import Console

from siteforge.core.dispatcher import DispatchError, JobDispatcher
from siteforge.core.host_linker import HostLinker
from siteforge.core.policy import PolicyGate
from siteforge.core.prompts import build_initial_prompt, initial_build_model
from siteforge.core.provisioner import RepoProvisioner
from siteforge.core.registry import SiteRegistry
from siteforge.core.repo_secrets import AGENT_SECRET_NAME, SecretProvisionError, SecretProvisioner
from siteforge.core.status import StatusPoller
from siteforge.domain.models import CreatedSite, HostSite, SiteSummary, WorkflowStatus
from siteforge.infra.github_client import GitHubClient
from siteforge.infra.netlify_client import NetlifyClient

console = Console()


class SiteManager:
    """
    The SiteForge orchestrator.

    Pipeline: Name -> Policy -> GitHub repo -> Actions secret -> Netlify site
    All public methods are coroutines; none of them blocks the event loop.
    """

    def __init__(
        self,
        github: GitHubClient | None = None,
        netlify: NetlifyClient | None = None,
        policy: PolicyGate | None = None,
        agent_api_key: str | None = None,
    ) -> None:
        """Initialize the Site Manager and its components."""
        self._github = github or GitHubClient()
        self._netlify = netlify or NetlifyClient()
        self._policy = policy or PolicyGate()

        self._provisioner = RepoProvisioner(self._github)
        self._secrets = SecretProvisioner(self._github)
        self._linker = HostLinker(self._netlify, github_org=self._github.org)
        self._dispatcher = JobDispatcher(self._github)
        self._poller = StatusPoller(self._github)
        self._registry = SiteRegistry(self._github)

        self._agent_api_key = agent_api_key or os.getenv("ANTHROPIC_API_KEY")
        if not self._agent_api_key:
            console.print("[yellow][SITES] ANTHROPIC_API_KEY not set - new sites cannot run edits[/yellow]")

        # Strong references to fire-and-forget tasks
        self._background: set[asyncio.Task] = set()

        console.print("[green][SITES] Site Manager online[/green]")

    @property
    def pending_tasks(self) -> int:
        return len(self._background)

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    async def create_site(
        self, owner_id: str, name: str, description: str | None = None
    ) -> CreatedSite:
        """
        Create a site: repository, secret, Netlify link.

        With a description, the first AI build is started in the background
        after the result is prepared. The caller never waits for it and its
        failure is only logged.

        Raises:
            SiteNameRejected: Before any upstream call
            SecretProvisionError: Before any upstream call when no agent key is set
            ProvisionError, SecretProvisionError, HostLinkError: Upstream failure
        """
        self._policy.validate_site_name(name)
        if not self._agent_api_key:
            raise SecretProvisionError(f"No value configured for secret {AGENT_SECRET_NAME}")

        repo = await asyncio.to_thread(self._provisioner.create_repo, name, owner_id)
        await asyncio.to_thread(
            self._secrets.provision, repo.slug, AGENT_SECRET_NAME, self._agent_api_key
        )
        host = await asyncio.to_thread(self._linker.link_site, repo.slug)

        site = CreatedSite(
            id=repo.slug,
            name=repo.display_name,
            url=host.url,
            github_url=repo.html_url,
            admin_url=host.admin_url,
        )

        if description and description.strip():
            self._spawn(self._initial_build(repo.slug, name, description))

        return site

    async def trigger_edit(self, site_id: str, prompt: str, model: str | None = None) -> None:
        """
        Dispatch an AI edit and return once GitHub accepted it.

        Raises:
            PromptRejected: Before any upstream call
            DispatchError: After all dispatch attempts failed
        """
        self._policy.validate_prompt(prompt)
        await asyncio.to_thread(self._dispatcher.trigger_edit, site_id, prompt, model)

    async def get_status(self, site_id: str) -> WorkflowStatus:
        return await asyncio.to_thread(self._poller.get_status, site_id)

    async def list_sites(self, owner_id: str) -> list[SiteSummary]:
        return await asyncio.to_thread(self._registry.list_sites, owner_id)

    async def get_site(self, owner_id: str, site_id: str) -> SiteSummary | None:
        return await asyncio.to_thread(self._registry.get_site, owner_id, site_id)

    async def get_host(self, site_id: str) -> HostSite | None:
        return await asyncio.to_thread(self._linker.get_site, site_id)

    async def drain(self) -> None:
        """Wait for every background dispatch to finish."""
        if self._background:
            console.print(f"[cyan][SITES] Waiting for {len(self._background)} background task(s)[/cyan]")
            await asyncio.gather(*self._background, return_exceptions=True)

    # =========================================================================
    # BACKGROUND WORK
    # =========================================================================

    def _spawn(self, coro: Coroutine) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def _initial_build(self, slug: str, name: str, description: str) -> None:
        """First full build of a new site. Never raises."""
        prompt = build_initial_prompt(name, description)
        model = initial_build_model()
        console.print(f"[cyan][SITES] Starting initial build of {slug} ({model})[/cyan]")
        try:
            await asyncio.to_thread(self._dispatcher.trigger_edit, slug, prompt, model)
        except DispatchError as e:
            console.print(f"[red][SITES] Initial build of {slug} not dispatched: {e}[/red]")
        except Exception as e:
            console.print(f"[red][SITES] Initial build of {slug} crashed: {e}[/red]")
            console.print(f"[dim]{traceback.format_exc()}[/dim]")

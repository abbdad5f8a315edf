# -----------------------------------------------------------------------------
# SITEFORGE - OPERATOR CLI
# -----------------------------------------------------------------------------
# Drive the same pipeline as the dashboard from a terminal:
#
#   siteforge serve
#   siteforge create my-photo-site --owner user_123 -d "portfolio, dark theme"
#   siteforge list --owner user_123
#   siteforge edit my-photo-site-1a2b3c "Make the header blue" --watch
#   siteforge status my-photo-site-1a2b3c
#   siteforge watch my-photo-site-1a2b3c
# -----------------------------------------------------------------------------

import argparse
import asyncio
import os
import sys

from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from siteforge.core.dispatcher import DispatchError
from siteforge.core.host_linker import HostLinkError
from siteforge.core.policy import PromptRejected, SiteNameRejected
from siteforge.core.provisioner import ProvisionError
from siteforge.core.registry import site_url
from siteforge.core.repo_secrets import SecretProvisionError
from siteforge.core.site_manager import SiteManager
from siteforge.core.watcher import DeployWatcher
from siteforge.domain.models import WatchPhase, WorkflowStatus
from siteforge.infra.github_client import GitHubAPIError
from siteforge.infra.netlify_client import NetlifyAPIError

console = Console()

PHASE_STYLES = {
    WatchPhase.IDLE: "dim",
    WatchPhase.WORKING: "yellow",
    WatchPhase.DONE: "green",
    WatchPhase.FAILED: "red",
}


# --- COMMANDS ---
async def cmd_create(manager: SiteManager, args: argparse.Namespace) -> int:
    with console.status(f"[bold yellow]Provisioning {args.name}...[/bold yellow]"):
        site = await manager.create_site(args.owner, args.name, args.description)

    console.print(
        Panel(
            f"[bold]{site.name}[/bold] ({site.id})\n"
            f"Live:   {site.url}\n"
            f"Source: {site.github_url}\n"
            f"Admin:  {site.admin_url or '-'}",
            title="SITE CREATED",
            border_style="green",
        )
    )
    if args.description:
        console.print("[cyan]Initial build dispatching in the background...[/cyan]")
        await manager.drain()
    return 0


async def cmd_list(manager: SiteManager, args: argparse.Namespace) -> int:
    sites = await manager.list_sites(args.owner)
    if not sites:
        console.print(f"[yellow]No sites for {args.owner}[/yellow]")
        return 0

    table = Table(title=f"Sites of {args.owner}")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("URL")
    table.add_column("Created", style="dim")
    for site in sites:
        table.add_row(site.id, site.name, site.url, site.created_at or "")
    console.print(table)
    return 0


async def cmd_edit(manager: SiteManager, args: argparse.Namespace) -> int:
    # Latest run before dispatch, so the watcher can tell it from the new one
    previous = await manager.get_status(args.site_id) if args.watch else None

    await manager.trigger_edit(args.site_id, args.prompt)
    console.print(f"[green]Edit triggered on {args.site_id}[/green]")
    if args.watch:
        return await watch_site(manager, args.site_id, submitted=True, previous=previous)
    return 0


async def cmd_status(manager: SiteManager, args: argparse.Namespace) -> int:
    run = await manager.get_status(args.site_id)
    host = await manager.get_host(args.site_id)

    lines = [
        f"Run:        {run.status} ({run.conclusion or '-'}) -> [bold]{run.state}[/bold]",
        f"Started:    {run.started_at or '-'}",
        f"Run URL:    {run.html_url or '-'}",
        f"Deploy:     {host.deploy_state if host else 'no Netlify site'}",
    ]
    console.print(Panel("\n".join(lines), title=args.site_id, border_style="cyan"))
    return 0


async def cmd_watch(manager: SiteManager, args: argparse.Namespace) -> int:
    return await watch_site(manager, args.site_id, submitted=False)


async def watch_site(
    manager: SiteManager,
    site_id: str,
    submitted: bool,
    previous: WorkflowStatus | None = None,
) -> int:
    """Poll until a watched run finishes and its deploy grace period passes."""
    finished = asyncio.Event()
    outcome = {"phase": WatchPhase.IDLE}

    def on_phase(phase: WatchPhase) -> None:
        style = PHASE_STYLES[phase]
        console.print(f"[{style}]{site_id}: {phase.value}[/{style}]")
        if phase in (WatchPhase.DONE, WatchPhase.FAILED):
            outcome["phase"] = phase
        if phase == WatchPhase.IDLE and outcome["phase"] != WatchPhase.IDLE:
            finished.set()

    def on_refresh() -> None:
        console.print(f"[bold green]Changes deployed: {site_url(site_id)}[/bold green]")

    watcher = DeployWatcher(
        lambda: manager.get_status(site_id),
        on_refresh=on_refresh,
        on_phase_change=on_phase,
    )
    if submitted:
        watcher.mark_submitted(previous)
    watcher.start()

    try:
        await finished.wait()
    finally:
        await watcher.stop()

    return 0 if outcome["phase"] == WatchPhase.DONE else 1


COMMANDS = {
    "create": cmd_create,
    "list": cmd_list,
    "edit": cmd_edit,
    "status": cmd_status,
    "watch": cmd_watch,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="siteforge", description="SiteForge operator CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("serve", help="Run the HTTP API")

    default_owner = os.getenv("SITEFORGE_OWNER")

    create = sub.add_parser("create", help="Create a site")
    create.add_argument("name")
    create.add_argument("--owner", default=default_owner, required=default_owner is None)
    create.add_argument("-d", "--description", default=None)

    listing = sub.add_parser("list", help="List a user's sites")
    listing.add_argument("--owner", default=default_owner, required=default_owner is None)

    edit = sub.add_parser("edit", help="Dispatch an AI edit")
    edit.add_argument("site_id")
    edit.add_argument("prompt")
    edit.add_argument("--watch", action="store_true", help="Follow the run until deployed")

    status = sub.add_parser("status", help="Latest edit run and deploy state")
    status.add_argument("site_id")

    watch = sub.add_parser("watch", help="Follow the next edit run until deployed")
    watch.add_argument("site_id")

    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    if args.command == "serve":
        from siteforge.main import run

        run()
        return 0

    manager = SiteManager()
    try:
        return asyncio.run(COMMANDS[args.command](manager, args))
    except (SiteNameRejected, PromptRejected) as e:
        console.print(f"[bold red]Rejected:[/bold red] {e}")
        return 2
    except (
        ProvisionError,
        SecretProvisionError,
        HostLinkError,
        DispatchError,
        GitHubAPIError,
        NetlifyAPIError,
    ) as e:
        console.print(f"[bold red]Failed:[/bold red] {e}")
        return 1
    except KeyboardInterrupt:
        console.print("[yellow]Stopped.[/yellow]")
        return 130


if __name__ == "__main__":
    sys.exit(main())

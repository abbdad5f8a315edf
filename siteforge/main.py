# -----------------------------------------------------------------------------
# SITEFORGE - FASTAPI INTERFACE
# -----------------------------------------------------------------------------
# Async API behind the dashboard.
#
# Endpoints:
# - GET  /health                : Health check
# - GET  /api/sites             : List the caller's sites
# - POST /api/sites             : Create a site (repo + secret + Netlify)
# - GET  /api/sites/{site_id}   : One of the caller's sites
# - POST /api/ai-edit           : Dispatch an AI edit
# - GET  /api/workflow-status   : Latest edit run of a site (?repo=<slug>)
#
# Errors are returned as {"error": "<message>"}.
# -----------------------------------------------------------------------------

import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from rich.console import Console
from rich.panel import Panel
from starlette.exceptions import HTTPException as StarletteHTTPException

from siteforge import __version__
from siteforge.core.auth import get_current_user, require_rate_limit
from siteforge.core.dispatcher import DispatchError
from siteforge.core.host_linker import HostLinkError
from siteforge.core.policy import PromptRejected, SiteNameRejected
from siteforge.core.provisioner import ProvisionError
from siteforge.core.repo_secrets import SecretProvisionError
from siteforge.core.site_manager import SiteManager
from siteforge.domain.models import (
    CreatedSite,
    CreateSiteRequest,
    EditRequest,
    SiteSummary,
    WorkflowStatus,
)
from siteforge.infra.github_client import GitHubAPIError
from siteforge.infra.netlify_client import NetlifyAPIError

PROJECT_ROOT = Path(__file__).parent.parent
load_dotenv(PROJECT_ROOT / ".env")

console = Console()

# Site Manager (lazy init)
_manager: SiteManager | None = None


def get_manager() -> SiteManager:
    global _manager
    if _manager is None:
        _manager = SiteManager()
    return _manager


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    print_banner()
    console.print("[green]SITEFORGE ONLINE[/green]")

    yield

    console.print("[yellow]SITEFORGE SHUTTING DOWN[/yellow]")
    if _manager is not None:
        await _manager.drain()


app = FastAPI(
    title="SiteForge",
    description="Describe a website; an AI agent builds and redeploys it",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("SITEFORGE_CORS_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "Invalid request body"})


@app.exception_handler(GitHubAPIError)
@app.exception_handler(NetlifyAPIError)
async def upstream_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Upstream failures on read paths (listing, lookup) surface as 502."""
    console.print(f"[red][API] Upstream error on {request.url.path}: {exc}[/red]")
    return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content={"error": str(exc)})


# =============================================================================
# DEPENDENCIES
# =============================================================================

Manager = Annotated[SiteManager, Depends(get_manager)]
UserId = Annotated[str, Depends(get_current_user)]
RateLimited = Annotated[None, Depends(require_rate_limit)]


# =============================================================================
# ENDPOINTS
# =============================================================================


@app.get("/health")
async def health_check():
    """Health check for load balancers."""
    return {"status": "online", "service": "siteforge", "version": __version__}


@app.get("/api/sites", response_model=list[SiteSummary])
async def list_sites(user_id: UserId, manager: Manager, _: RateLimited):
    """List sites owned by the caller."""
    return await manager.list_sites(user_id)


@app.post("/api/sites", response_model=CreatedSite)
async def create_site(request: CreateSiteRequest, user_id: UserId, manager: Manager, _: RateLimited):
    """Create a site: GitHub repo from template, agent secret, linked Netlify site."""
    try:
        return await manager.create_site(user_id, request.name, request.description)
    except SiteNameRejected as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except (ProvisionError, SecretProvisionError, HostLinkError) as e:
        console.print(f"[red][API] Site creation failed: {e}[/red]")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))


@app.get("/api/sites/{site_id}", response_model=SiteSummary)
async def get_site(site_id: str, user_id: UserId, manager: Manager, _: RateLimited):
    """One site, only if the caller owns it."""
    site = await manager.get_site(user_id, site_id)
    if site is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Site not found")
    return site


@app.post("/api/ai-edit")
async def ai_edit(request: EditRequest, user_id: UserId, manager: Manager, _: RateLimited):
    """Dispatch an AI edit. Returns once GitHub accepted the run, not when it ends."""
    if not request.site_id or not request.prompt:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing siteId or prompt")

    try:
        await manager.trigger_edit(request.site_id, request.prompt)
    except PromptRejected as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DispatchError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    return {"ok": True, "message": "Edit triggered"}


@app.get("/api/workflow-status", response_model=WorkflowStatus)
async def workflow_status(user_id: UserId, manager: Manager, repo: str | None = None):
    """Latest edit run of a site. Never fails upstream: errors read as `none`."""
    if not repo:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing repo param")
    return await manager.get_status(repo)


# =============================================================================
# BANNER
# =============================================================================


def print_banner() -> None:
    """Print the SiteForge startup banner."""
    console.print(
        Panel(
            f"[bold cyan]SITEFORGE v{__version__}[/bold cyan]\n"
            "Describe it. The agent builds it. Netlify ships it.",
            border_style="cyan",
        )
    )


def run() -> None:
    import uvicorn

    port = int(os.getenv("SITEFORGE_PORT", "5050"))
    uvicorn.run(app, host="0.0.0.0", port=port)


if __name__ == "__main__":
    run()

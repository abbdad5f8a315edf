# -----------------------------------------------------------------------------
# DOMAIN LAYER
# -----------------------------------------------------------------------------
# Pydantic models shared by every layer: sites, host sites and edit jobs.
# -----------------------------------------------------------------------------

from .models import (
    CreatedSite,
    CreateSiteRequest,
    EditRequest,
    HostSite,
    ProvisionedRepo,
    RunState,
    SiteSummary,
    TemplateFile,
    WatchPhase,
    WorkflowStatus,
)

__all__ = [
    "CreatedSite", "CreateSiteRequest", "EditRequest", "HostSite",
    "ProvisionedRepo", "RunState", "SiteSummary", "TemplateFile",
    "WatchPhase", "WorkflowStatus",
]

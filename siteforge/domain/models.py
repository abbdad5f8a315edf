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
# DOMAIN MODELS - SITES, HOSTS AND EDIT JOBS
# -----------------------------------------------------------------------------
# These Pydantic models are the shapes that flow between the provisioners,
# the dispatcher, the poller and the HTTP API.
#
# There is no database: a Site is a GitHub repository plus a Netlify site,
# and an Edit Job is whatever the latest GitHub Actions run says it is.
# -----------------------------------------------------------------------------

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class RunState(str, Enum):
    """
    Classified state of the latest edit job for a site.

    Derived on every poll from the remote run; never stored.
    """

    NONE = "none"
    WORKING = "working"
    DONE = "done"
    FAILED = "failed"


class WatchPhase(str, Enum):
    """
    Phase of a client-side deploy watcher.

    idle -> working -> done -> idle
    working -> failed -> idle
    """

    IDLE = "idle"
    WORKING = "working"
    DONE = "done"
    FAILED = "failed"


class TemplateFile(BaseModel):
    """A single file committed into every new site repository."""

    path: str = Field(..., description="Path inside the repository (e.g., 'index.html')")
    content: str = Field(..., description="The full content of the file")


class ProvisionedRepo(BaseModel):
    """A freshly created site repository."""

    slug: str = Field(..., description="Repository name: <name>-<suffix>")
    display_name: str
    html_url: str
    description: str
    created_at: str | None = None


class HostSite(BaseModel):
    """A Netlify site linked to a site repository."""

    id: str
    name: str
    url: str
    admin_url: str | None = None
    deploy_state: str | None = None


class CreatedSite(BaseModel):
    """Response body for a successful site creation."""

    id: str
    name: str
    url: str
    github_url: str
    admin_url: str | None = None


class SiteSummary(BaseModel):
    """One entry of a user's site listing."""

    id: str
    name: str
    url: str
    github_url: str
    created_at: str | None = None


class WorkflowStatus(BaseModel):
    """
    The latest edit job of a repository as seen by the poller.

    `status` and `conclusion` are GitHub's raw values; `state` is the
    classification clients drive their UI from.
    """

    status: str = "none"
    conclusion: str | None = None
    started_at: str | None = None
    html_url: str | None = None
    state: RunState = RunState.NONE

    model_config = ConfigDict(use_enum_values=True)


class CreateSiteRequest(BaseModel):
    """Body of POST /api/sites."""

    name: str = ""
    description: str | None = None


class EditRequest(BaseModel):
    """Body of POST /api/ai-edit."""

    site_id: str = Field("", alias="siteId")
    prompt: str = ""

    model_config = ConfigDict(populate_by_name=True)

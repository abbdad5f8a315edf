# -----------------------------------------------------------------------------
# THE STATUS POLLER
# -----------------------------------------------------------------------------
# Responsibility: Report what the latest AI edit run of a repository is
# doing. Stateless: every call re-reads GitHub's newest run.
#
# A failed query and "no runs yet" both come back as `none`. The dashboard
# keeps polling either way, so precision is traded for never crashing it.
# -----------------------------------------------------------------------------

import requests
from rich.console import Console

from siteforge.domain.models import RunState, WorkflowStatus
from siteforge.infra.github_client import GitHubAPIError, GitHubClient

console = Console()

# GitHub run statuses that mean "not finished yet"
ACTIVE_STATUSES = {"queued", "in_progress", "waiting", "requested", "pending"}


def classify_run(status: str | None, conclusion: str | None) -> RunState:
    """
    Map GitHub's (status, conclusion) pair to a RunState.

    Any conclusion other than success on a completed run counts as failed
    (failure, cancelled, timed_out, ...).
    """
    if status in ACTIVE_STATUSES:
        return RunState.WORKING
    if status == "completed":
        return RunState.DONE if conclusion == "success" else RunState.FAILED
    return RunState.NONE


class StatusPoller:
    """Reads and classifies the latest workflow run."""

    def __init__(self, github: GitHubClient) -> None:
        self._github = github

    def get_status(self, repo: str) -> WorkflowStatus:
        try:
            runs = self._github.list_workflow_runs(repo, per_page=1)
        except (GitHubAPIError, requests.RequestException) as e:
            console.print(f"[yellow][STATUS] Run query failed for {repo}: {e}[/yellow]")
            return WorkflowStatus()

        if not runs or not isinstance(runs[0], dict):
            return WorkflowStatus()

        run = runs[0]
        status = run.get("status") or "none"
        conclusion = run.get("conclusion")
        return WorkflowStatus(
            status=status,
            conclusion=conclusion,
            started_at=run.get("created_at"),
            html_url=run.get("html_url"),
            state=classify_run(status, conclusion),
        )

# -----------------------------------------------------------------------------
# THE JOB DISPATCHER - AI EDIT TRIGGER
# -----------------------------------------------------------------------------
# Responsibility: Start the ai-edit workflow of a site repository with the
# user's prompt and a model id.
#
# Retry policy (the only retry loop in SiteForge):
# - A freshly pushed workflow file is not dispatchable until GitHub has
#   indexed it, so the call may fail right after provisioning.
# - MAX_DISPATCH_ATTEMPTS attempts in total, waiting attempt * base delay
#   after each failure (3s, 6s). No jitter.
# - Every error is retried, auth and quota errors included.
# - The error of the last attempt is raised.
#
# Dispatch is not idempotent: every call starts a new run, and concurrent
# dispatches for the same repository race inside GitHub Actions.
# -----------------------------------------------------------------------------

import os
import time

from rich.console import Console

from siteforge.core.templates import WORKFLOW_FILE
from siteforge.infra.github_client import GitHubAPIError, GitHubClient

console = Console()

# Configuration
MAX_DISPATCH_ATTEMPTS = 3
DISPATCH_BASE_DELAY_SECONDS = 3
DISPATCH_REF = "main"
DEFAULT_EDIT_MODEL = "claude-sonnet-4-5-20250929"


class DispatchError(Exception):
    """Raised when the workflow could not be dispatched after all attempts."""

    def __init__(self, message: str, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts


class JobDispatcher:
    """Triggers AI edit runs through workflow_dispatch."""

    def __init__(
        self,
        github: GitHubClient,
        max_attempts: int = MAX_DISPATCH_ATTEMPTS,
        base_delay: float = DISPATCH_BASE_DELAY_SECONDS,
    ) -> None:
        self._github = github
        self._max_attempts = max_attempts
        self._base_delay = base_delay

    def trigger_edit(self, repo: str, prompt: str, model: str | None = None) -> None:
        """
        Dispatch one AI edit run.

        Args:
            repo: Site slug
            prompt: Free-text edit request, passed to the agent untouched
            model: Claude model id; SITEFORGE_EDIT_MODEL or DEFAULT_EDIT_MODEL when omitted

        Raises:
            DispatchError: With the last attempt's error once all attempts fail
        """
        inputs = {
            "prompt": prompt,
            "model": model or os.getenv("SITEFORGE_EDIT_MODEL", DEFAULT_EDIT_MODEL),
        }

        for attempt in range(1, self._max_attempts + 1):
            try:
                self._github.dispatch_workflow(repo, WORKFLOW_FILE, DISPATCH_REF, inputs)
                console.print(
                    f"[green][DISPATCH] Edit dispatched to {repo} "
                    f"(model={inputs['model']}, attempt {attempt})[/green]"
                )
                return
            except GitHubAPIError as e:
                if attempt < self._max_attempts:
                    delay = attempt * self._base_delay
                    console.print(
                        f"[yellow][DISPATCH] Attempt {attempt}/{self._max_attempts} on {repo} "
                        f"failed: {e} - retrying in {delay}s[/yellow]"
                    )
                    time.sleep(delay)
                else:
                    console.print(
                        f"[red][DISPATCH] Giving up on {repo} after {attempt} attempts: {e}[/red]"
                    )
                    raise DispatchError(str(e), attempts=attempt) from e

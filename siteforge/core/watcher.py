# -----------------------------------------------------------------------------
# THE DEPLOY WATCHER - CLIENT-SIDE POLLING
# -----------------------------------------------------------------------------
# Responsibility: Turn a stream of stateless status polls into the phases a
# site view shows, and tell the view when to reload its preview.
#
#     idle -> working -> done -> idle
#     working -> failed -> idle
#
# The poller only reports the latest run, so transitions are detected here by
# comparing against the previous phase. A finished run is not a finished
# deploy: Netlify still has to publish the push, so the preview refresh fires
# DEPLOY_GRACE_SECONDS after the run completes. That is a heuristic delay,
# scheduled on the loop, never a blocking wait.
#
# stop() cancels the poll task and every pending timer.
# -----------------------------------------------------------------------------

import asyncio
import contextlib
from collections.abc import Awaitable, Callable

from rich.console import Console

from siteforge.domain.models import RunState, WatchPhase, WorkflowStatus

console = Console()

POLL_INTERVAL_SECONDS = 6
DEPLOY_GRACE_SECONDS = 15
# How long "done"/"failed" stays visible before returning to idle
READY_DISPLAY_SECONDS = 3


def run_key(status: WorkflowStatus) -> str | None:
    """Identity of a run: its page URL, else its start time."""
    return status.html_url or status.started_at


def next_phase(phase: WatchPhase, state: RunState) -> WatchPhase:
    """
    Pure transition function.

    A run seen as working always means working. Terminal states only count
    when we were watching a working run; a `none` (no run or failed poll)
    never changes the phase.
    """
    if state == RunState.WORKING:
        return WatchPhase.WORKING
    if phase == WatchPhase.WORKING:
        if state == RunState.DONE:
            return WatchPhase.DONE
        if state == RunState.FAILED:
            return WatchPhase.FAILED
    return phase


class DeployWatcher:
    """
    Polls a status source on a fixed interval and drives the phase machine.

    Args:
        fetch_status: Coroutine function returning the latest WorkflowStatus
        on_refresh: Called when the preview should reload
        on_phase_change: Called with every new phase
    """

    def __init__(
        self,
        fetch_status: Callable[[], Awaitable[WorkflowStatus]],
        on_refresh: Callable[[], None] | None = None,
        on_phase_change: Callable[[WatchPhase], None] | None = None,
        interval: float = POLL_INTERVAL_SECONDS,
        grace: float = DEPLOY_GRACE_SECONDS,
        ready_display: float = READY_DISPLAY_SECONDS,
    ) -> None:
        self._fetch_status = fetch_status
        self._on_refresh = on_refresh
        self._on_phase_change = on_phase_change
        self._interval = interval
        self._grace = grace
        self._ready_display = ready_display

        self._phase = WatchPhase.IDLE
        self._task: asyncio.Task | None = None
        self._timers: set[asyncio.TimerHandle] = set()

        # Set by mark_submitted until the dispatched run is observed
        self._awaiting_run = False
        self._baseline_known = False
        self._stale_run: str | None = None

    @property
    def phase(self) -> WatchPhase:
        return self._phase

    @property
    def pending_timers(self) -> int:
        return len(self._timers)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start(self) -> None:
        """Start polling on the running loop. Idempotent."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._poll_loop())

    async def stop(self) -> None:
        """Stop polling and drop every pending timer."""
        self._cancel_timers()
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    async def _poll_loop(self) -> None:
        while True:
            try:
                await self.poll_once()
            except Exception as e:
                console.print(f"[yellow][WATCHER] Poll failed: {e}[/yellow]")
            await asyncio.sleep(self._interval)

    # =========================================================================
    # STATE MACHINE
    # =========================================================================

    def mark_submitted(self, previous: WorkflowStatus | None = None) -> None:
        """
        An edit was just sent; show working before the first poll sees it.

        GitHub creates the dispatched run a few seconds later, so polls keep
        returning the run that was latest before the dispatch. Terminal
        observations are ignored until the new run shows up: either seen
        working, or finished under a different identity than `previous`
        (the latest run fetched before dispatching). Without `previous`
        only a working observation counts.
        """
        self._awaiting_run = True
        self._baseline_known = previous is not None
        self._stale_run = run_key(previous) if previous is not None else None
        self._set_phase(WatchPhase.WORKING)

    async def poll_once(self) -> WatchPhase:
        return self.observe(await self._fetch_status())

    def observe(self, status: WorkflowStatus) -> WatchPhase:
        """Feed one poll result into the machine."""
        state = RunState(status.state)
        if self._awaiting_run:
            if not self._is_new_run(status, state):
                return self._phase
            self._awaiting_run = False

        previous = self._phase
        phase = next_phase(previous, state)
        if phase == previous:
            return phase

        self._set_phase(phase)
        if phase == WatchPhase.DONE:
            self._schedule(self._grace, self._deploy_ready)
        elif phase == WatchPhase.FAILED:
            self._schedule(self._ready_display, self._reset)
        return phase

    def _is_new_run(self, status: WorkflowStatus, state: RunState) -> bool:
        if state == RunState.NONE:
            return False
        key = run_key(status)
        if self._baseline_known and key == self._stale_run:
            return False
        # A finished run only counts when we know what the old one was
        return state == RunState.WORKING or self._baseline_known

    def _set_phase(self, phase: WatchPhase) -> None:
        if phase == WatchPhase.WORKING:
            # A new run supersedes any pending refresh/reset
            self._cancel_timers()
        if phase == self._phase:
            return
        console.print(f"[cyan][WATCHER] {self._phase.value} -> {phase.value}[/cyan]")
        self._phase = phase
        if self._on_phase_change:
            self._on_phase_change(phase)

    def _deploy_ready(self) -> None:
        if self._on_refresh:
            self._on_refresh()
        self._schedule(self._ready_display, self._reset)

    def _reset(self) -> None:
        self._set_phase(WatchPhase.IDLE)

    # =========================================================================
    # TIMERS
    # =========================================================================

    def _schedule(self, delay: float, callback: Callable[[], None]) -> None:
        loop = asyncio.get_running_loop()
        handle: asyncio.TimerHandle | None = None

        def _fire() -> None:
            self._timers.discard(handle)
            callback()

        handle = loop.call_later(delay, _fire)
        self._timers.add(handle)

    def _cancel_timers(self) -> None:
        for handle in self._timers:
            handle.cancel()
        self._timers.clear()

"""Running session context.

In-flight state for one session's background workflow: the cancel signal,
the pause gate and the task handle.  Nothing here is persisted -- the
durable status lives in the ``AgentSession`` document.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field


def _open_gate() -> asyncio.Event:
    gate = asyncio.Event()
    gate.set()
    return gate


@dataclass
class RunningSession:
    """Live handle for a registered session.

    Created by ``SessionRegistry.register``; released exactly once, either by
    ``stop`` / shutdown or by the workflow itself when it finishes.
    """

    session_id: str

    # -- Signals ---------------------------------------------------------------
    cancel_event: asyncio.Event = field(default_factory=asyncio.Event)
    resume_event: asyncio.Event = field(default_factory=_open_gate)
    """Pause gate.  Cleared while paused; the workflow waits on it between steps."""

    # -- Bookkeeping -----------------------------------------------------------
    task: asyncio.Task[None] | None = None
    released: bool = False
    """Set under the registry lock by whoever releases the registration first."""

    def cancel(self) -> None:
        self.cancel_event.set()
        # Wake a paused workflow so it can observe the cancellation.
        self.resume_event.set()

    def pause(self) -> None:
        if not self.cancel_event.is_set():
            self.resume_event.clear()

    def resume(self) -> None:
        self.resume_event.set()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    @property
    def paused(self) -> bool:
        return not self.resume_event.is_set()

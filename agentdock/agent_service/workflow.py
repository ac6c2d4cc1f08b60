"""Placeholder provisioning workflow.

Runs a bounded number of timed steps standing in for the real
infrastructure work.  Cancellation and pausing are cooperative: both are
observed at step boundaries.
"""

from __future__ import annotations

import asyncio
import contextlib

from loguru import logger

from agentdock.agent_service.context import RunningSession


class WorkflowCancelled(Exception):  # noqa: N818
    """Raised inside the workflow when its cancel signal is observed."""


class ProvisioningWorkflow:
    def __init__(self, steps: int = 10, step_seconds: float = 5.0) -> None:
        if steps < 0:
            msg = "steps must not be negative"
            raise ValueError(msg)
        if step_seconds < 0:
            msg = "step_seconds must not be negative"
            raise ValueError(msg)
        self.steps = steps
        self.step_seconds = step_seconds

    async def run(self, session: RunningSession) -> None:
        """Execute every step.  Raises ``WorkflowCancelled`` when cancelled."""
        for index in range(self.steps):
            await self._checkpoint(session)
            await self.execute_step(session, index)
            await self._checkpoint(session)
        logger.debug("Workflow: session {} finished {} steps", session.session_id, self.steps)

    async def execute_step(self, session: RunningSession, index: int) -> None:
        """Simulate one step.  Override to do real work.

        The delay ends early when the session is cancelled.
        """
        logger.debug("Workflow: session {} step {}/{}", session.session_id, index + 1, self.steps)
        if self.step_seconds <= 0:
            await asyncio.sleep(0)
            return
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(session.cancel_event.wait(), timeout=self.step_seconds)

    async def _checkpoint(self, session: RunningSession) -> None:
        if session.cancelled:
            raise WorkflowCancelled(session.session_id)
        if session.paused:
            logger.debug("Workflow: session {} paused", session.session_id)
            await session.resume_event.wait()
            logger.debug("Workflow: session {} resumed", session.session_id)
        if session.cancelled:
            raise WorkflowCancelled(session.session_id)

"""Session provider -- the lifecycle state machine for agent sessions.

States::

    Created -> Active -> {Completed, Failed, Cancelled, Stopped, Paused}
    Paused  -> Active   (resume)

Every transition is persisted through ``AgentSessionStore.update_status``.
Exactly one party writes a session's terminal status: whoever releases its
registration first (``stop`` or the workflow itself).
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from loguru import logger

from agentdock.agent_service.registry import SessionRegistry
from agentdock.agent_service.workflow import ProvisioningWorkflow, WorkflowCancelled
from agentdock.shared.errors import SessionNotFoundError
from agentdock.shared.models.enums import SessionStatus

if TYPE_CHECKING:
    from types import TracebackType

    from agentdock.agent_service.context import RunningSession
    from agentdock.shared.managers.sessions import AgentSessionStore
    from agentdock.shared.models.session import AgentSession


class SessionStateError(RuntimeError):
    """Raised when a lifecycle operation is not valid for the session's status."""


class SessionProvider:
    """Start, stop, pause and resume agent sessions.

    Background workflows never raise to callers; their outcome is recorded as
    a persisted status.  Use as an async context manager (or call ``aclose``)
    so running workflows are cancelled on shutdown.
    """

    def __init__(
        self,
        sessions: AgentSessionStore,
        workflow: ProvisioningWorkflow | None = None,
        registry: SessionRegistry | None = None,
    ) -> None:
        if sessions is None:
            msg = "sessions is required"
            raise TypeError(msg)
        self._sessions = sessions
        self._workflow = workflow or ProvisioningWorkflow()
        self._registry = registry or SessionRegistry()
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def registry(self) -> SessionRegistry:
        return self._registry

    # -- Lifecycle -------------------------------------------------------------

    async def start(self, session: AgentSession) -> None:
        """Mark *session* ``Active`` and launch its workflow in the background.

        If registration fails (``SessionAlreadyRunningError``,
        ``RegistryClosedError``) or the ``Active`` write fails, the status is
        forced to ``Failed`` and the error is re-raised.  A failed write also
        releases the registration.
        """
        if session is None:
            msg = "session is required"
            raise TypeError(msg)
        if not session.id:
            msg = "Session ID cannot be null or empty"
            raise ValueError(msg)

        try:
            run = await self._registry.register(session.id)
        except RuntimeError as exc:
            await self._mark_failed(session.id, str(exc))
            raise

        try:
            updated = await self._sessions.update_status(session.id, SessionStatus.ACTIVE)
            if updated is None:
                raise SessionNotFoundError(session.id)
        except Exception as exc:
            await self._registry.release(run)
            await self._mark_failed(session.id, str(exc))
            raise

        run.task = asyncio.create_task(self._run_workflow(run), name=f"agent-session-{session.id}")
        self._tasks.add(run.task)
        run.task.add_done_callback(self._tasks.discard)
        logger.info("Session {} started", session.id)

    async def stop(self, session_id: str) -> bool:
        """Cancel a running session and persist ``Stopped``.

        Returns ``False`` if the session is not running.
        """
        if not session_id:
            return False
        run = await self._registry.claim(session_id)
        if run is None:
            return False

        run.cancel()
        await self._sessions.update_status(session_id, SessionStatus.STOPPED)
        logger.info("Session {} stopped", session_id)
        return True

    async def pause(self, session_id: str) -> bool:
        """Persist ``Paused`` and hold the workflow at its next step boundary.

        Returns ``False`` if the session is not running.
        """
        run = self._registry.get(session_id) if session_id else None
        if run is None:
            return False

        await self._sessions.update_status(session_id, SessionStatus.PAUSED)
        run.pause()
        logger.info("Session {} paused", session_id)
        return True

    async def resume(self, session_id: str) -> bool:
        """Resume a ``Paused`` session.

        A session that is still registered has its pause gate reopened; one
        that is not (e.g. after a restart) is started again from scratch.
        Raises ``SessionStateError`` if the session does not exist or is not
        paused.
        """
        session = await self._sessions.get_by_id(session_id) if session_id else None
        if session is None:
            msg = f"Session {session_id} not found"
            raise SessionStateError(msg)
        if session.status != SessionStatus.PAUSED:
            msg = f"Session {session_id} is not paused (status: {session.status})"
            raise SessionStateError(msg)

        run = self._registry.get(session_id)
        if run is None:
            logger.info("Session {} not running, restarting", session_id)
            await self.start(session)
            return True

        await self._sessions.update_status(session_id, SessionStatus.ACTIVE)
        run.resume()
        logger.info("Session {} resumed", session_id)
        return True

    # -- Query -----------------------------------------------------------------

    async def get_status(self, session_id: str) -> SessionStatus | None:
        """Return the persisted status, or ``None`` if it cannot be read."""
        if not session_id:
            return None
        try:
            session = await self._sessions.get_by_id(session_id)
        except Exception:
            logger.exception("Failed to read status of session {}", session_id)
            return None
        return session.status if session is not None else None

    async def is_active(self, session_id: str) -> bool:
        """``True`` only if the session is registered *and* persisted as ``Active``."""
        if not session_id or not self._registry.is_registered(session_id):
            return False
        return await self.get_status(session_id) == SessionStatus.ACTIVE

    # -- Shutdown --------------------------------------------------------------

    async def aclose(self) -> None:
        """Cancel every running session and wait for the workflows to record ``Cancelled``."""
        runs = await self._registry.close()
        for run in runs:
            run.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        logger.info("Session provider closed ({} sessions cancelled)", len(runs))

    async def __aenter__(self) -> SessionProvider:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    # -- Internals -------------------------------------------------------------

    async def _run_workflow(self, run: RunningSession) -> None:
        status = SessionStatus.COMPLETED
        error_message: str | None = None
        try:
            await self._workflow.run(run)
        except WorkflowCancelled:
            status = SessionStatus.CANCELLED
        except Exception as exc:
            logger.exception("Workflow for session {} failed", run.session_id)
            status = SessionStatus.FAILED
            error_message = str(exc) or type(exc).__name__

        if not await self._registry.release(run):
            logger.debug("Session {} already released, not recording {}", run.session_id, status)
            return

        try:
            await self._sessions.update_status(run.session_id, status, error_message=error_message)
        except Exception:
            logger.exception("Failed to record status {} for session {}", status, run.session_id)
            return
        logger.info("Session {} finished: {}", run.session_id, status)

    async def _mark_failed(self, session_id: str, error_message: str) -> None:
        try:
            await self._sessions.update_status(session_id, SessionStatus.FAILED, error_message=error_message)
        except Exception:
            logger.exception("Failed to mark session {} as failed", session_id)

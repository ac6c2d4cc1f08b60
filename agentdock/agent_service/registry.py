"""In-process session registry.

Tracks running sessions with live handles for cancellation and pausing.
Ephemeral -- empty on process restart.  One registry per ``SessionProvider``;
there is no module-level instance.
"""

from __future__ import annotations

import asyncio

from loguru import logger

from agentdock.agent_service.context import RunningSession


class SessionAlreadyRunningError(RuntimeError):
    """Raised when starting a session that is already registered."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session {session_id} is already running")


class RegistryClosedError(RuntimeError):
    """Raised when attempting to register a session after shutdown."""


class SessionRegistry:
    """Registry of currently running sessions.

    Every check-and-insert and remove sequence runs under one
    ``asyncio.Lock``, so two concurrent starts cannot both register the same
    id and a ``stop`` racing the workflow's own exit releases the handle
    exactly once.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, RunningSession] = {}
        self._lock = asyncio.Lock()
        self._closed = False

    # -- Mutation --------------------------------------------------------------

    async def register(self, session_id: str) -> RunningSession:
        """Register *session_id* and return its live handle.

        Raises ``SessionAlreadyRunningError`` if it is already registered and
        ``RegistryClosedError`` after ``close``.
        """
        async with self._lock:
            if self._closed:
                msg = "Session registry is closed"
                raise RegistryClosedError(msg)
            if session_id in self._sessions:
                raise SessionAlreadyRunningError(session_id)
            run = RunningSession(session_id=session_id)
            self._sessions[session_id] = run
        logger.debug("Registry: register session {}", session_id)
        return run

    async def release(self, run: RunningSession) -> bool:
        """Release *run*.  Returns ``True`` only for the first caller.

        The first caller owns the session's terminal status write.
        """
        async with self._lock:
            if run.released:
                return False
            run.released = True
            if self._sessions.get(run.session_id) is run:
                del self._sessions[run.session_id]
        logger.debug("Registry: release session {}", run.session_id)
        return True

    async def claim(self, session_id: str) -> RunningSession | None:
        """Release the registration for *session_id* on behalf of a caller.

        Returns the handle if the caller won the release, ``None`` if the
        session is not registered (or was already released).
        """
        async with self._lock:
            run = self._sessions.pop(session_id, None)
            if run is None or run.released:
                return None
            run.released = True
        logger.debug("Registry: claim session {}", session_id)
        return run

    async def close(self) -> list[RunningSession]:
        """Refuse new registrations and clear the registry.

        Returns the handles that were registered.  They are *not* marked
        released, so each workflow still records its own terminal status.
        """
        async with self._lock:
            self._closed = True
            runs = list(self._sessions.values())
            self._sessions.clear()
        if runs:
            logger.info("Registry: closed with {} running sessions", len(runs))
        return runs

    # -- Query -----------------------------------------------------------------

    def get(self, session_id: str) -> RunningSession | None:
        return self._sessions.get(session_id)

    def is_registered(self, session_id: str) -> bool:
        return session_id in self._sessions

    def all_sessions(self) -> list[RunningSession]:
        """Return a snapshot of all running sessions."""
        return list(self._sessions.values())

    @property
    def active_count(self) -> int:
        return len(self._sessions)

    @property
    def is_closed(self) -> bool:
        return self._closed

"""Tests for SessionProvider lifecycle transitions.

Sessions are persisted with the JSON file backend in a temporary directory;
workflows use short or zero-length steps.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, call

import pytest

from agentdock.agent_service import (
    ProvisioningWorkflow,
    RegistryClosedError,
    RunningSession,
    SessionAlreadyRunningError,
    SessionProvider,
    SessionStateError,
)
from agentdock.shared.errors import SessionNotFoundError
from agentdock.shared.managers import AgentSessionStore
from agentdock.shared.models import AgentSession, SessionStatus
from agentdock.shared.store import JsonFileDocumentRepository

REPO_URL = "https://github.com/acme/infra"


class FailingWorkflow(ProvisioningWorkflow):
    async def execute_step(self, session: RunningSession, index: int) -> None:
        if index == 1:
            msg = "terraform apply exited with status 1"
            raise RuntimeError(msg)


@pytest.fixture
def sessions(tmp_path: Path) -> AgentSessionStore:
    return AgentSessionStore(JsonFileDocumentRepository(AgentSession, tmp_path))


@pytest.fixture
async def provider(sessions: AgentSessionStore) -> AsyncIterator[SessionProvider]:
    """Provider whose workflow runs until stopped (10 x 5s steps)."""
    async with SessionProvider(sessions, ProvisioningWorkflow(steps=10, step_seconds=5.0)) as p:
        yield p


async def _wait_for_status(provider: SessionProvider, session_id: str, wanted: SessionStatus) -> None:
    async def _poll() -> None:
        while await provider.get_status(session_id) != wanted:
            await asyncio.sleep(0.01)

    await asyncio.wait_for(_poll(), timeout=5)


# ---------------------------------------------------------------------------
# Start / stop
# ---------------------------------------------------------------------------


async def test_start_then_stop(provider: SessionProvider, sessions: AgentSessionStore) -> None:
    session = await sessions.create(REPO_URL)
    assert await provider.get_status(session.id) == SessionStatus.CREATED

    await provider.start(session)
    assert await provider.get_status(session.id) == SessionStatus.ACTIVE
    assert await provider.is_active(session.id) is True
    run = provider.registry.get(session.id)

    assert await provider.stop(session.id) is True
    assert await provider.get_status(session.id) == SessionStatus.STOPPED
    assert await provider.is_active(session.id) is False
    assert await provider.stop(session.id) is False

    # The cancelled workflow exits without overwriting the stopped status.
    await asyncio.wait_for(run.task, timeout=2)
    assert await provider.get_status(session.id) == SessionStatus.STOPPED


async def test_workflow_completes(sessions: AgentSessionStore) -> None:
    session = await sessions.create(REPO_URL)

    async with SessionProvider(sessions, ProvisioningWorkflow(steps=3, step_seconds=0)) as provider:
        await provider.start(session)
        await _wait_for_status(provider, session.id, SessionStatus.COMPLETED)

        assert provider.registry.active_count == 0
        assert await provider.is_active(session.id) is False
        assert await provider.stop(session.id) is False


async def test_workflow_failure_is_recorded(sessions: AgentSessionStore) -> None:
    session = await sessions.create(REPO_URL)

    async with SessionProvider(sessions, FailingWorkflow(steps=3, step_seconds=0)) as provider:
        await provider.start(session)
        await _wait_for_status(provider, session.id, SessionStatus.FAILED)

    stored = await sessions.get_by_id(session.id)
    assert stored.error_message == "terraform apply exited with status 1"


async def test_start_twice_fails(provider: SessionProvider, sessions: AgentSessionStore) -> None:
    session = await sessions.create(REPO_URL)
    await provider.start(session)

    with pytest.raises(SessionAlreadyRunningError):
        await provider.start(session)

    stored = await sessions.get_by_id(session.id)
    assert stored.status == SessionStatus.FAILED
    assert stored.error_message == f"Session {session.id} is already running"
    assert provider.registry.active_count == 1


async def test_start_rejects_bad_arguments(provider: SessionProvider) -> None:
    with pytest.raises(ValueError, match="Session ID"):
        await provider.start(AgentSession(repository_url=REPO_URL))
    with pytest.raises(TypeError):
        await provider.start(None)


async def test_start_unknown_session(provider: SessionProvider) -> None:
    with pytest.raises(SessionNotFoundError):
        await provider.start(AgentSession(id="missing", repository_url=REPO_URL))

    assert provider.registry.active_count == 0


async def test_start_marks_failed_when_status_write_fails() -> None:
    store = MagicMock(spec=AgentSessionStore)
    store.update_status = AsyncMock(side_effect=[OSError("disk full"), None])
    provider = SessionProvider(store, ProvisioningWorkflow(steps=1, step_seconds=0))

    with pytest.raises(OSError, match="disk full"):
        await provider.start(AgentSession(id="s-1", repository_url=REPO_URL))

    assert store.update_status.await_args_list == [
        call("s-1", SessionStatus.ACTIVE),
        call("s-1", SessionStatus.FAILED, error_message="disk full"),
    ]
    assert provider.registry.active_count == 0
    await provider.aclose()


# ---------------------------------------------------------------------------
# Pause / resume
# ---------------------------------------------------------------------------


async def test_pause_and_resume(provider: SessionProvider, sessions: AgentSessionStore) -> None:
    session = await sessions.create(REPO_URL)
    await provider.start(session)
    run = provider.registry.get(session.id)

    assert await provider.pause(session.id) is True
    assert await provider.get_status(session.id) == SessionStatus.PAUSED
    assert run.paused
    assert await provider.is_active(session.id) is False

    assert await provider.resume(session.id) is True
    assert await provider.get_status(session.id) == SessionStatus.ACTIVE
    assert not run.paused
    assert provider.registry.get(session.id) is run
    assert await provider.is_active(session.id) is True


async def test_paused_workflow_does_not_progress(sessions: AgentSessionStore) -> None:
    session = await sessions.create(REPO_URL)

    async with SessionProvider(sessions, ProvisioningWorkflow(steps=2, step_seconds=0.05)) as provider:
        await provider.start(session)
        await provider.pause(session.id)
        await asyncio.sleep(0.3)

        # Held at a step boundary instead of completing.
        assert await provider.get_status(session.id) == SessionStatus.PAUSED
        assert provider.registry.is_registered(session.id)

        await provider.resume(session.id)
        await _wait_for_status(provider, session.id, SessionStatus.COMPLETED)


async def test_stop_paused_session(provider: SessionProvider, sessions: AgentSessionStore) -> None:
    session = await sessions.create(REPO_URL)
    await provider.start(session)
    run = provider.registry.get(session.id)
    await provider.pause(session.id)

    assert await provider.stop(session.id) is True

    await asyncio.wait_for(run.task, timeout=2)
    assert await provider.get_status(session.id) == SessionStatus.STOPPED


async def test_pause_requires_running_session(provider: SessionProvider, sessions: AgentSessionStore) -> None:
    session = await sessions.create(REPO_URL)

    assert await provider.pause(session.id) is False
    assert await provider.pause("") is False
    assert await provider.get_status(session.id) == SessionStatus.CREATED


async def test_resume_requires_paused_status(provider: SessionProvider, sessions: AgentSessionStore) -> None:
    session = await sessions.create(REPO_URL)

    with pytest.raises(SessionStateError, match="not paused"):
        await provider.resume(session.id)

    await provider.start(session)
    with pytest.raises(SessionStateError, match="not paused"):
        await provider.resume(session.id)

    with pytest.raises(SessionStateError, match="not found"):
        await provider.resume("missing")


async def test_resume_restarts_unregistered_session(provider: SessionProvider, sessions: AgentSessionStore) -> None:
    """A paused session with no live registration (e.g. after restart) starts again."""
    session = await sessions.create(REPO_URL)
    await sessions.update_status(session.id, SessionStatus.PAUSED)

    assert await provider.resume(session.id) is True

    assert provider.registry.is_registered(session.id)
    assert await provider.is_active(session.id) is True


# ---------------------------------------------------------------------------
# Status reads and shutdown
# ---------------------------------------------------------------------------


async def test_get_status_never_raises(provider: SessionProvider) -> None:
    assert await provider.get_status("") is None
    assert await provider.get_status("missing") is None

    store = MagicMock(spec=AgentSessionStore)
    store.get_by_id = AsyncMock(side_effect=OSError("unreachable"))
    broken = SessionProvider(store)
    assert await broken.get_status("s-1") is None
    assert await broken.is_active("s-1") is False


async def test_aclose_cancels_running_sessions(sessions: AgentSessionStore) -> None:
    a = await sessions.create(REPO_URL)
    b = await sessions.create(REPO_URL)
    provider = SessionProvider(sessions, ProvisioningWorkflow(steps=10, step_seconds=5.0))
    await provider.start(a)
    await provider.start(b)

    await asyncio.wait_for(provider.aclose(), timeout=2)

    assert await provider.get_status(a.id) == SessionStatus.CANCELLED
    assert await provider.get_status(b.id) == SessionStatus.CANCELLED
    assert provider.registry.active_count == 0
    with pytest.raises(RegistryClosedError):
        await provider.start(a)
    assert await provider.get_status(a.id) == SessionStatus.FAILED

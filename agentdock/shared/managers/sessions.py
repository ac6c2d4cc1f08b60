"""Agent session store.

Owns validation and defaults for ``AgentSession`` documents.  After creation
only ``update_status`` mutates a session; the agent service's session provider
is its sole caller for lifecycle transitions.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any
from urllib.parse import urlparse

from loguru import logger

from agentdock.shared.errors import EntityValidationError
from agentdock.shared.managers.validation import check_branch, is_absolute_url, is_blank
from agentdock.shared.models.enums import SessionStatus
from agentdock.shared.models.session import AgentSession, CreateAgentSessionRequest
from agentdock.shared.store.base import DocumentRepository


class AgentSessionStore:
    def __init__(self, repository: DocumentRepository[AgentSession]) -> None:
        if repository is None:
            msg = "repository is required"
            raise TypeError(msg)
        self._repository = repository

    # -- Create ----------------------------------------------------------------

    async def save(self, session: AgentSession) -> AgentSession:
        """Validate and persist a session, filling in id and timestamps."""
        if session is None:
            msg = "session is required"
            raise TypeError(msg)

        validate_session(session)

        if not session.id:
            session.id = str(uuid.uuid4())

        now = datetime.now(UTC)
        if session.created_at is None:
            session.created_at = now
        session.updated_at = now

        return await self._repository.upsert(session.id, session)

    async def create(
        self,
        repository_url: str,
        created_by: str | None = None,
        branch: str | None = None,
        configuration: dict[str, Any] | None = None,
    ) -> AgentSession:
        """Create a new session in status ``Created``."""
        if is_blank(repository_url):
            msg = "Repository URL is required"
            raise ValueError(msg)

        now = datetime.now(UTC)
        session = AgentSession(
            id=str(uuid.uuid4()),
            repository_url=repository_url.strip(),
            branch=branch.strip() if branch is not None else None,
            created_by=created_by.strip() if created_by is not None else None,
            status=SessionStatus.CREATED,
            configuration=configuration,
            created_at=now,
            updated_at=now,
        )
        validate_session(session)

        created = await self._repository.upsert(session.id, session)
        logger.info("Agent session created: {} (repository={})", created.id, created.repository_url)
        return created

    async def create_from_request(self, request: CreateAgentSessionRequest) -> AgentSession:
        if request is None:
            msg = "request is required"
            raise TypeError(msg)
        return await self.create(request.repository_url, request.created_by, request.branch, request.configuration)

    # -- Read ------------------------------------------------------------------

    async def get_by_id(self, session_id: str) -> AgentSession | None:
        if not session_id:
            return None
        return await self._repository.get(session_id)

    async def get_all(self) -> list[AgentSession]:
        return await self._repository.get_all()

    async def find_by_repository(self, repository_url: str) -> list[AgentSession]:
        """Sessions whose repository URL equals *repository_url* (case-insensitive)."""
        if not repository_url:
            return []
        wanted = repository_url.strip().lower()
        return await self._repository.query(lambda s: s.repository_url.lower() == wanted)

    async def find_by_creator(self, created_by: str) -> list[AgentSession]:
        if not created_by:
            return []
        wanted = created_by.strip().lower()
        return await self._repository.query(lambda s: s.created_by is not None and s.created_by.lower() == wanted)

    async def find_by_status(self, status: SessionStatus | str) -> list[AgentSession]:
        if not status:
            return []
        wanted = str(status).strip().lower()
        return await self._repository.query(lambda s: s.status.value.lower() == wanted)

    # -- Update ----------------------------------------------------------------

    async def update_status(
        self,
        session_id: str,
        status: SessionStatus | str,
        *,
        error_message: str | None = None,
    ) -> AgentSession | None:
        """Set a new status and refresh ``updated_at``.

        Returns ``None`` if the session does not exist.  Raises ``ValueError``
        for an unknown status.  A failure message is recorded only when given.
        """
        if not session_id or is_blank(str(status or "")):
            return None

        new_status = SessionStatus.parse(str(status))

        session = await self._repository.get(session_id)
        if session is None:
            return None

        session.status = new_status
        session.updated_at = datetime.now(UTC)
        if error_message is not None:
            session.error_message = error_message

        return await self._repository.upsert(session.id, session)

    # -- Delete ----------------------------------------------------------------

    async def delete(self, session_id: str) -> bool:
        if not session_id:
            return False
        return await self._repository.delete(session_id)

    async def exists(self, session_id: str) -> bool:
        if not session_id:
            return False
        return await self._repository.exists(session_id)


def validate_session(session: AgentSession) -> None:
    errors: list[str] = []

    url = session.repository_url
    if is_blank(url):
        errors.append("Repository URL is required and cannot be empty or whitespace")
    elif not is_absolute_url(url):
        errors.append("Repository URL must be a valid absolute URL")
    elif urlparse(url.strip()).scheme.lower() not in ("http", "https"):
        errors.append("Repository URL must use HTTP or HTTPS protocol")

    if session.status:
        try:
            SessionStatus.parse(str(session.status))
        except ValueError:
            errors.append(f"Status must be one of: {', '.join(s.value for s in SessionStatus)}")

    check_branch(errors, session.branch)

    if session.created_by and len(session.created_by) > 255:
        errors.append("CreatedBy cannot exceed 255 characters")

    if errors:
        raise EntityValidationError("Agent session", errors)

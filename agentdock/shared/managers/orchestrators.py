"""Orchestrator store.

Orchestrators are ``Agent`` documents of kind ``orchestrator`` kept in their
own collection.  Names are unique case-insensitively, but only checked at
``create`` time: the existence check and the write are separate operations,
so two concurrent creators of the same name can both succeed.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from loguru import logger

from agentdock.shared.errors import DuplicateOrchestratorError, EntityValidationError
from agentdock.shared.managers.validation import check_agent_name
from agentdock.shared.models.agent import Agent, CreateOrchestratorRequest
from agentdock.shared.models.enums import AgentKind
from agentdock.shared.store.base import DocumentRepository, collection_name

ORCHESTRATOR_COLLECTION = collection_name(AgentKind.ORCHESTRATOR.value)


class OrchestratorStore:
    def __init__(self, repository: DocumentRepository[Agent]) -> None:
        if repository is None:
            msg = "repository is required"
            raise TypeError(msg)
        self._repository = repository

    # -- Create ----------------------------------------------------------------

    async def save(self, orchestrator: Agent) -> Agent:
        """Validate and persist an orchestrator.

        ``created_at`` is set on first save and never refreshed afterwards.
        """
        if orchestrator is None:
            msg = "orchestrator is required"
            raise TypeError(msg)

        errors: list[str] = []
        if orchestrator.kind != AgentKind.ORCHESTRATOR:
            errors.append(f"Agent kind must be '{AgentKind.ORCHESTRATOR}', got '{orchestrator.kind}'")
        check_agent_name(errors, "Orchestrator", orchestrator.name)
        if errors:
            raise EntityValidationError("Orchestrator", errors)

        if not orchestrator.id:
            orchestrator.id = str(uuid.uuid4())
        if orchestrator.created_at is None:
            orchestrator.created_at = datetime.now(UTC)

        return await self._repository.upsert(orchestrator.id, orchestrator)

    async def create(self, request: CreateOrchestratorRequest) -> Agent:
        """Create a uniquely named orchestrator.

        Raises ``EntityValidationError`` for a malformed name and
        ``DuplicateOrchestratorError`` if the name is taken.
        """
        if request is None:
            msg = "request is required"
            raise TypeError(msg)

        errors: list[str] = []
        check_agent_name(errors, "Orchestrator", request.name)
        if errors:
            raise EntityValidationError("Create orchestrator request", errors)

        if await self.exists_by_name(request.name):
            raise DuplicateOrchestratorError(request.name)

        orchestrator = Agent.orchestrator(request.name)
        orchestrator.id = str(uuid.uuid4())
        orchestrator.created_at = datetime.now(UTC)

        created = await self._repository.upsert(orchestrator.id, orchestrator)
        logger.info("Orchestrator created: {} ({})", created.name, created.id)
        return created

    # -- Read ------------------------------------------------------------------

    async def get_by_id(self, orchestrator_id: str) -> Agent | None:
        if not orchestrator_id:
            return None
        return await self._repository.get(orchestrator_id)

    async def get_all(self) -> list[Agent]:
        return await self._repository.get_all()

    async def find_by_name(self, name: str) -> list[Agent]:
        """Case-insensitive substring match on the orchestrator name."""
        if not name:
            return []
        term = name.lower()
        return await self._repository.query(lambda o: term in o.name.lower())

    async def exists_by_name(self, name: str) -> bool:
        """Case-insensitive full-name match."""
        if not name:
            return False
        return any(o.name.lower() == name.lower() for o in await self.find_by_name(name))

    # -- Delete ----------------------------------------------------------------

    async def delete(self, orchestrator_id: str) -> bool:
        if not orchestrator_id:
            return False
        return await self._repository.delete(orchestrator_id)

    async def exists(self, orchestrator_id: str) -> bool:
        if not orchestrator_id:
            return False
        return await self._repository.exists(orchestrator_id)

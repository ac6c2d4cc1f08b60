"""Project store.

Validation, identity and timestamp defaults, and lookups for projects,
layered over a document repository.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from loguru import logger

from agentdock.shared.errors import EntityValidationError
from agentdock.shared.managers.validation import check_name, is_absolute_url, is_blank
from agentdock.shared.models.agent import CreateOrchestratorRequest
from agentdock.shared.models.project import CreateProjectRequest, Project, Repository, Team

if TYPE_CHECKING:
    from agentdock.shared.managers.orchestrators import OrchestratorStore
    from agentdock.shared.store.base import DocumentRepository


class ProjectStore:
    def __init__(self, repository: DocumentRepository[Project]) -> None:
        if repository is None:
            msg = "repository is required"
            raise TypeError(msg)
        self._repository = repository

    # -- Save ------------------------------------------------------------------

    async def save(self, project: Project) -> Project:
        """Validate and persist a project (create or full replace).

        Fills in a missing id, ``created_at`` (first save only) and the team
        (see ``default_team``); always refreshes ``updated_at``.  Raises
        ``EntityValidationError`` listing every violation.
        """
        if project is None:
            msg = "project is required"
            raise TypeError(msg)

        validate_project(project)

        if not project.id:
            project.id = str(uuid.uuid4())

        now = datetime.now(UTC)
        if project.created_at is None:
            project.created_at = now
        project.updated_at = now

        if project.team is None:
            project.team = default_team(project.name)

        return await self._repository.upsert(project.id, project)

    # -- Read ------------------------------------------------------------------

    async def get_by_id(self, project_id: str) -> Project | None:
        if not project_id:
            return None
        return await self._repository.get(project_id)

    async def get_all(self) -> list[Project]:
        return await self._repository.get_all()

    async def find_by_orchestrator(self, orchestrator_id: str) -> list[Project]:
        if not orchestrator_id:
            return []
        return await self._repository.query(lambda p: p.orchestrator_id == orchestrator_id)

    async def find_by_name(self, name: str) -> list[Project]:
        """Case-insensitive substring match on the project name."""
        if not name:
            return []
        term = name.lower()
        return await self._repository.query(lambda p: term in p.name.lower())

    async def exists_by_name(self, name: str) -> bool:
        if not name:
            return False
        return any(p.name.lower() == name.lower() for p in await self.find_by_name(name))

    # -- Delete ----------------------------------------------------------------

    async def delete(self, project_id: str) -> bool:
        if not project_id:
            return False
        return await self._repository.delete(project_id)

    async def exists(self, project_id: str) -> bool:
        if not project_id:
            return False
        return await self._repository.exists(project_id)


async def create_project(
    projects: ProjectStore,
    orchestrators: OrchestratorStore,
    request: CreateProjectRequest,
) -> Project:
    """Create a project together with a new, uniquely named orchestrator.

    The orchestrator is written first; if the project then fails validation
    the orchestrator is left in place (no cross-document transaction).
    """
    orchestrator = await orchestrators.create(CreateOrchestratorRequest(name=request.orchestrator_name))

    project = Project(
        name=request.project_name,
        orchestrator_id=orchestrator.id,
        repository=Repository(name=request.repository_name, address=request.repository_address),
        team=default_team(request.project_name),
    )
    saved = await projects.save(project)
    logger.info("Project created: {} ({}, orchestrator={})", saved.name, saved.id, orchestrator.id)
    return saved


def default_team(project_name: str) -> Team:
    """Empty team named after its project, cut to the 100-character name limit."""
    return Team(id=str(uuid.uuid4()), name=f"{project_name} Team"[:100])


def validate_project(project: Project) -> None:
    errors: list[str] = []

    check_name(errors, "Project", project.name)
    if is_blank(project.orchestrator_id):
        errors.append("OrchestratorId is required")

    if project.repository is not None:
        repo = project.repository
        if is_blank(repo.name):
            errors.append("Repository name is required when repository is specified")
        if is_blank(repo.address):
            errors.append("Repository address is required when repository is specified")
        elif not is_absolute_url(repo.address):
            errors.append("Repository address must be a valid URL")

    if project.team is not None:
        if is_blank(project.team.name):
            errors.append("Team name is required when team is specified")
        if len(project.team.name) > 100:
            errors.append("Team name cannot exceed 100 characters")

    if errors:
        raise EntityValidationError("Project", errors)

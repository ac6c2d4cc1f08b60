"""Team membership operations.

A team lives inside its project document, so every change is a
read-modify-write of the whole project.  There is no versioning: concurrent
edits to the same project's team are last-write-wins.
"""

from __future__ import annotations

from datetime import UTC, datetime

from loguru import logger

from agentdock.shared.errors import EntityValidationError, ProjectNotFoundError
from agentdock.shared.managers.projects import ProjectStore, default_team
from agentdock.shared.managers.validation import check_agent_name
from agentdock.shared.models.agent import Agent
from agentdock.shared.models.project import AddAgentToTeamRequest, Project, Team


class TeamService:
    def __init__(self, projects: ProjectStore) -> None:
        self._projects = projects

    async def _require_project(self, project_id: str) -> Project:
        project = await self._projects.get_by_id(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    async def add_agent_to_team(self, project_id: str, request: AddAgentToTeamRequest) -> Project:
        """Append a new collaborator named ``request.agent_name`` to the project's team.

        Raises ``ProjectNotFoundError`` for an unknown project and
        ``EntityValidationError`` for a malformed agent name.
        """
        errors: list[str] = []
        check_agent_name(errors, "Agent", request.agent_name)
        if errors:
            raise EntityValidationError("Add agent request", errors)

        project = await self._require_project(project_id)
        if project.team is None:
            project.team = default_team(project.name)

        collaborator = Agent.collaborator(request.agent_name.strip())
        project.team.members.append(collaborator)
        project.updated_at = datetime.now(UTC)

        saved = await self._projects.save(project)
        logger.info("Agent {} ({}) joined team of project {}", collaborator.name, collaborator.id, project_id)
        return saved

    async def get_team_members(self, project_id: str) -> list[Agent]:
        project = await self._require_project(project_id)
        return list(project.team.members) if project.team else []

    async def get_team(self, project_id: str) -> Team | None:
        project = await self._require_project(project_id)
        return project.team

    async def remove_agent_from_team(self, project_id: str, agent_id: str) -> bool:
        """Remove a collaborator by id.  ``False`` if it is not a member."""
        project = await self._require_project(project_id)
        if project.team is None:
            return False

        remaining = [m for m in project.team.members if m.id != agent_id]
        if len(remaining) == len(project.team.members):
            return False

        project.team.members = remaining
        project.updated_at = datetime.now(UTC)
        await self._projects.save(project)
        logger.info("Agent {} left team of project {}", agent_id, project_id)
        return True

"""Project, repository and team data models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from agentdock.shared.models.agent import Agent


class Repository(BaseModel):
    """Source repository a project works on."""

    name: str = ""
    address: str = Field(default="", description="Absolute URL of the repository")


class Team(BaseModel):
    id: str = ""
    name: str = ""
    members: list[Agent] = Field(default_factory=list, description="Ordered collaborators")


class Project(BaseModel):
    """A repository plus the orchestrator and team working on it."""

    id: str = ""
    name: str = ""
    orchestrator_id: str = ""
    repository: Repository | None = None
    team: Team | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


# -- Requests ----------------------------------------------------------------


class CreateProjectRequest(BaseModel):
    project_name: str
    repository_name: str
    repository_address: str
    orchestrator_name: str


class AddAgentToTeamRequest(BaseModel):
    project_id: str = ""
    agent_name: str

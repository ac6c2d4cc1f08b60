"""Domain data models."""

from agentdock.shared.models.agent import Agent, CreateOrchestratorRequest
from agentdock.shared.models.enums import AgentKind, SessionStatus, StoreProvider
from agentdock.shared.models.project import (
    AddAgentToTeamRequest,
    CreateProjectRequest,
    Project,
    Repository,
    Team,
)
from agentdock.shared.models.session import AgentSession, CreateAgentSessionRequest

__all__ = [
    "AddAgentToTeamRequest",
    # Agents
    "Agent",
    "AgentKind",
    # Sessions
    "AgentSession",
    "CreateAgentSessionRequest",
    "CreateOrchestratorRequest",
    # Projects
    "CreateProjectRequest",
    "Project",
    "Repository",
    "SessionStatus",
    # Storage
    "StoreProvider",
    "Team",
]

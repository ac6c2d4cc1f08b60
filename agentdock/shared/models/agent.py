"""Agent data model.

Orchestrators and collaborators share one shape; ``kind`` tells them apart.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from pydantic import BaseModel, Field

from agentdock.shared.models.enums import AgentKind


class Agent(BaseModel):
    """A named agent: the orchestrator of a project, or a team collaborator."""

    kind: AgentKind
    id: str = ""
    name: str = ""
    created_at: datetime | None = None

    @classmethod
    def orchestrator(cls, name: str | None = None) -> Agent:
        return cls(kind=AgentKind.ORCHESTRATOR, name=name or "Orchestrator")

    @classmethod
    def collaborator(cls, name: str | None = None) -> Agent:
        """Create a collaborator with a fresh id, ready to join a team."""
        return cls(
            kind=AgentKind.COLLABORATOR,
            id=str(uuid.uuid4()),
            name=name or "Collaborator",
            created_at=datetime.now(UTC),
        )


class CreateOrchestratorRequest(BaseModel):
    name: str = Field(default="", description="Unique orchestrator name")

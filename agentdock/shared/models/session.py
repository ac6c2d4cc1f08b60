"""Agent session data model."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from agentdock.shared.models.enums import SessionStatus


class AgentSession(BaseModel):
    """A repository-bound agent session.

    Status transitions after creation are driven by the agent service's
    session provider; validation never touches anything but status and
    timestamps.
    """

    id: str = ""
    repository_url: str = ""
    branch: str | None = Field(default=None, description="Repository branch (defaults to the remote HEAD)")
    created_by: str | None = None
    status: SessionStatus = SessionStatus.CREATED
    configuration: dict[str, Any] | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    error_message: str | None = None


class CreateAgentSessionRequest(BaseModel):
    repository_url: str = ""
    branch: str | None = None
    configuration: dict[str, Any] | None = None
    created_by: str | None = None

"""Domain exceptions shared by the stores and the agent service.

Stores raise these (or plain ``ValueError`` / ``LookupError``), never
transport-level errors -- translating them into responses is the caller's
responsibility.
"""

from __future__ import annotations


class EntityValidationError(ValueError):
    """Raised when an entity fails validation.

    Carries every violated rule, not just the first one.
    """

    def __init__(self, entity: str, errors: list[str]) -> None:
        self.entity = entity
        self.errors = list(errors)
        super().__init__(f"{entity} validation failed: {'; '.join(self.errors)}")


class DuplicateOrchestratorError(EntityValidationError):
    """Raised when an orchestrator with the same name (case-insensitive) exists."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__("Orchestrator", [f"An orchestrator with the name '{name}' already exists"])


class ProjectNotFoundError(LookupError):
    """Raised when a project is not found."""


class SessionNotFoundError(LookupError):
    """Raised when an agent session is not found."""

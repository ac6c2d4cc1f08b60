"""Shared enumerations."""

from __future__ import annotations

from enum import StrEnum

# -- Agents ------------------------------------------------------------------


class AgentKind(StrEnum):
    ORCHESTRATOR = "orchestrator"
    COLLABORATOR = "collaborator"


# -- Sessions ----------------------------------------------------------------


class SessionStatus(StrEnum):
    """Durable agent session status.

    Values are persisted verbatim, so the capitalised spelling is part of the
    storage format.
    """

    CREATED = "Created"
    ACTIVE = "Active"
    RUNNING = "Running"
    PAUSED = "Paused"
    COMPLETED = "Completed"
    FAILED = "Failed"
    CANCELLED = "Cancelled"
    STOPPED = "Stopped"

    @classmethod
    def parse(cls, value: str) -> SessionStatus:
        """Case-insensitive lookup.  Raises ``ValueError`` for unknown values."""
        wanted = value.strip().lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        valid = ", ".join(m.value for m in cls)
        msg = f"Invalid status: {value}. Valid statuses are: {valid}"
        raise ValueError(msg)

    @property
    def is_terminal(self) -> bool:
        return self in (SessionStatus.COMPLETED, SessionStatus.FAILED, SessionStatus.CANCELLED, SessionStatus.STOPPED)


# -- Storage -----------------------------------------------------------------


class StoreProvider(StrEnum):
    """Document store backend selected at startup."""

    FIRESTORE = "firestore"
    SQLITE = "sqlite"
    JSONFILE = "jsonfile"

"""Domain stores layered over the document repositories.

Each store owns validation, identity generation and lookups for one entity
type, and raises domain exceptions (``ValueError`` / ``LookupError``
subclasses from ``agentdock.shared.errors``) -- translating them into
responses is the caller's responsibility.
"""

from agentdock.shared.managers.orchestrators import OrchestratorStore
from agentdock.shared.managers.projects import ProjectStore, create_project
from agentdock.shared.managers.sessions import AgentSessionStore
from agentdock.shared.managers.teams import TeamService

__all__ = ["AgentSessionStore", "OrchestratorStore", "ProjectStore", "TeamService", "create_project"]

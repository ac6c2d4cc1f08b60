"""Session lifecycle: start, stop, pause and resume agent sessions.

``SessionProvider`` is the sole control path.  It owns an explicit
``SessionRegistry`` of running sessions and spawns one background
``ProvisioningWorkflow`` task per active session.
"""

from agentdock.agent_service.context import RunningSession
from agentdock.agent_service.provider import SessionProvider, SessionStateError
from agentdock.agent_service.registry import RegistryClosedError, SessionAlreadyRunningError, SessionRegistry
from agentdock.agent_service.workflow import ProvisioningWorkflow, WorkflowCancelled

__all__ = [
    "ProvisioningWorkflow",
    "RegistryClosedError",
    "RunningSession",
    "SessionAlreadyRunningError",
    "SessionProvider",
    "SessionRegistry",
    "SessionStateError",
    "WorkflowCancelled",
]

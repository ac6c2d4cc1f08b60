"""agentdock - orchestrator and agent services for repository-driven agent sessions."""

__version__ = "0.1.0"

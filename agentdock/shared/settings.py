"""Service configuration loaded from AGENTDOCK_* environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from agentdock.shared.models.enums import StoreProvider

# Names accepted for ``document_store`` besides the enum values themselves.
_PROVIDER_ALIASES = {"litedb": StoreProvider.SQLITE}


class AgentdockSettings(BaseSettings):
    """agentdock settings.

    All fields are read from environment variables with the ``AGENTDOCK_``
    prefix.  For example, ``AGENTDOCK_DOCUMENT_STORE=jsonfile`` maps to
    ``document_store``.

    Google credentials for the Firestore backend are **not** managed here --
    the client library resolves them through Application Default Credentials
    (or ``FIRESTORE_EMULATOR_HOST`` when running against the emulator).
    """

    model_config = SettingsConfigDict(
        env_prefix="AGENTDOCK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -- Logging ---------------------------------------------------------------
    log_level: str = "INFO"
    log_file: str | None = None
    """Optional log file (rotated at 10 MB) in addition to stderr."""

    # -- Document store --------------------------------------------------------
    document_store: StoreProvider = StoreProvider.SQLITE

    connection_string: str = "data.db"
    """Provider-specific connection value.

    - sqlite: database file path
    - firestore: Google Cloud project id (when ``project_id`` is unset)
    - jsonfile: data directory (when ``data_directory`` is unset)
    """

    project_id: str | None = None
    """Google Cloud project id for the Firestore provider."""

    firestore_database: str | None = None
    """Firestore database id.  ``None`` selects the ``(default)`` database."""

    data_directory: str | None = None
    """Root directory for the JSON file provider."""

    # -- Agent sessions --------------------------------------------------------
    workflow_steps: int = 10
    workflow_step_seconds: float = 5.0
    """Simulated duration of one provisioning step."""

    @field_validator("document_store", mode="before")
    @classmethod
    def _normalise_provider(cls, value: object) -> object:
        if isinstance(value, str):
            key = value.strip().lower()
            return _PROVIDER_ALIASES.get(key, key)
        return value

    # -- Helpers ---------------------------------------------------------------

    def resolve_firestore_project(self) -> str:
        """Return the Firestore project id.  Raises ``ValueError`` if unset."""
        project = self.project_id or self.connection_string
        if not project:
            msg = "project_id or connection_string must be provided for the Firestore provider"
            raise ValueError(msg)
        return project

    def resolve_data_directory(self) -> str:
        """Return the JSON file root, falling back to ``connection_string``."""
        return self.data_directory or self.connection_string or "data"


def get_settings() -> AgentdockSettings:
    """Return a cached settings instance.

    Reads from environment variables and ``.env`` on first call, then returns
    the same object.  Call ``_get_settings_cached.cache_clear()`` in tests to
    force a re-read after overriding env vars.
    """
    return _get_settings_cached()


@lru_cache(maxsize=1)
def _get_settings_cached() -> AgentdockSettings:
    return AgentdockSettings()

"""Shared test fixtures.

Everything runs against the local backends in a temporary directory -- no
network, Docker or credentials required.  Firestore is covered by an
in-memory fake client (``tests/shared``) and, when ``FIRESTORE_EMULATOR_HOST``
is set, by the emulator suite marked ``firestore``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from agentdock.shared.bootstrap import DocumentStores, build_stores
from agentdock.shared.settings import AgentdockSettings, _get_settings_cached


@pytest.fixture
def settings_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[Callable[..., None]]:
    """Set ``AGENTDOCK_*`` env vars and invalidate the settings cache.

    Usage: ``settings_env(document_store="jsonfile", data_directory=str(tmp_path))``.
    """

    def _set(**values: object) -> None:
        for key, value in values.items():
            monkeypatch.setenv(f"AGENTDOCK_{key.upper()}", str(value))
        _get_settings_cached.cache_clear()

    _get_settings_cached.cache_clear()
    yield _set
    _get_settings_cached.cache_clear()


@pytest.fixture
def json_settings(tmp_path: Path) -> AgentdockSettings:
    return AgentdockSettings(document_store="jsonfile", data_directory=str(tmp_path / "data"))


@pytest.fixture
def stores(json_settings: AgentdockSettings) -> DocumentStores:
    """Project, orchestrator, session and team stores on the JSON file backend."""
    return build_stores(json_settings)

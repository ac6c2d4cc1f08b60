"""Composition root: pick a document store backend and wire the domain stores."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from loguru import logger
from pydantic import BaseModel

from agentdock.shared.managers.orchestrators import ORCHESTRATOR_COLLECTION, OrchestratorStore
from agentdock.shared.managers.projects import ProjectStore
from agentdock.shared.managers.sessions import AgentSessionStore
from agentdock.shared.managers.teams import TeamService
from agentdock.shared.models.agent import Agent
from agentdock.shared.models.enums import StoreProvider
from agentdock.shared.models.project import Project
from agentdock.shared.models.session import AgentSession
from agentdock.shared.settings import AgentdockSettings
from agentdock.shared.store.base import DocumentRepository, DocumentT
from agentdock.shared.store.jsonfile import JsonFileDocumentRepository
from agentdock.shared.store.sqlite import SqliteDocumentRepository


@dataclass
class DocumentStores:
    """Domain stores sharing one backend."""

    projects: ProjectStore
    orchestrators: OrchestratorStore
    sessions: AgentSessionStore
    teams: TeamService


def create_repository(
    settings: AgentdockSettings,
    model: type[DocumentT],
    collection: str | None = None,
    *,
    firestore_client: Any = None,
) -> DocumentRepository[DocumentT]:
    """Create the document repository for *model* on the configured backend."""
    provider = settings.document_store
    if provider == StoreProvider.FIRESTORE:
        from agentdock.shared.store.firestore import FirestoreDocumentRepository, create_firestore_client

        client = firestore_client or create_firestore_client(
            settings.resolve_firestore_project(), settings.firestore_database
        )
        return FirestoreDocumentRepository(model, client, collection)
    if provider == StoreProvider.SQLITE:
        return SqliteDocumentRepository(model, settings.connection_string or "data.db", collection)
    if provider == StoreProvider.JSONFILE:
        return JsonFileDocumentRepository(model, settings.resolve_data_directory(), collection)

    msg = f"Unknown document store provider: {provider}"
    raise ValueError(msg)


def build_stores(settings: AgentdockSettings, *, firestore_client: Any = None) -> DocumentStores:
    """Wire every domain store onto the backend selected by *settings*.

    A single Firestore client is shared by all repositories.
    """
    if settings.document_store == StoreProvider.FIRESTORE and firestore_client is None:
        from agentdock.shared.store.firestore import create_firestore_client

        firestore_client = create_firestore_client(settings.resolve_firestore_project(), settings.firestore_database)

    def repo(model: type[BaseModel], collection: str | None = None) -> Any:
        return create_repository(settings, model, collection, firestore_client=firestore_client)

    projects = ProjectStore(repo(Project))
    stores = DocumentStores(
        projects=projects,
        orchestrators=OrchestratorStore(repo(Agent, ORCHESTRATOR_COLLECTION)),
        sessions=AgentSessionStore(repo(AgentSession)),
        teams=TeamService(projects),
    )
    logger.info("Document store: {}", settings.document_store)
    return stores

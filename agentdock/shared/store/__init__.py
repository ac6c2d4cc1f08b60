"""Document repository implementations."""

from agentdock.shared.store.base import DocumentRepository, Identifiable, collection_name
from agentdock.shared.store.jsonfile import JsonFileDocumentRepository
from agentdock.shared.store.sqlite import SqliteDocumentRepository

__all__ = [
    "DocumentRepository",
    "Identifiable",
    "JsonFileDocumentRepository",
    "SqliteDocumentRepository",
    "collection_name",
]

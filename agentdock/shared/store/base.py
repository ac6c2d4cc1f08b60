"""Document repository interface.

A document repository is a generic key-value store for one entity type.
Documents are identified by a string key that is unique within their
collection, and every write replaces the stored document in full.  The
interface is async to support local (file, SQLite) and remote (Firestore)
backends behind the same contract.

Absence is never an error: ``get`` returns ``None`` for unknown keys and for
records that cannot be parsed.  Queries are full scans filtered in memory,
because the JSON file backend cannot do better.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel


@runtime_checkable
class Identifiable(Protocol):
    """Capability required from every storable entity: a settable string id."""

    id: str


DocumentT = TypeVar("DocumentT", bound=BaseModel)


@runtime_checkable
class DocumentRepository(Protocol[DocumentT]):
    """Async protocol for storing documents of one type in one collection."""

    @property
    def collection(self) -> str:
        """Collection name this repository reads and writes."""
        ...

    async def upsert(self, id: str, document: DocumentT) -> DocumentT:
        """Insert or fully replace the document stored under *id*.

        Raises ``ValueError`` if *id* is empty and ``TypeError`` if
        *document* is ``None``.
        """
        ...

    async def get(self, id: str) -> DocumentT | None:
        """Return the document, or ``None`` if missing or unreadable."""
        ...

    async def query(self, predicate: Callable[[DocumentT], bool]) -> list[DocumentT]:
        """Return every document for which *predicate* is true."""
        ...

    async def get_all(self) -> list[DocumentT]:
        """Return every readable document in the collection."""
        ...

    async def delete(self, id: str) -> bool:
        """Delete a document.  ``False`` if it did not exist or removal failed."""
        ...

    async def exists(self, id: str) -> bool:
        """Check whether a document is stored under *id*."""
        ...


def collection_name(type_name: str) -> str:
    """Derive a collection name by naive English pluralisation.

    >>> collection_name("AgentSession")
    'agentsessions'
    >>> collection_name("Repository")
    'repositories'
    """
    name = type_name.lower()
    if name.endswith("y"):
        return name[:-1] + "ies"
    if name.endswith(("s", "x", "z", "ch", "sh")):
        return name + "es"
    return name + "s"


def check_upsert_args(id: str, document: object) -> None:
    if not id:
        msg = "Document ID cannot be null or empty"
        raise ValueError(msg)
    if document is None:
        msg = "Document cannot be None"
        raise TypeError(msg)


def stamp_id(document: BaseModel, id: str) -> None:
    """Write the storage key onto the document's identity field."""
    if isinstance(document, Identifiable):
        document.id = id

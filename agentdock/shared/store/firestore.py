"""Firestore document repository.

The remote managed backend.  Collections and document ids map directly onto
Firestore collections and documents::

    {project}/{database}/documents/{collection}/{id}

Documents are written as ``model_dump(mode="json")`` so timestamps and enums
round-trip through plain JSON types.  Firestore's native query language is
not used: ``query`` streams the whole collection and filters in memory, like
every other backend.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Generic

from google.api_core.exceptions import GoogleAPICallError
from google.cloud import firestore
from loguru import logger
from pydantic import ValidationError

from agentdock.shared.store.base import DocumentT, check_upsert_args, collection_name, stamp_id


def create_firestore_client(project: str, database: str | None = None) -> Any:
    """Create an async Firestore client.

    Args:
        project: Google Cloud project id.
        database: Firestore database id (``None`` selects ``(default)``).

    Credentials come from Application Default Credentials, or from the
    emulator when ``FIRESTORE_EMULATOR_HOST`` is set.
    """
    if database:
        return firestore.AsyncClient(project=project, database=database)
    return firestore.AsyncClient(project=project)


class FirestoreDocumentRepository(Generic[DocumentT]):
    """Firestore implementation of the DocumentRepository protocol."""

    def __init__(self, model: type[DocumentT], client: Any, collection: str | None = None) -> None:
        if client is None:
            msg = "Firestore client is required"
            raise TypeError(msg)
        self._model = model
        self._client = client
        self._collection = collection or collection_name(model.__name__)

    @property
    def collection(self) -> str:
        return self._collection

    def _ref(self, id: str) -> Any:
        return self._client.collection(self._collection).document(id)

    # -- Write -----------------------------------------------------------------

    async def upsert(self, id: str, document: DocumentT) -> DocumentT:
        check_upsert_args(id, document)
        stamp_id(document, id)
        # set() without merge replaces the whole document.
        await self._ref(id).set(document.model_dump(mode="json"))
        return document

    # -- Read ------------------------------------------------------------------

    async def get(self, id: str) -> DocumentT | None:
        if not id:
            return None
        snapshot = await self._ref(id).get()
        if not snapshot.exists:
            return None
        return self._parse(snapshot)

    async def query(self, predicate: Callable[[DocumentT], bool]) -> list[DocumentT]:
        return [doc for doc in await self.get_all() if predicate(doc)]

    async def get_all(self) -> list[DocumentT]:
        documents = []
        async for snapshot in self._client.collection(self._collection).stream():
            if not snapshot.exists:
                continue
            document = self._parse(snapshot)
            if document is not None:
                documents.append(document)
        return documents

    def _parse(self, snapshot: Any) -> DocumentT | None:
        try:
            return self._model.model_validate(snapshot.to_dict() or {})
        except ValidationError:
            logger.warning("Skipping unreadable document {}/{}", self._collection, snapshot.id)
            return None

    # -- Utilities -------------------------------------------------------------

    async def delete(self, id: str) -> bool:
        if not id:
            return False
        ref = self._ref(id)
        try:
            snapshot = await ref.get()
            if not snapshot.exists:
                return False
            await ref.delete()
        except GoogleAPICallError as exc:
            logger.warning("Failed to delete {}/{}: {}", self._collection, id, exc)
            return False
        return True

    async def exists(self, id: str) -> bool:
        if not id:
            return False
        try:
            snapshot = await self._ref(id).get()
        except GoogleAPICallError as exc:
            logger.warning("Failed to check {}/{}: {}", self._collection, id, exc)
            return False
        return bool(snapshot.exists)

"""In-memory stand-in for ``google.cloud.firestore.AsyncClient``.

Implements only the surface the Firestore repository uses:
``client.collection(name).document(id).set/get/delete`` and
``client.collection(name).stream()``.
"""

from __future__ import annotations

import copy
from collections import defaultdict
from collections.abc import AsyncIterator
from typing import Any

import pytest


class FakeSnapshot:
    def __init__(self, id: str, data: dict[str, Any] | None) -> None:
        self.id = id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> dict[str, Any] | None:
        return copy.deepcopy(self._data)


class FakeDocumentReference:
    def __init__(self, documents: dict[str, dict[str, Any]], id: str) -> None:
        self._documents = documents
        self.id = id

    async def set(self, data: dict[str, Any]) -> None:
        self._documents[self.id] = copy.deepcopy(data)

    async def get(self) -> FakeSnapshot:
        return FakeSnapshot(self.id, self._documents.get(self.id))

    async def delete(self) -> None:
        self._documents.pop(self.id, None)


class FakeCollectionReference:
    def __init__(self, documents: dict[str, dict[str, Any]]) -> None:
        self._documents = documents

    def document(self, id: str) -> FakeDocumentReference:
        return FakeDocumentReference(self._documents, id)

    async def stream(self) -> AsyncIterator[FakeSnapshot]:
        for id, data in list(self._documents.items()):
            yield FakeSnapshot(id, data)


class FakeFirestoreClient:
    def __init__(self) -> None:
        self.data: defaultdict[str, dict[str, dict[str, Any]]] = defaultdict(dict)

    def collection(self, name: str) -> FakeCollectionReference:
        return FakeCollectionReference(self.data[name])


@pytest.fixture
def firestore_client() -> FakeFirestoreClient:
    return FakeFirestoreClient()

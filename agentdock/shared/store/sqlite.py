"""SQLite document repository.

The embedded single-file backend.  Every collection of a deployment shares
one database file and one table, partitioned by collection name::

    documents(collection TEXT, id TEXT, body TEXT, PRIMARY KEY (collection, id))

The engine uses ``NullPool``: a connection is opened and closed around each
operation instead of holding a long-lived handle, trading connection overhead
for safety when several repositories (or processes) share the file.  Each
operation also makes sure the parent directory and the table exist, so the
file may be removed between operations.

SQLAlchemy calls are synchronous and run in the thread pool via
``anyio.to_thread.run_sync``, the same async pattern as the JSON file store.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from functools import partial
from pathlib import Path
from typing import Generic

from anyio import to_thread
from loguru import logger
from sqlalchemy import Column, MetaData, String, Table, Text, create_engine, delete, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool
from sqlalchemy.schema import CreateTable

from agentdock.shared.store.base import DocumentT, check_upsert_args, collection_name, stamp_id

metadata = MetaData()

documents = Table(
    "documents",
    metadata,
    Column("collection", String, primary_key=True),
    Column("id", String, primary_key=True),
    Column("body", Text, nullable=False),
)


def create_sqlite_engine(database_path: str | Path) -> Engine:
    """Create an engine for *database_path* that never pools connections."""
    return create_engine(
        f"sqlite:///{Path(database_path)}",
        poolclass=NullPool,
        connect_args={"check_same_thread": False},
    )


class SqliteDocumentRepository(Generic[DocumentT]):
    """SQLite implementation of the DocumentRepository protocol."""

    def __init__(
        self,
        model: type[DocumentT],
        database_path: str | Path,
        collection: str | None = None,
    ) -> None:
        self._model = model
        self._collection = collection or collection_name(model.__name__)
        self._database_path = Path(database_path)
        self._database_path.parent.mkdir(parents=True, exist_ok=True)
        self._engine = create_sqlite_engine(self._database_path)

    @property
    def collection(self) -> str:
        return self._collection

    @contextmanager
    def _transaction(self) -> Iterator[Connection]:
        """Open a connection for one operation, creating file and table if missing."""
        self._database_path.parent.mkdir(parents=True, exist_ok=True)
        with self._engine.begin() as conn:
            conn.execute(CreateTable(documents, if_not_exists=True))
            yield conn

    # -- Write -----------------------------------------------------------------

    async def upsert(self, id: str, document: DocumentT) -> DocumentT:
        check_upsert_args(id, document)
        stamp_id(document, id)
        await to_thread.run_sync(partial(self._write, id, document.model_dump_json()))
        return document

    def _write(self, id: str, body: str) -> None:
        stmt = insert(documents).values(collection=self._collection, id=id, body=body)
        stmt = stmt.on_conflict_do_update(
            index_elements=[documents.c.collection, documents.c.id],
            set_={"body": stmt.excluded.body},
        )
        with self._transaction() as conn:
            conn.execute(stmt)

    # -- Read ------------------------------------------------------------------

    async def get(self, id: str) -> DocumentT | None:
        if not id:
            return None
        body = await to_thread.run_sync(partial(self._read_one, id))
        if body is None:
            return None
        return self._parse(id, body)

    def _read_one(self, id: str) -> str | None:
        stmt = select(documents.c.body).where(documents.c.collection == self._collection, documents.c.id == id)
        with self._transaction() as conn:
            return conn.execute(stmt).scalar_one_or_none()

    async def query(self, predicate: Callable[[DocumentT], bool]) -> list[DocumentT]:
        return [doc for doc in await self.get_all() if predicate(doc)]

    async def get_all(self) -> list[DocumentT]:
        rows = await to_thread.run_sync(self._read_all)
        parsed = (self._parse(id, body) for id, body in rows)
        return [doc for doc in parsed if doc is not None]

    def _read_all(self) -> list[tuple[str, str]]:
        stmt = (
            select(documents.c.id, documents.c.body)
            .where(documents.c.collection == self._collection)
            .order_by(documents.c.id)
        )
        with self._transaction() as conn:
            return [(row.id, row.body) for row in conn.execute(stmt)]

    def _parse(self, id: str, body: str) -> DocumentT | None:
        try:
            return self._model.model_validate_json(body)
        except ValueError:
            logger.warning("Skipping unreadable document {}/{}", self._collection, id)
            return None

    # -- Utilities -------------------------------------------------------------

    async def delete(self, id: str) -> bool:
        if not id:
            return False
        try:
            return await to_thread.run_sync(partial(self._delete, id))
        except SQLAlchemyError as exc:
            logger.warning("Failed to delete {}/{}: {}", self._collection, id, exc)
            return False

    def _delete(self, id: str) -> bool:
        stmt = delete(documents).where(documents.c.collection == self._collection, documents.c.id == id)
        with self._transaction() as conn:
            return conn.execute(stmt).rowcount > 0

    async def exists(self, id: str) -> bool:
        if not id:
            return False
        try:
            return await to_thread.run_sync(partial(self._read_one, id)) is not None
        except SQLAlchemyError as exc:
            logger.warning("Failed to check {}/{}: {}", self._collection, id, exc)
            return False

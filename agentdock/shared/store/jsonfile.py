"""JSON file document repository.

Stores each document as its own JSON file under a per-collection directory::

    {data_directory}/{collection}/{safe_id}.json

Uses ``anyio.to_thread.run_sync`` for non-blocking file I/O.

Writes are atomic: data is written to a temporary file in the same directory,
then renamed to the target path, so a document file is always either the old
or the new document in full.  Unreadable files are treated as absent.
"""

from __future__ import annotations

import contextlib
import os
import re
import tempfile
from collections.abc import Callable
from functools import partial
from pathlib import Path
from typing import Generic

from anyio import to_thread
from loguru import logger

from agentdock.shared.store.base import DocumentT, check_upsert_args, collection_name, stamp_id

# Characters that are not allowed in file names on at least one major platform.
_UNSAFE_FILENAME_CHARS = re.compile(r'[\x00-\x1f<>:"/\\|?*]')


def safe_file_stem(id: str) -> str:
    """Replace characters invalid in a file name with ``_``."""
    return _UNSAFE_FILENAME_CHARS.sub("_", id)


class JsonFileDocumentRepository(Generic[DocumentT]):
    """One-file-per-document implementation of the DocumentRepository protocol.

    The collection directory is created at construction time.
    """

    def __init__(
        self,
        model: type[DocumentT],
        data_directory: str | Path,
        collection: str | None = None,
    ) -> None:
        self._model = model
        self._collection = collection or collection_name(model.__name__)
        self._path = Path(data_directory) / self._collection
        self._path.mkdir(parents=True, exist_ok=True)

    @property
    def collection(self) -> str:
        return self._collection

    def _document_path(self, id: str) -> Path:
        return self._path / f"{safe_file_stem(id)}.json"

    # -- Write -----------------------------------------------------------------

    async def upsert(self, id: str, document: DocumentT) -> DocumentT:
        check_upsert_args(id, document)
        stamp_id(document, id)
        data = document.model_dump_json(indent=2)
        await to_thread.run_sync(partial(_atomic_write, self._document_path(id), data))
        return document

    # -- Read ------------------------------------------------------------------

    async def get(self, id: str) -> DocumentT | None:
        if not id:
            return None
        path = self._document_path(id)
        try:
            raw = await to_thread.run_sync(partial(_read_file, path))
        except FileNotFoundError:
            return None
        return self._parse(raw, path)

    async def query(self, predicate: Callable[[DocumentT], bool]) -> list[DocumentT]:
        return [doc for doc in await self.get_all() if predicate(doc)]

    async def get_all(self) -> list[DocumentT]:
        raws = await to_thread.run_sync(partial(_read_collection, self._path))
        documents = []
        for path, raw in raws:
            document = self._parse(raw, path)
            if document is not None:
                documents.append(document)
        return documents

    def _parse(self, raw: str | None, path: Path) -> DocumentT | None:
        if raw is None:
            return None
        try:
            return self._model.model_validate_json(raw)
        except ValueError:
            logger.warning("Skipping unreadable document {}", path)
            return None

    # -- Utilities -------------------------------------------------------------

    async def delete(self, id: str) -> bool:
        if not id:
            return False
        path = self._document_path(id)
        try:
            return await to_thread.run_sync(partial(_unlink, path))
        except OSError as exc:
            logger.warning("Failed to delete {}: {}", path, exc)
            return False

    async def exists(self, id: str) -> bool:
        if not id:
            return False
        path = self._document_path(id)
        try:
            return await to_thread.run_sync(path.is_file)
        except OSError as exc:
            logger.warning("Failed to check {}: {}", path, exc)
            return False


# -- Sync helpers (run in thread pool) -----------------------------------------


def _atomic_write(path: Path, data: str) -> None:
    """Write data atomically: temp file + rename.

    The temp file is created in the same directory so the rename is atomic.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(data)
        os.replace(tmp_path, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_path)
        raise


def _read_file(path: Path) -> str | None:
    """Read file contents.  Raises ``FileNotFoundError`` if missing.

    Returns ``None`` for bytes that are not valid UTF-8.
    """
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        logger.warning("Skipping undecodable document {}", path)
        return None


def _read_collection(directory: Path) -> list[tuple[Path, str | None]]:
    if not directory.is_dir():
        return []
    results = []
    for path in sorted(directory.glob("*.json")):
        try:
            results.append((path, _read_file(path)))
        except FileNotFoundError:
            # Deleted between listing and reading.
            continue
    return results


def _unlink(path: Path) -> bool:
    """Remove a file.  ``False`` if it did not exist."""
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    return True

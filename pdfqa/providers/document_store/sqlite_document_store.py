"""SQLite-backed document store.

Persists document records to a local SQLite database at
``data/documents.db``.  Uses ``aiosqlite`` for async I/O; every operation
opens its own short-lived connection.  Uniqueness of ``display_name``,
``source_location`` and ``namespace`` is enforced by the schema.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from pdfqa.interfaces.document_store import IDocumentStore
from pdfqa.models.document import Document, NewDocument
from pdfqa.utils.errors import ConflictError, UpstreamError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/documents.db")

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS documents (
    id               TEXT    PRIMARY KEY,
    display_name     TEXT    NOT NULL UNIQUE,
    source_location  TEXT    NOT NULL UNIQUE,
    namespace        TEXT    NOT NULL UNIQUE,
    processed        INTEGER NOT NULL DEFAULT 0,
    created_at       TEXT    NOT NULL,
    updated_at       TEXT    NOT NULL
);
"""

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_documents_created ON documents(created_at);",
]

_INSERT_SQL = """\
INSERT INTO documents (id, display_name, source_location, namespace, processed, created_at, updated_at)
VALUES (?, ?, ?, ?, 0, ?, ?);
"""

_SELECT_COLUMNS = "id, display_name, source_location, namespace, processed, created_at, updated_at"

# Compare-and-swap: only an unprocessed row is updated.
_MARK_PROCESSED_SQL = """\
UPDATE documents
SET processed = 1, updated_at = ?
WHERE id = ? AND processed = 0;
"""


class SQLiteDocumentStore(IDocumentStore):
    """SQLite-backed document-record persistence."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the documents table and indices if they don't exist."""
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute(_CREATE_TABLE_SQL)
                for idx_sql in _CREATE_INDICES_SQL:
                    await db.execute(idx_sql)
                await db.commit()
        except (aiosqlite.Error, OSError) as exc:
            raise self._unavailable("initialize", exc) from exc
        logger.info("document_db_initialized", path=str(self._db_path))

    async def list_documents(self) -> list[Document]:
        """Return every document, oldest first."""
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(
                    f"SELECT {_SELECT_COLUMNS} FROM documents ORDER BY created_at, rowid"
                )
                rows = await cursor.fetchall()
        except (aiosqlite.Error, OSError) as exc:
            raise self._unavailable("list_documents", exc) from exc
        return [self._row_to_document(r) for r in rows]

    async def get_document(self, document_id: str) -> Document | None:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(
                    f"SELECT {_SELECT_COLUMNS} FROM documents WHERE id = ?",
                    (document_id,),
                )
                row = await cursor.fetchone()
        except (aiosqlite.Error, OSError) as exc:
            raise self._unavailable("get_document", exc) from exc
        return self._row_to_document(row) if row is not None else None

    async def create_document(self, new_document: NewDocument) -> Document:
        """Insert a new unprocessed document; unique collisions raise ``ConflictError``."""
        document_id = uuid.uuid4().hex
        now = datetime.now(timezone.utc).isoformat()

        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute(
                    _INSERT_SQL,
                    (
                        document_id,
                        new_document.display_name,
                        new_document.source_location,
                        new_document.namespace,
                        now,
                        now,
                    ),
                )
                await db.commit()
        except aiosqlite.IntegrityError as exc:
            raise ConflictError(
                message=f"Document '{new_document.display_name}' already exists: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except (aiosqlite.Error, OSError) as exc:
            raise self._unavailable("create_document", exc) from exc

        logger.info(
            "document_created",
            document_id=document_id,
            display_name=new_document.display_name,
            namespace=new_document.namespace,
        )
        return Document(
            id=document_id,
            display_name=new_document.display_name,
            source_location=new_document.source_location,
            namespace=new_document.namespace,
            processed=False,
            created_at=now,
            updated_at=now,
        )

    async def mark_processed(self, document_id: str) -> bool:
        now = datetime.now(timezone.utc).isoformat()
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                cursor = await db.execute(_MARK_PROCESSED_SQL, (now, document_id))
                await db.commit()
                changed = cursor.rowcount
        except (aiosqlite.Error, OSError) as exc:
            raise self._unavailable("mark_processed", exc) from exc

        if changed:
            logger.info("document_marked_processed", document_id=document_id)
        return changed == 1

    async def ping(self) -> bool:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute("SELECT 1 FROM documents LIMIT 1")
            return True
        except (aiosqlite.Error, OSError):
            return False

    def get_provider_name(self) -> str:
        return "sqlite"

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _unavailable(self, operation: str, exc: BaseException) -> UpstreamError:
        logger.error("document_store_error", operation=operation, error=str(exc))
        return UpstreamError(
            message=f"Document store {operation} failed: {exc}",
            provider_name=self.get_provider_name(),
            retryable=True,
        )

    @staticmethod
    def _row_to_document(row: Any) -> Document:
        data = dict(row)
        data["processed"] = bool(data["processed"])
        return Document(**data)

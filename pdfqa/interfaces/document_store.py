"""Abstract base class for document-record persistence.

The document store is the single source of truth for each document's
processing state and namespace assignment.  It enforces uniqueness of
``display_name``, ``source_location`` and ``namespace``, and only ever
moves ``processed`` from ``False`` to ``True``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pdfqa.models.document import Document, NewDocument


# Concrete implementation: SQLiteDocumentStore (pdfqa/providers/document_store/)
class IDocumentStore(ABC):
    """Contract for document-record CRUD.

    Connectivity failures surface as
    :class:`~pdfqa.utils.errors.UpstreamError`; they never terminate the
    process.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Create the backing schema if needed."""

    @abstractmethod
    async def list_documents(self) -> list[Document]:
        """Return every document, oldest first."""

    @abstractmethod
    async def get_document(self, document_id: str) -> Document | None:
        """Return the document with *document_id*, or ``None``."""

    @abstractmethod
    async def create_document(self, new_document: NewDocument) -> Document:
        """Persist a new, unprocessed document and return it with its id.

        Raises
        ------
        pdfqa.utils.errors.ConflictError
            If any unique field collides with an existing record.
        """

    @abstractmethod
    async def mark_processed(self, document_id: str) -> bool:
        """Atomically flip ``processed`` from ``False`` to ``True``.

        Returns ``True`` if this call performed the transition and
        ``False`` if the document was already processed or does not exist.
        """

    @abstractmethod
    async def ping(self) -> bool:
        """Return ``True`` if the store is reachable."""

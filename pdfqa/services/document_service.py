"""Upload and listing of document records.

An upload reserves the document's vector namespace first, then stores the
original bytes and finally saves the document record.  The namespace
check runs before any bytes are written, so a name collision leaves no
trace.  If a later step fails, the namespace is released and the stored
bytes are removed before the error is re-raised.
"""

from __future__ import annotations

import structlog

from pdfqa.interfaces.blob_store import IBlobStore
from pdfqa.interfaces.document_store import IDocumentStore
from pdfqa.models.document import MAX_FIELD_LENGTH, Document, NewDocument
from pdfqa.services.namespace_allocator import NamespaceAllocator
from pdfqa.utils.errors import PayloadTooLargeError, PdfQAError, ValidationError
from pdfqa.utils.logging import get_logger
from pdfqa.utils.retry import RetryPolicy, call_upstream

logger: structlog.BoundLogger = get_logger(__name__)


class DocumentService:
    """Creates and lists documents.

    Parameters
    ----------
    document_store:
        Persists document records.
    blob_store:
        Stores the uploaded bytes.
    allocator:
        Reserves (and on failure releases) the document's namespace.
    max_upload_bytes:
        Uploads larger than this are rejected before anything is stored.
    """

    def __init__(
        self,
        document_store: IDocumentStore,
        blob_store: IBlobStore,
        allocator: NamespaceAllocator,
        max_upload_bytes: int = 25 * 1024 * 1024,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._document_store = document_store
        self._blob_store = blob_store
        self._allocator = allocator
        self._max_upload_bytes = max_upload_bytes
        self._retry_policy = retry_policy or RetryPolicy()

    async def list_documents(self) -> list[Document]:
        return await call_upstream(
            "list_documents",
            self._document_store.list_documents,
            self._retry_policy,
        )

    async def upload(self, filename: str | None, data: bytes) -> Document:
        """Store an uploaded PDF and create its unprocessed document record.

        Raises
        ------
        ValidationError
            If no file name or no bytes were supplied, or the name is longer
            than the document field limit.
        PayloadTooLargeError
            If *data* exceeds ``max_upload_bytes``.
        ConflictError
            If the derived namespace or the name is already in use.
        UpstreamError
            If the vector index, blob store or document store fails.
        """
        display_name = (filename or "").strip()
        if not display_name:
            raise ValidationError(message="No file uploaded")
        if not data:
            raise ValidationError(message="Uploaded file is empty")
        if len(display_name) > MAX_FIELD_LENGTH:
            raise ValidationError(
                message=f"File name must be at most {MAX_FIELD_LENGTH} characters"
            )
        if len(data) > self._max_upload_bytes:
            raise PayloadTooLargeError(
                message=f"Uploaded file exceeds {self._max_upload_bytes} bytes"
            )

        namespace = await self._allocator.allocate(display_name)

        location: str | None = None
        try:
            location = await self._blob_store.put(display_name, data)
            document = await call_upstream(
                "create_document",
                lambda: self._document_store.create_document(
                    NewDocument(
                        display_name=display_name,
                        source_location=location,
                        namespace=namespace,
                    )
                ),
                self._retry_policy,
            )
        except PdfQAError as exc:
            await self._compensate(namespace, location, exc)
            raise

        logger.info(
            "document_uploaded",
            document_id=document.id,
            display_name=display_name,
            namespace=namespace,
            size_bytes=len(data),
        )
        return document

    async def _compensate(self, namespace: str, location: str | None, cause: PdfQAError) -> None:
        """Undo the namespace reservation and blob write of a failed upload.

        Failures here are logged; the original error is what the caller sees.
        """
        logger.warning(
            "upload_rolled_back",
            namespace=namespace,
            location=location,
            error=str(cause),
        )
        try:
            await self._allocator.release(namespace)
        except PdfQAError as exc:
            logger.error("namespace_release_failed", namespace=namespace, error=str(exc))
        if location is not None:
            try:
                await self._blob_store.delete(location)
            except (PdfQAError, OSError) as exc:
                logger.error("blob_delete_failed", location=location, error=str(exc))

"""Orchestrator for the document ingestion pipeline.

Pipeline stages: **fetch -> extract -> embed -> upsert -> mark processed**.

The :class:`IngestionService` coordinates five collaborators (document
store, blob store, text extractor, embedding provider, vector index)
without any of them knowing about each other:

    1. IDocumentStore -- loads the document record; refuses processed ones
    2. IBlobStore -- fetches the original PDF bytes
    3. PDFTextExtractor -- splits the bytes into numbered page texts
    4. IEmbeddingProvider -- embeds every page, fanned out under a semaphore
    5. IVectorIndexProvider -- upserts all page records in one batch call

Only after the upsert succeeds is ``processed`` flipped, with a
compare-and-swap in the store.  A failed run leaves ``processed`` false and
may leave some page vectors behind; re-running rewrites them because page
ids are stable (``page{N}``).

Runs for the same document are serialised by a per-document lock, so a
run that waited for another re-reads the record and sees it processed.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING

import structlog

from pdfqa.models.rag import IngestionResult, PageRecord
from pdfqa.services.ingestion.pdf_extractor import PDFTextExtractor
from pdfqa.utils.concurrency import throttled_gather
from pdfqa.utils.errors import AlreadyProcessedError, NotFoundError, ValidationError
from pdfqa.utils.locks import KeyedLock
from pdfqa.utils.logging import document_context
from pdfqa.utils.retry import RetryPolicy, call_upstream

if TYPE_CHECKING:
    from pdfqa.interfaces.blob_store import IBlobStore
    from pdfqa.interfaces.document_store import IDocumentStore
    from pdfqa.interfaces.embedding_provider import IEmbeddingProvider
    from pdfqa.interfaces.vector_index_provider import IVectorIndexProvider
    from pdfqa.models.document import Document

logger = structlog.get_logger(logger_name=__name__)


class IngestionService:
    """Turns one uploaded document into indexed page vectors.

    Parameters
    ----------
    document_store:
        Source of truth for the document record and its ``processed`` flag.
    blob_store:
        Holds the original PDF bytes referenced by ``source_location``.
    extractor:
        Splits PDF bytes into ``(page_number, text)`` pairs.
    embedding_provider:
        Generates one embedding vector per page.
    vector_index:
        Stores page vectors in the document's namespace.
    retry_policy:
        Deadline and retry parameters applied to every external call.
    embed_concurrency:
        Maximum number of page embeddings in flight at once.  ``1`` embeds
        pages strictly in page order.
    locks:
        Per-document lock registry.  Share one instance between every
        service that can ingest the same documents.
    """

    def __init__(
        self,
        document_store: IDocumentStore,
        blob_store: IBlobStore,
        extractor: PDFTextExtractor,
        embedding_provider: IEmbeddingProvider,
        vector_index: IVectorIndexProvider,
        retry_policy: RetryPolicy | None = None,
        embed_concurrency: int = 4,
        locks: KeyedLock | None = None,
    ) -> None:
        self._document_store = document_store
        self._blob_store = blob_store
        self._extractor = extractor
        self._embedding_provider = embedding_provider
        self._vector_index = vector_index
        self._retry_policy = retry_policy or RetryPolicy()
        self._embed_concurrency = max(1, embed_concurrency)
        self._locks = locks or KeyedLock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def ingest(self, document_id: str) -> IngestionResult:
        """Run the full pipeline for one document.

        Returns
        -------
        IngestionResult
            Namespace, number of pages indexed and elapsed time.

        Raises
        ------
        ValidationError
            If *document_id* is blank.
        NotFoundError
            If no document has this id.
        AlreadyProcessedError
            If the document is already processed, or another run
            processed it first.  Nothing is written in this case.
        FetchError, ParseError, UpstreamError
            If a pipeline step fails; ``processed`` stays false.
        """
        if not document_id or not document_id.strip():
            raise ValidationError(message="Document id must not be empty")

        with document_context(document_id):
            return await self._ingest_locked(document_id)

    async def _ingest_locked(self, document_id: str) -> IngestionResult:
        start = time.monotonic()
        async with self._locks.hold(document_id):
            document = await self._load_unprocessed(document_id)
            logger.info("document_ingest_started", namespace=document.namespace)

            # Step 1: fetch the original bytes.
            data = await call_upstream(
                "fetch_document",
                lambda: self._blob_store.fetch(document.source_location),
                self._retry_policy,
            )

            # Step 2: extract page texts (CPU-bound, off the event loop).
            pages = await asyncio.to_thread(self._extractor.extract, data)

            # Step 3: embed every page.
            records = await self._embed_pages(pages)
            logger.info("pages_embedded", pages=len(records))

            # Step 4: one batch upsert into the document's namespace.
            upserted = await call_upstream(
                "index_upsert",
                lambda: self._vector_index.upsert(document.namespace, records),
                self._retry_policy,
            )
            logger.info(
                "pages_upserted",
                namespace=document.namespace,
                count=upserted,
            )

            # Step 5: flip processed only after the vectors are stored.
            flipped = await call_upstream(
                "mark_processed",
                lambda: self._document_store.mark_processed(document_id),
                self._retry_policy,
            )
            if not flipped:
                raise AlreadyProcessedError()

        elapsed = round(time.monotonic() - start, 3)
        logger.info(
            "document_processed",
            document_id=document_id,
            namespace=document.namespace,
            pages_indexed=len(records),
            ingestion_time=elapsed,
        )
        return IngestionResult(
            document_id=document_id,
            namespace=document.namespace,
            pages_indexed=len(records),
            ingestion_time=elapsed,
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _load_unprocessed(self, document_id: str) -> Document:
        document = await call_upstream(
            "get_document",
            lambda: self._document_store.get_document(document_id),
            self._retry_policy,
        )
        if document is None:
            raise NotFoundError()
        if document.processed:
            logger.info("document_already_processed", document_id=document_id)
            raise AlreadyProcessedError()
        return document

    async def _embed_pages(self, pages: list[tuple[int, str]]) -> list[PageRecord]:
        """Embed page texts with bounded concurrency, keeping page identity.

        ``throttled_gather`` returns results in input order, so each vector
        is paired back with the page it was computed from.  The first page
        that fails stops the fan-out; no further pages are sent.
        """
        coros = [
            call_upstream(
                "embed_page",
                lambda text=text: self._embedding_provider.embed_single(text),
                self._retry_policy,
            )
            for _, text in pages
        ]
        vectors = await throttled_gather(
            coros, limit=self._embed_concurrency, return_exceptions=False
        )

        return [
            PageRecord(page_number=page_number, text=text, embedding=vector)
            for (page_number, text), vector in zip(pages, vectors, strict=True)
        ]

"""Unit tests for DocumentService -- upload validation, ordering and rollback."""

from __future__ import annotations

import pytest

from pdfqa.services.document_service import DocumentService
from pdfqa.services.namespace_allocator import NamespaceAllocator
from pdfqa.utils.errors import (
    ConflictError,
    PayloadTooLargeError,
    UpstreamError,
    ValidationError,
)


@pytest.fixture
def service(
    mock_document_store,
    mock_blob_store,
    mock_embedding_provider,
    vector_index,
    fast_retry,
    sample_document,
) -> DocumentService:
    mock_document_store.create_document.return_value = sample_document
    allocator = NamespaceAllocator(
        vector_index=vector_index,
        embedding_provider=mock_embedding_provider,
        retry_policy=fast_retry,
    )
    return DocumentService(
        document_store=mock_document_store,
        blob_store=mock_blob_store,
        allocator=allocator,
        max_upload_bytes=1024,
        retry_policy=fast_retry,
    )


class TestUpload:
    @pytest.mark.asyncio
    async def test_creates_unprocessed_record(
        self, service, mock_document_store, mock_blob_store, vector_index, sample_document
    ) -> None:
        document = await service.upload("My Report.pdf", b"%PDF-1.4")

        assert document == sample_document
        mock_blob_store.put.assert_awaited_once_with("My Report.pdf", b"%PDF-1.4")
        new_document = mock_document_store.create_document.await_args.args[0]
        assert new_document.display_name == "My Report.pdf"
        assert new_document.source_location == "blob://abc.pdf"
        assert new_document.namespace == "my-report"
        assert "my-report" in vector_index.namespaces
        assert vector_index.dimensions["my-report"] == 8

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("filename", "data", "message"),
        [
            (None, b"data", "No file uploaded"),
            ("", b"data", "No file uploaded"),
            ("a.pdf", b"", "Uploaded file is empty"),
            ("x" * 101 + ".pdf", b"data", "at most 100"),
            ("!!!.pdf", b"data", "Cannot derive a namespace"),
        ],
    )
    async def test_invalid_uploads_store_nothing(
        self, service, mock_blob_store, mock_document_store, vector_index, filename, data, message
    ) -> None:
        with pytest.raises(ValidationError, match=message):
            await service.upload(filename, data)

        mock_blob_store.put.assert_not_awaited()
        mock_document_store.create_document.assert_not_awaited()
        assert vector_index.namespaces == {}

    @pytest.mark.asyncio
    async def test_oversized_upload(self, service, mock_blob_store) -> None:
        with pytest.raises(PayloadTooLargeError) as exc_info:
            await service.upload("big.pdf", b"x" * 1025)

        assert exc_info.value.status_code == 413
        mock_blob_store.put.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_namespace_collision_happens_before_any_write(
        self, service, mock_blob_store, mock_document_store, vector_index
    ) -> None:
        existing = {"page1": object()}
        vector_index.namespaces["my-report"] = existing

        with pytest.raises(ConflictError, match="Index with name my-report already exists"):
            await service.upload("My Report.pdf", b"%PDF")

        mock_blob_store.put.assert_not_awaited()
        mock_document_store.create_document.assert_not_awaited()
        assert vector_index.namespaces["my-report"] is existing


class TestUploadRollback:
    @pytest.mark.asyncio
    async def test_record_conflict_releases_namespace_and_blob(
        self, service, mock_document_store, mock_blob_store, vector_index
    ) -> None:
        mock_document_store.create_document.side_effect = ConflictError(message="duplicate")

        with pytest.raises(ConflictError, match="duplicate"):
            await service.upload("My Report.pdf", b"%PDF")

        assert "my-report" not in vector_index.namespaces
        mock_blob_store.delete.assert_awaited_once_with("blob://abc.pdf")

    @pytest.mark.asyncio
    async def test_blob_failure_releases_namespace(
        self, service, mock_document_store, mock_blob_store, vector_index
    ) -> None:
        mock_blob_store.put.side_effect = UpstreamError(message="disk full")

        with pytest.raises(UpstreamError, match="disk full"):
            await service.upload("My Report.pdf", b"%PDF")

        assert "my-report" not in vector_index.namespaces
        mock_blob_store.delete.assert_not_awaited()
        mock_document_store.create_document.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rollback_failure_keeps_original_error(
        self, service, mock_document_store, mock_blob_store
    ) -> None:
        mock_document_store.create_document.side_effect = ConflictError(message="duplicate")
        mock_blob_store.delete.side_effect = OSError("read-only")

        with pytest.raises(ConflictError, match="duplicate"):
            await service.upload("My Report.pdf", b"%PDF")


class TestListDocuments:
    @pytest.mark.asyncio
    async def test_passes_through_store_order(
        self, service, mock_document_store, sample_document
    ) -> None:
        mock_document_store.list_documents.return_value = [sample_document]
        assert await service.list_documents() == [sample_document]

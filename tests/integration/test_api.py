"""Integration tests for FastAPI API endpoints using TestClient.

Services are real; the document store is a temporary SQLite database, the
blob store writes to a temporary directory, and the vector index,
embedding and completion providers are in-memory doubles.
"""

from __future__ import annotations

import asyncio
import io
from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from pdfqa import __version__
from pdfqa.api.middleware import RequestLoggingMiddleware, register_error_handlers
from pdfqa.api.routes import router as api_router
from pdfqa.providers.blob_store.local_blob_store import LocalBlobStore
from pdfqa.providers.document_store.sqlite_document_store import SQLiteDocumentStore
from pdfqa.services.document_service import DocumentService
from pdfqa.services.ingestion.ingestion_service import IngestionService
from pdfqa.services.ingestion.pdf_extractor import PDFTextExtractor
from pdfqa.services.namespace_allocator import NamespaceAllocator
from pdfqa.services.qa_service import QAService
from pdfqa.utils.errors import UpstreamError

MAX_UPLOAD_BYTES = 4096


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _create_test_app(
    tmp_path,
    embedding,
    completion,
    vector_index,
    retry,
) -> FastAPI:
    """Create a FastAPI app wired like production but on local test doubles."""
    app = FastAPI()
    register_error_handlers(app)
    app.add_middleware(RequestLoggingMiddleware)
    app.include_router(api_router)

    document_store = SQLiteDocumentStore(db_path=tmp_path / "documents.db")
    asyncio.run(document_store.initialize())
    blob_store = LocalBlobStore(
        root_dir=tmp_path / "blobs",
        http_client=MagicMock(spec=httpx.AsyncClient),
    )
    allocator = NamespaceAllocator(vector_index, embedding, retry_policy=retry)

    app.state.settings = SimpleNamespace(max_upload_bytes=MAX_UPLOAD_BYTES)
    app.state.document_store = document_store
    app.state.vector_index = vector_index
    app.state.embedding = embedding
    app.state.completion = completion
    app.state.document_service = DocumentService(
        document_store=document_store,
        blob_store=blob_store,
        allocator=allocator,
        max_upload_bytes=MAX_UPLOAD_BYTES,
        retry_policy=retry,
    )
    app.state.ingestion_service = IngestionService(
        document_store=document_store,
        blob_store=blob_store,
        extractor=PDFTextExtractor(),
        embedding_provider=embedding,
        vector_index=vector_index,
        retry_policy=retry,
    )
    app.state.qa_service = QAService(
        document_store=document_store,
        embedding_provider=embedding,
        vector_index=vector_index,
        completion_provider=completion,
        retry_policy=retry,
    )
    return app


@pytest.fixture
def client(
    tmp_path,
    mock_embedding_provider,
    mock_completion_provider,
    vector_index,
    fast_retry,
) -> TestClient:
    app = _create_test_app(
        tmp_path, mock_embedding_provider, mock_completion_provider, vector_index, fast_retry
    )
    return TestClient(app)


def _upload(client: TestClient, name: str, data: bytes) -> httpx.Response:
    return client.post(
        "/api/v1/documents/upload",
        files={"file": (name, io.BytesIO(data), "application/pdf")},
    )


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestListEndpoint:
    def test_empty(self, client) -> None:
        response = client.get("/api/v1/documents")
        assert response.status_code == 200
        assert response.json() == []

    def test_lists_uploads_oldest_first(self, client, make_pdf) -> None:
        _upload(client, "First.pdf", make_pdf(["A"]))
        _upload(client, "Second.pdf", make_pdf(["B"]))

        names = [d["display_name"] for d in client.get("/api/v1/documents").json()]

        assert names == ["First.pdf", "Second.pdf"]


class TestUploadEndpoint:
    """Tests for POST /api/v1/documents/upload."""

    def test_upload_creates_unprocessed_document(self, client, make_pdf, vector_index) -> None:
        response = _upload(client, "My Report.pdf", make_pdf(["A"]))

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "File uploaded successfully"
        document = data["document"]
        assert document["display_name"] == "My Report.pdf"
        assert document["namespace"] == "my-report"
        assert document["processed"] is False
        assert document["source_location"].startswith("blob://")
        assert "my-report" in vector_index.namespaces

    def test_upload_without_file(self, client) -> None:
        response = client.post("/api/v1/documents/upload")

        assert response.status_code == 400
        assert response.json() == {"error": "ValidationError", "detail": "No file uploaded"}

    def test_upload_empty_file(self, client) -> None:
        response = _upload(client, "empty.pdf", b"")

        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"

    def test_upload_too_large(self, client, vector_index) -> None:
        response = _upload(client, "huge.pdf", b"%" * (MAX_UPLOAD_BYTES + 1))

        assert response.status_code == 413
        assert "too large" in response.json()["detail"].lower()
        assert vector_index.namespaces == {}

    def test_duplicate_name_conflicts(self, client, make_pdf) -> None:
        _upload(client, "My Report.pdf", make_pdf(["A"]))

        response = _upload(client, "My Report.pdf", make_pdf(["B"]))

        assert response.status_code == 500
        assert response.json() == {
            "error": "ConflictError",
            "detail": "Index with name my-report already exists",
        }
        assert len(client.get("/api/v1/documents").json()) == 1


class TestProcessEndpoint:
    """Tests for POST /api/v1/documents/process."""

    def test_process_then_reprocess(self, client, make_pdf, vector_index) -> None:
        doc_id = _upload(client, "Three.pdf", make_pdf(["A", "B", "C"])).json()["document"]["id"]

        response = client.post("/api/v1/documents/process", json={"id": doc_id})

        assert response.status_code == 200
        assert response.json() == {
            "message": "File processed successfully",
            "document_id": doc_id,
            "pages_indexed": 3,
        }
        assert sorted(vector_index.namespaces["three"]) == ["page1", "page2", "page3"]
        assert client.get("/api/v1/documents").json()[0]["processed"] is True

        again = client.post("/api/v1/documents/process", json={"id": doc_id})

        assert again.status_code == 400
        assert again.json()["detail"] == "File is already processed"

    def test_unknown_id(self, client) -> None:
        response = client.post("/api/v1/documents/process", json={"id": "missing"})

        assert response.status_code == 400
        assert response.json() == {"error": "NotFoundError", "detail": "File not found"}

    @pytest.mark.parametrize("body", [{}, {"id": ""}, {"id": 5}])
    def test_bad_body(self, client, body) -> None:
        response = client.post("/api/v1/documents/process", json=body)

        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"

    def test_unparseable_pdf_stays_unprocessed(self, client) -> None:
        doc_id = _upload(client, "Broken.pdf", b"not a pdf").json()["document"]["id"]

        response = client.post("/api/v1/documents/process", json={"id": doc_id})

        assert response.status_code == 500
        assert response.json()["error"] == "ParseError"
        assert client.get("/api/v1/documents").json()[0]["processed"] is False


class TestQueryEndpoint:
    """Tests for POST /api/v1/documents/query."""

    def test_query_returns_answer(self, client, make_pdf, mock_completion_provider) -> None:
        doc_id = _upload(client, "Q.pdf", make_pdf(["A", "B"])).json()["document"]["id"]
        client.post("/api/v1/documents/process", json={"id": doc_id})

        response = client.post(
            "/api/v1/documents/query", json={"id": doc_id, "query": "What about B?"}
        )

        assert response.status_code == 200
        assert response.json() == {"answer": "The answer."}
        prompt = mock_completion_provider.complete.await_args.args[0]
        assert prompt.endswith("Question: What about B? \n\nAnswer:")

    def test_unknown_document(self, client, mock_completion_provider) -> None:
        response = client.post("/api/v1/documents/query", json={"id": "missing", "query": "Why?"})

        assert response.status_code == 400
        assert response.json()["detail"] == "File not found"
        mock_completion_provider.complete.assert_not_awaited()

    @pytest.mark.parametrize("body", [{"id": "x"}, {"id": "x", "query": ""}, {"query": "q"}])
    def test_bad_body(self, client, body) -> None:
        response = client.post("/api/v1/documents/query", json=body)
        assert response.status_code == 400

    def test_completion_failure(self, client, make_pdf, mock_completion_provider) -> None:
        doc_id = _upload(client, "Q.pdf", make_pdf(["A"])).json()["document"]["id"]
        mock_completion_provider.complete.side_effect = UpstreamError(
            message="openai API error", provider_name="openai"
        )

        response = client.post("/api/v1/documents/query", json={"id": doc_id, "query": "Why?"})

        assert response.status_code == 500
        assert response.json() == {"error": "UpstreamError", "detail": "openai API error"}


class TestHealthEndpoint:
    def test_healthy(self, client) -> None:
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == __version__
        assert all(data["providers"].values())

    def test_degraded_without_completion(self, client, mock_completion_provider) -> None:
        mock_completion_provider.is_available.return_value = False

        data = client.get("/api/v1/health").json()

        assert data["status"] == "degraded"
        assert data["providers"]["completion"] is False


class TestRequestId:
    def test_request_id_is_echoed(self, client) -> None:
        response = client.get("/api/v1/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

    def test_request_id_is_generated(self, client) -> None:
        response = client.get("/api/v1/documents")
        assert len(response.headers["X-Request-ID"]) == 32

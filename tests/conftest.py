"""Shared pytest fixtures for the pdfqa test suite."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Callable
from unittest.mock import AsyncMock, MagicMock

import fitz
import pytest
import pytest_asyncio

from pdfqa.interfaces.blob_store import IBlobStore
from pdfqa.interfaces.completion_provider import ICompletionProvider
from pdfqa.interfaces.document_store import IDocumentStore
from pdfqa.interfaces.embedding_provider import IEmbeddingProvider
from pdfqa.interfaces.vector_index_provider import IVectorIndexProvider
from pdfqa.models.document import Document
from pdfqa.models.rag import IndexMatch, PageRecord
from pdfqa.providers.document_store.sqlite_document_store import SQLiteDocumentStore
from pdfqa.utils.errors import ConflictError, UpstreamError
from pdfqa.utils.retry import RetryPolicy

EMBEDDING_DIM = 8


# ---------------------------------------------------------------------------
# PDF fixtures
# ---------------------------------------------------------------------------


def build_pdf(pages: list[str]) -> bytes:
    """Create an in-memory PDF with one page per entry; ``""`` gives a blank page."""
    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text, fontsize=12)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def make_pdf() -> Callable[[list[str]], bytes]:
    return build_pdf


# ---------------------------------------------------------------------------
# Vector index double
# ---------------------------------------------------------------------------


def _cosine(a: list[float], b: list[float]) -> float:
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    if norm == 0:
        return 0.0
    return sum(x * y for x, y in zip(a, b)) / norm


class InMemoryVectorIndex(IVectorIndexProvider):
    """Namespaced cosine index kept in dictionaries, with call counters."""

    def __init__(self) -> None:
        self.namespaces: dict[str, dict[str, PageRecord]] = {}
        self.dimensions: dict[str, int] = {}
        self.upsert_calls = 0
        self.query_calls = 0

    async def list_namespaces(self) -> set[str]:
        return set(self.namespaces)

    async def create_namespace(self, namespace: str, dimension: int) -> None:
        if namespace in self.namespaces:
            raise ConflictError(message=f"Index with name {namespace} already exists")
        self.namespaces[namespace] = {}
        self.dimensions[namespace] = dimension

    async def delete_namespace(self, namespace: str) -> bool:
        self.dimensions.pop(namespace, None)
        return self.namespaces.pop(namespace, None) is not None

    async def upsert(self, namespace: str, records: list[PageRecord]) -> int:
        self.upsert_calls += 1
        if namespace not in self.namespaces:
            raise UpstreamError(message=f"Namespace '{namespace}' is not available")
        for record in records:
            self.namespaces[namespace][record.record_id] = record
        return len(records)

    async def query(self, namespace: str, vector: list[float], top_k: int = 5) -> list[IndexMatch]:
        self.query_calls += 1
        if namespace not in self.namespaces:
            raise UpstreamError(message=f"Namespace '{namespace}' is not available")
        ranked = sorted(
            self.namespaces[namespace].values(),
            key=lambda r: _cosine(vector, r.embedding),
            reverse=True,
        )
        return [
            IndexMatch(
                record_id=r.record_id,
                score=_cosine(vector, r.embedding),
                page_number=r.page_number,
                text=r.text,
            )
            for r in ranked[:top_k]
        ]

    async def count(self, namespace: str) -> int:
        return len(self.namespaces.get(namespace, {}))

    def get_provider_name(self) -> str:
        return "memory"

    def is_available(self) -> bool:
        return True


@pytest.fixture
def vector_index() -> InMemoryVectorIndex:
    return InMemoryVectorIndex()


# ---------------------------------------------------------------------------
# Provider mocks
# ---------------------------------------------------------------------------


def keyword_vector(text: str) -> list[float]:
    """Deterministic embedding: one dimension per letter A-H found in *text*."""
    vector = [0.0] * EMBEDDING_DIM
    for index, letter in enumerate("ABCDEFGH"):
        if letter in text:
            vector[index] = 1.0
    if not any(vector):
        vector[-1] = 0.01
    return vector


@pytest.fixture
def mock_embedding_provider() -> MagicMock:
    mock = MagicMock(spec=IEmbeddingProvider)
    mock.embed_single = AsyncMock(side_effect=keyword_vector)
    mock.embed = AsyncMock(side_effect=lambda texts: [keyword_vector(t) for t in texts])
    mock.get_dimension.return_value = EMBEDDING_DIM
    mock.get_provider_name.return_value = "mock_embedding"
    mock.is_available.return_value = True
    return mock


@pytest.fixture
def mock_completion_provider() -> MagicMock:
    mock = MagicMock(spec=ICompletionProvider)
    mock.complete = AsyncMock(return_value="The answer.")
    mock.get_provider_name.return_value = "mock_completion"
    mock.is_available.return_value = True
    return mock


@pytest.fixture
def mock_document_store() -> MagicMock:
    mock = MagicMock(spec=IDocumentStore)
    mock.get_document = AsyncMock(return_value=None)
    mock.list_documents = AsyncMock(return_value=[])
    mock.create_document = AsyncMock()
    mock.mark_processed = AsyncMock(return_value=True)
    mock.ping = AsyncMock(return_value=True)
    mock.initialize = AsyncMock()
    return mock


@pytest.fixture
def mock_blob_store() -> MagicMock:
    mock = MagicMock(spec=IBlobStore)
    mock.put = AsyncMock(return_value="blob://abc.pdf")
    mock.fetch = AsyncMock(return_value=b"")
    mock.delete = AsyncMock(return_value=True)
    mock.get_provider_name.return_value = "mock_blob"
    return mock


@pytest.fixture
def fast_retry() -> RetryPolicy:
    """Short deadline and no backoff so retry paths run instantly."""
    return RetryPolicy(timeout=2.0, max_attempts=3, backoff=0.0)


@pytest.fixture
def sample_document() -> Document:
    return Document(
        id="doc-1",
        display_name="My Report.pdf",
        source_location="blob://abc.pdf",
        namespace="my-report",
        processed=False,
    )


# ---------------------------------------------------------------------------
# Real local stores
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def sqlite_store(tmp_path: Path) -> SQLiteDocumentStore:
    store = SQLiteDocumentStore(db_path=tmp_path / "db" / "documents.db")
    await store.initialize()
    return store

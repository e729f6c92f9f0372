"""Abstract base class for vector-index service providers.

The index is partitioned into **namespaces**, one per document.  Each
namespace holds one vector per page keyed ``page{N}`` with metadata
``{page_number, text}``.  Implementations may wrap ChromaDB (local),
Pinecone, Qdrant or any other store supporting named partitions.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pdfqa.models.rag import IndexMatch, PageRecord


# Concrete implementation: ChromaDBIndexProvider (pdfqa/providers/vector_index/)
class IVectorIndexProvider(ABC):
    """Contract for the namespaced vector index used by the pipelines.

    All methods are async so network-backed stores do not block the event
    loop.  Failures surface as :class:`~pdfqa.utils.errors.UpstreamError`.
    """

    @abstractmethod
    async def list_namespaces(self) -> set[str]:
        """Return the names of every existing namespace."""

    @abstractmethod
    async def create_namespace(self, namespace: str, dimension: int) -> None:
        """Create an empty namespace accepting vectors of *dimension* floats.

        Raises
        ------
        pdfqa.utils.errors.ConflictError
            If the namespace already exists.
        """

    @abstractmethod
    async def delete_namespace(self, namespace: str) -> bool:
        """Delete a namespace and all its vectors.

        Returns ``True`` if it existed.
        """

    @abstractmethod
    async def upsert(self, namespace: str, records: list[PageRecord]) -> int:
        """Insert-or-replace page records in one batch, keyed by ``page{N}``.

        Returns the number of records written.
        """

    @abstractmethod
    async def query(self, namespace: str, vector: list[float], top_k: int = 5) -> list[IndexMatch]:
        """Return up to *top_k* matches ranked by similarity (best first).

        Stored metadata (page number and text) is always included.
        """

    @abstractmethod
    async def count(self, namespace: str) -> int:
        """Return the number of vectors stored in *namespace*."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"chromadb"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the index backend is reachable."""

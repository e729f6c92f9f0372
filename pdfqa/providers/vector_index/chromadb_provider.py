"""ChromaDB vector index provider adapter.

Wraps ``chromadb.PersistentClient`` to implement :class:`IVectorIndexProvider`.
Each namespace is one ChromaDB collection named
``<collection_prefix><namespace>`` using cosine distance.  The vector
dimension a namespace was created with is kept in the collection metadata
and checked on every upsert.  Fully local, no external service required.

Upserts larger than the client's maximum batch size (``get_max_batch_size``,
optionally lowered with ``max_batch_size``) are split into chunks of that
size; below it a document's pages are written in a single call.
"""

from __future__ import annotations

import asyncio
import os
from typing import Any

# Disable ChromaDB telemetry before importing chromadb.
os.environ["ANONYMIZED_TELEMETRY"] = "False"

import chromadb
import structlog

from pdfqa.interfaces.vector_index_provider import IVectorIndexProvider
from pdfqa.models.rag import IndexMatch, PageRecord
from pdfqa.utils.errors import ConflictError, UpstreamError

logger = structlog.get_logger(logger_name=__name__)

_DIMENSION_KEY = "dimension"


class ChromaDBIndexProvider(IVectorIndexProvider):
    """Namespaced vector index backed by ChromaDB with local persistence.

    Embeddings are always computed by the injected embedding provider
    upstream, so collections are opened without a ChromaDB embedding
    function (``embedding_function=None``) and never load a local model.
    """

    def __init__(
        self,
        persist_directory: str = "./data/chromadb",
        collection_prefix: str = "pdfqa-",
        max_batch_size: int | None = None,
    ) -> None:
        self._persist_directory = persist_directory
        self._prefix = collection_prefix
        self._max_batch_size = max_batch_size
        self._client = chromadb.PersistentClient(
            path=persist_directory,
            settings=chromadb.config.Settings(anonymized_telemetry=False),
        )

    # ------------------------------------------------------------------
    # IVectorIndexProvider implementation
    # ------------------------------------------------------------------

    # The ChromaDB client is synchronous; every call below runs in a worker
    # thread.

    async def list_namespaces(self) -> set[str]:
        try:
            names = await asyncio.to_thread(self._collection_names)
        except Exception as exc:
            raise UpstreamError(
                message=f"ChromaDB list_collections failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return {name[len(self._prefix):] for name in names if name.startswith(self._prefix)}

    async def create_namespace(self, namespace: str, dimension: int) -> None:
        if namespace in await self.list_namespaces():
            raise ConflictError(
                message=f"Index with name {namespace} already exists",
                provider_name=self.get_provider_name(),
            )
        try:
            await asyncio.to_thread(
                self._client.create_collection,
                name=self._collection_name(namespace),
                metadata={"hnsw:space": "cosine", _DIMENSION_KEY: dimension},
                embedding_function=None,
            )
        except Exception as exc:
            raise UpstreamError(
                message=f"ChromaDB create_collection failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.info("chromadb_namespace_created", namespace=namespace, dimension=dimension)

    async def delete_namespace(self, namespace: str) -> bool:
        if namespace not in await self.list_namespaces():
            return False
        try:
            await asyncio.to_thread(
                self._client.delete_collection, name=self._collection_name(namespace)
            )
        except Exception as exc:
            raise UpstreamError(
                message=f"ChromaDB delete_collection failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.info("chromadb_namespace_deleted", namespace=namespace)
        return True

    async def upsert(self, namespace: str, records: list[PageRecord]) -> int:
        """Upsert every record keyed by ``page{N}``.

        Records go to ChromaDB in one call unless there are more than the
        client's maximum batch size, in which case they are written in
        consecutive chunks of that size.
        """
        if not records:
            return 0

        collection = await self._get_collection(namespace)
        expected = (collection.metadata or {}).get(_DIMENSION_KEY)
        for record in records:
            if expected is not None and len(record.embedding) != int(expected):
                raise UpstreamError(
                    message=(
                        f"Embedding dimension mismatch: namespace '{namespace}' holds "
                        f"{expected}-dim vectors but page {record.page_number} has "
                        f"{len(record.embedding)}"
                    ),
                    provider_name=self.get_provider_name(),
                )

        try:
            batches = await asyncio.to_thread(self._upsert_batches, collection, records)
        except Exception as exc:
            raise UpstreamError(
                message=f"ChromaDB upsert failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info("chromadb_upsert", namespace=namespace, count=len(records), batches=batches)
        return len(records)

    async def query(self, namespace: str, vector: list[float], top_k: int = 5) -> list[IndexMatch]:
        """Return up to *top_k* matches, closest first, with stored metadata."""
        collection = await self._get_collection(namespace)
        try:
            results = await asyncio.to_thread(self._query_collection, collection, vector, top_k)
        except Exception as exc:
            raise UpstreamError(
                message=f"ChromaDB query failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        if results is None:
            return []

        ids = results["ids"][0] if results.get("ids") else []
        metadatas = results["metadatas"][0] if results.get("metadatas") else [{}] * len(ids)
        distances = results["distances"][0] if results.get("distances") else [0.0] * len(ids)

        matches = [
            self._to_match(record_id, meta or {}, distance)
            for record_id, meta, distance in zip(ids, metadatas, distances, strict=True)
        ]
        logger.info(
            "chromadb_query",
            namespace=namespace,
            results_count=len(matches),
            top_score=matches[0].score if matches else 0.0,
        )
        return matches

    async def count(self, namespace: str) -> int:
        collection = await self._get_collection(namespace)
        try:
            return await asyncio.to_thread(collection.count)
        except Exception as exc:
            raise UpstreamError(
                message=f"ChromaDB count failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    def get_provider_name(self) -> str:
        return "chromadb"

    def is_available(self) -> bool:
        """Return ``True`` if the ChromaDB client answers a heartbeat."""
        try:
            self._client.heartbeat()
            return True
        except Exception:
            return False

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _collection_name(self, namespace: str) -> str:
        return f"{self._prefix}{namespace}"

    def _collection_names(self) -> list[str]:
        # list_collections() returns names on some ChromaDB releases and
        # Collection objects on others.
        return [
            c if isinstance(c, str) else c.name
            for c in self._client.list_collections()
        ]

    def _open_collection(self, namespace: str) -> Any:
        return self._client.get_collection(
            name=self._collection_name(namespace),
            embedding_function=None,
        )

    async def _get_collection(self, namespace: str) -> Any:
        try:
            return await asyncio.to_thread(self._open_collection, namespace)
        except Exception as exc:
            raise UpstreamError(
                message=f"Namespace '{namespace}' is not available: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    def _batch_size(self) -> int:
        limit = self._client.get_max_batch_size()
        if self._max_batch_size is not None:
            limit = min(limit, self._max_batch_size)
        return max(1, limit)

    def _upsert_batches(self, collection: Any, records: list[PageRecord]) -> int:
        size = self._batch_size()
        batches = 0
        for start in range(0, len(records), size):
            chunk = records[start:start + size]
            collection.upsert(
                ids=[r.record_id for r in chunk],
                embeddings=[r.embedding for r in chunk],
                metadatas=[r.metadata() for r in chunk],
            )
            batches += 1
        return batches

    @staticmethod
    def _query_collection(collection: Any, vector: list[float], top_k: int) -> dict | None:
        stored = collection.count()
        if stored == 0:
            return None
        return collection.query(
            query_embeddings=[vector],
            n_results=min(top_k, stored),
            include=["metadatas", "distances"],
        )

    @staticmethod
    def _to_match(record_id: str, meta: dict[str, Any], distance: float) -> IndexMatch:
        page_number = meta.get("page_number")
        return IndexMatch(
            record_id=record_id,
            score=1.0 - float(distance),
            page_number=int(page_number) if page_number is not None else None,
            text=str(meta.get("text", "")),
        )

"""Vector-index namespace allocation for uploaded documents.

Every document gets its own namespace in the vector index, derived from
its display name:

    "My Report.pdf"  ->  "my-report"
    "Ünïcode  Notes.v2.pdf"  ->  "unicode-notes"

The name is the part before the first ``.``, folded to ASCII and
lowercased, with every run of characters outside ``[a-z0-9]`` replaced by
a single ``-``.  Allocation never reuses or alters an existing namespace:
a collision is a :class:`ConflictError`.
"""

from __future__ import annotations

import re
import unicodedata

import structlog

from pdfqa.interfaces.embedding_provider import IEmbeddingProvider
from pdfqa.interfaces.vector_index_provider import IVectorIndexProvider
from pdfqa.utils.errors import ConflictError, ValidationError
from pdfqa.utils.logging import get_logger
from pdfqa.utils.retry import RetryPolicy, call_upstream

logger: structlog.BoundLogger = get_logger(__name__)

MAX_NAMESPACE_LENGTH = 48

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def derive_namespace(display_name: str) -> str:
    """Derive the namespace slug for *display_name*.

    Raises
    ------
    ValidationError
        If nothing usable is left after normalisation.
    """
    stem = display_name.split(".", 1)[0]
    folded = unicodedata.normalize("NFKD", stem).encode("ascii", "ignore").decode("ascii")
    slug = _NON_SLUG.sub("-", folded.lower()).strip("-")
    # Re-trim after truncation so the name still ends on a letter or digit.
    slug = slug[:MAX_NAMESPACE_LENGTH].rstrip("-")
    if not slug:
        raise ValidationError(
            message=f"Cannot derive a namespace from file name '{display_name}'"
        )
    return slug


class NamespaceAllocator:
    """Creates one fresh vector-index namespace per uploaded document.

    The namespace is created with the embedding provider's dimension so
    every vector later written to it has a matching size.
    """

    def __init__(
        self,
        vector_index: IVectorIndexProvider,
        embedding_provider: IEmbeddingProvider,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._vector_index = vector_index
        self._embedding_provider = embedding_provider
        self._retry_policy = retry_policy or RetryPolicy()

    def derive(self, display_name: str) -> str:
        return derive_namespace(display_name)

    async def allocate(self, display_name: str) -> str:
        """Derive the namespace for *display_name* and create it.

        Raises
        ------
        ValidationError
            If the derived name is empty.
        ConflictError
            If the namespace already exists.  The existing namespace is
            left untouched.
        UpstreamError
            If the vector index cannot be reached.
        """
        namespace = derive_namespace(display_name)

        existing = await call_upstream(
            "list_namespaces",
            self._vector_index.list_namespaces,
            self._retry_policy,
        )
        if namespace in existing:
            logger.warning(
                "namespace_conflict",
                display_name=display_name,
                namespace=namespace,
            )
            raise ConflictError(
                message=f"Index with name {namespace} already exists",
                provider_name=self._vector_index.get_provider_name(),
            )

        dimension = self._embedding_provider.get_dimension()
        await call_upstream(
            "create_namespace",
            lambda: self._vector_index.create_namespace(namespace, dimension),
            self._retry_policy,
        )
        logger.info(
            "namespace_allocated",
            display_name=display_name,
            namespace=namespace,
            dimension=dimension,
        )
        return namespace

    async def release(self, namespace: str) -> bool:
        """Delete *namespace*; returns ``False`` if it did not exist."""
        removed = await call_upstream(
            "delete_namespace",
            lambda: self._vector_index.delete_namespace(namespace),
            self._retry_policy,
        )
        logger.info("namespace_released", namespace=namespace, removed=removed)
        return removed

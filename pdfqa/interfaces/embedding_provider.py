"""Abstract base class for text-embedding service providers.

Defines the contract for generating embedding vectors from text.
Implementations may wrap OpenAI ``text-embedding-ada-002`` or any other
embedding backend; the pipelines only ever see this interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementation: OpenAIEmbeddingProvider (pdfqa/providers/embedding/)
class IEmbeddingProvider(ABC):
    """Contract for text-embedding services used by both pipelines.

    Page vectors produced here are stored through
    :class:`~pdfqa.interfaces.vector_index_provider.IVectorIndexProvider`;
    query vectors are searched against them, so both must come from the
    same provider instance (same model, same dimension).
    """

    @abstractmethod
    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for a batch of texts.

        Returns
        -------
        list[list[float]]
            Vectors corresponding positionally to *texts*, each of length
            :meth:`get_dimension`.

        Raises
        ------
        pdfqa.utils.errors.UpstreamError
            If the embedding API call fails.
        """

    @abstractmethod
    async def embed_single(self, text: str) -> list[float]:
        """Generate an embedding vector for a single text string."""

    @abstractmethod
    def get_dimension(self) -> int:
        """Return the dimensionality of the embedding vectors.

        Constant for the lifetime of the provider; namespaces are created
        with this dimension.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"openai_embedding"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured (credentials present)."""

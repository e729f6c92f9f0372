"""OpenAI-compatible embedding provider adapter.

Wraps the ``openai`` async client to implement :class:`IEmbeddingProvider`.
Supports both real OpenAI and OpenAI-compatible providers via a custom
``base_url`` and model name.
"""

from __future__ import annotations

import openai
import structlog

from pdfqa.config.settings import Settings
from pdfqa.interfaces.embedding_provider import IEmbeddingProvider
from pdfqa.providers.openai_errors import to_upstream_error
from pdfqa.utils.errors import UpstreamError

logger = structlog.get_logger(logger_name=__name__)

_OPENAI_BATCH_LIMIT = 2048

# Known embedding model dimensions.
_MODEL_DIMENSIONS: dict[str, int] = {
    "text-embedding-ada-002": 1536,
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "BAAI/bge-base-en-v1.5": 768,
    "BAAI/bge-large-en-v1.5": 1024,
}

_DEFAULT_MODEL = "text-embedding-ada-002"

# The embeddings endpoint rejects empty strings; blank pages are embedded
# as a single space so that every page keeps a vector.
_BLANK_PLACEHOLDER = " "


class OpenAIEmbeddingProvider(IEmbeddingProvider):
    """Embedding provider backed by an OpenAI-compatible embeddings API.

    Uses ``text-embedding-ada-002`` (1536 dims) by default.  Inputs larger
    than the per-call limit are split into batches transparently.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._api_key = settings.openai_api_key

        client_kwargs: dict = {
            "api_key": self._api_key or "unset",
            # Retries are owned by pdfqa.utils.retry.
            "max_retries": 0,
        }
        if settings.openai_base_url:
            client_kwargs["base_url"] = settings.openai_base_url

        self._client = openai.AsyncOpenAI(**client_kwargs)
        self._model = settings.openai_embedding_model or _DEFAULT_MODEL
        self._dimension = _MODEL_DIMENSIONS.get(self._model, 1536)
        self._provider_label = (
            "openai-compatible_embedding" if settings.openai_base_url else "openai_embedding"
        )

    # ------------------------------------------------------------------
    # IEmbeddingProvider implementation
    # ------------------------------------------------------------------

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for a batch of texts."""
        if not texts:
            return []

        texts = [t if t.strip() else _BLANK_PLACEHOLDER for t in texts]

        try:
            all_embeddings: list[list[float]] = []
            for start in range(0, len(texts), _OPENAI_BATCH_LIMIT):
                batch = texts[start : start + _OPENAI_BATCH_LIMIT]
                response = await self._client.embeddings.create(
                    input=batch,
                    model=self._model,
                )
                all_embeddings.extend(item.embedding for item in response.data)
                logger.info(
                    "openai_embedding_batch",
                    model=self._model,
                    provider=self._provider_label,
                    batch_size=len(batch),
                    tokens=response.usage.total_tokens if response.usage else None,
                )
        except openai.APIError as exc:
            raise to_upstream_error(exc, self._provider_label, self.get_provider_name()) from exc

        if len(all_embeddings) != len(texts):
            raise UpstreamError(
                message=(
                    f"{self._provider_label} returned {len(all_embeddings)} vectors "
                    f"for {len(texts)} inputs"
                ),
                provider_name=self.get_provider_name(),
            )
        return all_embeddings

    async def embed_single(self, text: str) -> list[float]:
        """Generate an embedding vector for a single text string."""
        result = await self.embed([text])
        return result[0]

    def get_dimension(self) -> int:
        return self._dimension

    def get_provider_name(self) -> str:
        return self._provider_label

    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured."""
        return bool(self._api_key)

    async def close(self) -> None:
        """Release the underlying HTTP connection pool."""
        await self._client.close()

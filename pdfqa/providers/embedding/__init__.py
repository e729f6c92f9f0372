"""Embedding provider implementations.

Embeddings convert page text and queries into numeric vectors that capture
semantic meaning.  Page vectors are stored in the vector index; query
vectors are used for top-K similarity search.

    OpenAIEmbeddingProvider -- text-embedding-ada-002 (1536 dims) by default.
        Also works against any OpenAI-compatible embeddings endpoint.
"""

from pdfqa.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

__all__ = ["OpenAIEmbeddingProvider"]

"""Vector index provider implementations.

ChromaDB is the sole vector index implementation.  Each document gets its
own collection (namespace) holding one cosine-indexed vector per page.
Data persists at CHROMADB_PERSIST_DIR (default: ./data/chromadb).
"""

from pdfqa.providers.vector_index.chromadb_provider import ChromaDBIndexProvider

__all__ = ["ChromaDBIndexProvider"]

"""Public interface definitions for all external collaborators.

Every external service in pdfqa is accessed exclusively through the
abstract base classes defined in this package.  Concrete adapters live in
``pdfqa/providers/`` and are constructed once at startup in
``pdfqa/main.py``, then injected into the services.

    Interface              →  Concrete implementation
    ────────────────────────────────────────────────────
    IEmbeddingProvider     →  OpenAIEmbeddingProvider
    ICompletionProvider    →  OpenAICompletionProvider
    IVectorIndexProvider   →  ChromaDBIndexProvider
    IDocumentStore         →  SQLiteDocumentStore
    IBlobStore             →  LocalBlobStore
"""

from pdfqa.interfaces.blob_store import IBlobStore
from pdfqa.interfaces.completion_provider import ICompletionProvider
from pdfqa.interfaces.document_store import IDocumentStore
from pdfqa.interfaces.embedding_provider import IEmbeddingProvider
from pdfqa.interfaces.vector_index_provider import IVectorIndexProvider

__all__ = [
    "IBlobStore",
    "ICompletionProvider",
    "IDocumentStore",
    "IEmbeddingProvider",
    "IVectorIndexProvider",
]

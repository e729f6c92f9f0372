"""Document record persistence.

SQLiteDocumentStore keeps one row per uploaded PDF in data/documents.db:
display name, source location, namespace and the ``processed`` flag.
"""

from pdfqa.providers.document_store.sqlite_document_store import SQLiteDocumentStore

__all__ = ["SQLiteDocumentStore"]

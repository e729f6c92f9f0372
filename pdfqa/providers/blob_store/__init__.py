"""Original-document byte storage.

LocalBlobStore writes uploads under BLOB_STORAGE_DIR and hands back
``file://`` locations; it can also read ``http(s)://`` locations.
"""

from pdfqa.providers.blob_store.local_blob_store import LocalBlobStore

__all__ = ["LocalBlobStore"]

"""Abstract base class for original-document byte storage.

The blob store owns uploaded bytes; documents reference them by a
``source_location`` URI rather than copying them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementation: LocalBlobStore (pdfqa/providers/blob_store/)
class IBlobStore(ABC):
    """Contract for storing and fetching original document bytes."""

    @abstractmethod
    async def put(self, name: str, data: bytes) -> str:
        """Store *data* under *name* and return its ``source_location`` URI.

        Raises
        ------
        pdfqa.utils.errors.UpstreamError
            If the bytes cannot be written.
        """

    @abstractmethod
    async def fetch(self, location: str) -> bytes:
        """Return the bytes stored at *location*.

        Raises
        ------
        pdfqa.utils.errors.FetchError
            If the location cannot be read or returns a non-success status.
        """

    @abstractmethod
    async def delete(self, location: str) -> bool:
        """Remove the bytes at *location*; return ``True`` if they existed."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"local_blob"``."""

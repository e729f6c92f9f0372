"""Filesystem-backed blob store.

Uploaded bytes are written under ``BLOB_STORAGE_DIR`` with a generated key
and addressed by a short ``blob://<key>`` location, which keeps
``source_location`` well inside the document field limit regardless of
where the storage directory lives.  ``fetch`` also accepts absolute
``file://`` locations and remote ``http(s)://`` locations (read through the
injected ``httpx.AsyncClient``).
"""

from __future__ import annotations

import asyncio
import uuid
from pathlib import Path
from urllib.parse import unquote, urlparse

import httpx
import structlog

from pdfqa.interfaces.blob_store import IBlobStore
from pdfqa.utils.errors import FetchError, UpstreamError

logger = structlog.get_logger(logger_name=__name__)

BLOB_SCHEME = "blob://"


class LocalBlobStore(IBlobStore):
    """Stores original document bytes on local disk.

    The ``httpx.AsyncClient`` is injected for testability and shared
    connection pooling; it is only used for ``http(s)://`` locations.  Disk
    reads and writes run in a worker thread.
    """

    def __init__(self, root_dir: str | Path, http_client: httpx.AsyncClient) -> None:
        self._root = Path(root_dir)
        self._http = http_client

    async def put(self, name: str, data: bytes) -> str:
        suffix = Path(name).suffix.lower()[:8]
        key = f"{uuid.uuid4().hex}{suffix}"
        try:
            await asyncio.to_thread(self._write, key, data)
        except OSError as exc:
            raise UpstreamError(
                message=f"Could not store '{name}': {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        location = f"{BLOB_SCHEME}{key}"
        logger.info("blob_stored", name=name, location=location, size_bytes=len(data))
        return location

    async def fetch(self, location: str) -> bytes:
        if location.startswith(("http://", "https://")):
            return await self._fetch_remote(location)

        path = self._resolve(location)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as exc:
            logger.warning("blob_fetch_failed", location=location, error=str(exc))
            raise FetchError(provider_name=self.get_provider_name()) from exc

    async def delete(self, location: str) -> bool:
        try:
            path = self._resolve(location)
        except FetchError:
            return False
        if not path.is_file():
            return False
        await asyncio.to_thread(path.unlink)
        logger.info("blob_deleted", location=location)
        return True

    def get_provider_name(self) -> str:
        return "local_blob"

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _write(self, key: str, data: bytes) -> None:
        self._root.mkdir(parents=True, exist_ok=True)
        (self._root / key).write_bytes(data)

    def _resolve(self, location: str) -> Path:
        if location.startswith(BLOB_SCHEME):
            key = location[len(BLOB_SCHEME):]
            if not key or "/" in key or "\\" in key or key in (".", ".."):
                raise FetchError(
                    message=f"Invalid blob location: {location}",
                    provider_name=self.get_provider_name(),
                )
            return self._root / key
        if location.startswith("file://"):
            return Path(unquote(urlparse(location).path))
        raise FetchError(
            message=f"Unsupported source location: {location}",
            provider_name=self.get_provider_name(),
        )

    async def _fetch_remote(self, url: str) -> bytes:
        try:
            response = await self._http.get(url, follow_redirects=True)
        except httpx.HTTPError as exc:
            logger.warning("blob_fetch_failed", location=url, error=str(exc))
            raise FetchError(provider_name=self.get_provider_name()) from exc

        if not response.is_success:
            logger.warning("blob_fetch_failed", location=url, status=response.status_code)
            raise FetchError(provider_name=self.get_provider_name())
        return response.content

"""pdfqa FastAPI application entry point.

Wires together all providers, services, and routes via dependency injection.
Loads configuration from ``.env`` and ``config/config.yaml`` and configures
structured logging.  Every client object (httpx, OpenAI, ChromaDB) is built
once in :func:`build_components` and closed again when the app shuts down.

:func:`build_components` is also used by the CLI (``python -m pdfqa.cli``)
so both entry points run the exact same pipeline wiring.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from pdfqa import __version__
from pdfqa.api.middleware import RequestLoggingMiddleware, configure_cors, register_error_handlers
from pdfqa.api.routes import router as api_router
from pdfqa.config.loader import load_config
from pdfqa.config.settings import Settings
from pdfqa.providers.blob_store.local_blob_store import LocalBlobStore
from pdfqa.providers.document_store.sqlite_document_store import SQLiteDocumentStore
from pdfqa.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from pdfqa.providers.llm.openai_provider import OpenAICompletionProvider
from pdfqa.providers.vector_index.chromadb_provider import ChromaDBIndexProvider
from pdfqa.services.document_service import DocumentService
from pdfqa.services.ingestion.ingestion_service import IngestionService
from pdfqa.services.ingestion.pdf_extractor import PDFTextExtractor
from pdfqa.services.namespace_allocator import NamespaceAllocator
from pdfqa.services.qa_service import QAService
from pdfqa.utils.errors import ConfigurationError, UpstreamError
from pdfqa.utils.locks import KeyedLock
from pdfqa.utils.logging import configure_logging, get_logger
from pdfqa.utils.retry import RetryPolicy

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings=settings)

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


def _positive_int(section: dict, key: str, default: int) -> int:
    """Read a positive integer tuning value, rejecting anything else."""
    value = section.get(key, default)
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(message=f"{key} must be an integer, got {value!r}") from exc
    if number < 1:
        raise ConfigurationError(message=f"{key} must be at least 1, got {number}")
    return number


# ---------------------------------------------------------------------------
# Full DI assembly
# ---------------------------------------------------------------------------


def build_components(app_settings: Settings, app_config: dict) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    retry_policy = RetryPolicy.from_config(app_config.get("upstream", {}))
    completion_config = app_config.get("completion", {})
    embed_concurrency = _positive_int(app_config.get("ingestion", {}), "embed_concurrency", 4)
    max_tokens = _positive_int(completion_config, "max_tokens", 500)

    # -- Shared resources --
    http_client = httpx.AsyncClient(timeout=retry_policy.timeout)

    # -- External providers --
    embedding = OpenAIEmbeddingProvider(settings=app_settings)
    completion = OpenAICompletionProvider(settings=app_settings, timeout=retry_policy.timeout)
    vector_index = ChromaDBIndexProvider(
        persist_directory=app_settings.chromadb_persist_dir,
        collection_prefix=app_settings.chromadb_collection_prefix,
    )
    document_store = SQLiteDocumentStore(db_path=app_settings.document_db_path)
    blob_store = LocalBlobStore(root_dir=app_settings.blob_storage_dir, http_client=http_client)

    # -- Services --
    extractor = PDFTextExtractor(
        token_separator=app_config.get("extractor", {}).get("token_separator", ""),
    )
    allocator = NamespaceAllocator(
        vector_index=vector_index,
        embedding_provider=embedding,
        retry_policy=retry_policy,
    )
    ingestion_service = IngestionService(
        document_store=document_store,
        blob_store=blob_store,
        extractor=extractor,
        embedding_provider=embedding,
        vector_index=vector_index,
        retry_policy=retry_policy,
        embed_concurrency=embed_concurrency,
        locks=KeyedLock(),
    )
    qa_service = QAService(
        document_store=document_store,
        embedding_provider=embedding,
        vector_index=vector_index,
        completion_provider=completion,
        retry_policy=retry_policy,
        temperature=float(completion_config.get("temperature", 0.0)),
        max_tokens=max_tokens,
    )
    document_service = DocumentService(
        document_store=document_store,
        blob_store=blob_store,
        allocator=allocator,
        max_upload_bytes=app_settings.max_upload_bytes,
        retry_policy=retry_policy,
    )

    return {
        "settings": app_settings,
        "http_client": http_client,
        "embedding": embedding,
        "completion": completion,
        "vector_index": vector_index,
        "document_store": document_store,
        "blob_store": blob_store,
        "document_service": document_service,
        "ingestion_service": ingestion_service,
        "qa_service": qa_service,
    }


async def close_components(components: dict[str, Any]) -> None:
    """Release the HTTP connection pools held by the shared clients."""
    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    await components["embedding"].close()
    await components["completion"].close()


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise all providers and services on startup, clean up on shutdown."""
    components = build_components(settings, config)

    for key, value in components.items():
        setattr(application.state, key, value)

    # An unreachable store is reported by /health; requests that need it
    # fail with UpstreamError until it comes back.
    try:
        await components["document_store"].initialize()
    except UpstreamError as exc:
        _logger.error("document_store_unavailable", error=str(exc))

    if not settings.openai_api_key:
        _logger.warning("openai_not_configured", message="OPENAI_API_KEY is not set")

    _logger.info(
        "app_startup",
        version=__version__,
        environment=settings.app_env,
        embedding=components["embedding"].get_provider_name(),
        completion=components["completion"].get_provider_name(),
        vector_index=components["vector_index"].get_provider_name(),
    )

    yield

    # -- Shutdown: close shared clients --
    await close_components(components)
    _logger.info("app_shutdown", message="HTTP clients closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="pdfqa API",
        version=__version__,
        description=(
            "Upload PDF documents, index every page as an embedding vector, "
            "and ask natural-language questions answered from the document's "
            "own pages."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    register_error_handlers(application)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)

    # -- API routes --
    application.include_router(api_router)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "pdfqa.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )

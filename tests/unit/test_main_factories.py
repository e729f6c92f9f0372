"""Unit tests for the DI assembly and app factory in pdfqa/main.py."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi import FastAPI

from pdfqa.config.loader import load_config
from pdfqa.config.settings import Settings


def _settings(tmp_path: Path, **overrides) -> Settings:
    defaults = {
        "openai_api_key": "sk-test",
        "openai_base_url": "",
        "chromadb_persist_dir": str(tmp_path / "chromadb"),
        "document_db_path": str(tmp_path / "documents.db"),
        "blob_storage_dir": str(tmp_path / "blobs"),
        "max_upload_bytes": 1234,
        "app_env": "test",
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


class TestBuildComponents:
    @pytest.mark.asyncio
    async def test_builds_every_component(self, tmp_path: Path) -> None:
        from pdfqa.main import build_components, close_components

        settings = _settings(tmp_path)
        components = build_components(settings, load_config(settings=settings))
        try:
            assert set(components) >= {
                "settings",
                "embedding",
                "completion",
                "vector_index",
                "document_store",
                "blob_store",
                "document_service",
                "ingestion_service",
                "qa_service",
            }
            assert components["settings"].max_upload_bytes == 1234
            assert components["vector_index"].get_provider_name() == "chromadb"
            assert components["document_store"].get_provider_name() == "sqlite"
            assert components["embedding"].get_provider_name() == "openai_embedding"
            assert components["completion"].get_provider_name() == "openai"
        finally:
            await close_components(components)

    @pytest.mark.asyncio
    async def test_compatible_endpoint(self, tmp_path: Path) -> None:
        from pdfqa.main import build_components, close_components

        settings = _settings(tmp_path, openai_base_url="http://localhost:9000/v1")
        components = build_components(settings, load_config(settings=settings))
        try:
            assert components["completion"].get_provider_name() == "openai-compatible"
        finally:
            await close_components(components)

    @pytest.mark.parametrize(
        ("section", "key", "value"),
        [
            ("ingestion", "embed_concurrency", 0),
            ("ingestion", "embed_concurrency", "many"),
            ("completion", "max_tokens", -5),
        ],
    )
    def test_rejects_invalid_tuning(self, tmp_path: Path, section: str, key: str, value) -> None:
        from pdfqa.main import build_components
        from pdfqa.utils.errors import ConfigurationError

        settings = _settings(tmp_path)
        app_config = load_config(settings=settings)
        app_config[section] = {**app_config.get(section, {}), key: value}

        with pytest.raises(ConfigurationError, match=key):
            build_components(settings, app_config)


class TestCreateApp:
    def test_routes_registered(self) -> None:
        from pdfqa.main import create_app

        app = create_app()

        assert isinstance(app, FastAPI)
        paths = {route.path for route in app.routes}
        assert {
            "/api/v1/documents",
            "/api/v1/documents/upload",
            "/api/v1/documents/process",
            "/api/v1/documents/query",
            "/api/v1/health",
        } <= paths

"""Application settings loaded from environment variables via pydantic-settings.

Configuration is read from two sources, in priority order:

  1. Environment variables -- e.g. ``OPENAI_API_KEY=sk-abc123``
  2. ``.env`` file in the working directory (local development)

Field ``openai_api_key`` maps to env var ``OPENAI_API_KEY`` and so on.
Defaults apply when neither source defines a value.  The ``.env`` file is
never committed; ``.env.example`` lists the available variables.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """pdfqa application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # === Embedding / completion service ===
    # Empty key = "not configured"; /health reports the providers as unavailable.
    openai_api_key: str = ""
    openai_base_url: str = ""  # OpenAI-compatible endpoint (TogetherAI, Azure proxy, ...)
    openai_embedding_model: str = "text-embedding-ada-002"
    openai_completion_model: str = "gpt-4o-mini"

    # === Vector index ===
    chromadb_persist_dir: str = "./data/chromadb"
    # Every namespace is stored as the collection "<prefix><namespace>".
    chromadb_collection_prefix: str = "pdfqa-"

    # === Document store ===
    document_db_path: str = "data/documents.db"

    # === Blob storage ===
    blob_storage_dir: str = "data/blobs"
    max_upload_bytes: int = 25 * 1024 * 1024

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

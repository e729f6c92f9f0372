"""YAML configuration loader with environment variable overrides.

Configuration is loaded in layers (later layers override earlier):

  1. Built-in defaults  -- ``DEFAULT_CONFIG`` below
  2. config/config.yaml -- static tuning checked into the repo
  3. .env / environment -- via :class:`~pdfqa.config.settings.Settings`

The YAML file holds tuning knobs (upstream deadlines and retry policy,
embedding fan-out, completion parameters, extractor separator); the
environment supplies credentials, paths and the app/logging section.
"""

from __future__ import annotations

import copy
from pathlib import Path

import yaml

from pdfqa.config.settings import Settings

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent.parent / "config" / "config.yaml"

DEFAULT_CONFIG: dict = {
    "upstream": {
        "timeout_seconds": 30.0,
        "max_attempts": 3,
        "backoff_seconds": 0.5,
    },
    "ingestion": {
        "embed_concurrency": 4,
    },
    "completion": {
        "max_tokens": 500,
        "temperature": 0.0,
    },
    "extractor": {
        "token_separator": "",
    },
}


def load_config(path: str | Path | None = None, settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.  Defaults to the
              repository's ``config/config.yaml``; a missing file is not an error.
        settings: Settings instance to take overrides from.  A fresh one is
                  built from the environment when omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f) or {}
        _deep_merge(config, yaml_config)

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "openai": {
            "configured": bool(settings.openai_api_key),
            "embedding_model": settings.openai_embedding_model,
            "completion_model": settings.openai_completion_model,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(config, env_overrides)
    return config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value

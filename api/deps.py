"""
Module 10 - API Dependencies

Dependency injection for the API.
Provides the runtime config loader and the per-app ledger.
"""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import Request

from core.config.runtime import RuntimeConfig
from orchestrator.ledger import Ledger

logger = logging.getLogger(__name__)


CONFIG_SEARCH_PATHS = (
    Path("idstate.yaml"),
    Path(".idstate.yaml"),
    Path.home() / ".config" / "idstate" / "config.yaml",
)


def load_runtime_config() -> RuntimeConfig:
    """Load RuntimeConfig from a YAML file, then overlay environment variables.

    Search order for config file:
      1. ./idstate.yaml
      2. ./.idstate.yaml
      3. ~/.config/idstate/config.yaml

    Environment variables ALWAYS override config file values.
    The .env file is loaded automatically by core.config.runtime on import.
    """
    config: RuntimeConfig | None = None

    for path in CONFIG_SEARCH_PATHS:
        if path.exists():
            config = RuntimeConfig.from_yaml(path)
            logger.info(f"Loaded config from {path}")
            break

    if config is None:
        # No config file found, start with defaults
        config = RuntimeConfig()

    return config.with_env_overrides()


def get_ledger(request: Request) -> Ledger:
    """The ledger the application was created with."""
    return request.app.state.ledger

"""
Runtime Configuration

Central configuration for the tree, the root history, the registry and the
HTTP service.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


ENV_PREFIX = "IDSTATE_"


@dataclass
class TreeConfig:
    """Configuration for the global identity state tree."""
    max_depth: int = 64


@dataclass
class HistoryConfig:
    """Configuration for root / state history paging."""
    page_limit: int = 1000


@dataclass
class RegistryConfig:
    """Configuration for identity types and registry ownership."""
    default_id_type: str = "0x0212"
    supported_id_types: list[str] = field(default_factory=list)
    owner: str = "owner"

    def all_id_types(self) -> list[str]:
        """Default id type followed by any extra supported types, lower-cased and deduplicated."""
        seen: list[str] = []
        for id_type in [self.default_id_type, *self.supported_id_types]:
            normalized = id_type.lower()
            if normalized not in seen:
                seen.append(normalized)
        return seen


@dataclass
class ApiConfig:
    """Configuration for the HTTP service."""
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration for the identity state registry.

    Can be loaded from:
    - Environment variables
    - YAML file
    - Programmatic construction
    """
    tree: TreeConfig = field(default_factory=TreeConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        This is the SINGLE source of truth for all env var reading.

        Supported variables:
        - IDSTATE_SMT_MAX_DEPTH: Max depth of the state tree
        - IDSTATE_HISTORY_PAGE_LIMIT: Max entries per history page
        - IDSTATE_DEFAULT_ID_TYPE: Default identity type (hex, e.g. 0x0212)
        - IDSTATE_SUPPORTED_ID_TYPES: Extra identity types, comma separated
        - IDSTATE_OWNER: Registry owner identifier
        - IDSTATE_LOG_LEVEL: Logging level of the HTTP service
        """
        overrides: dict[str, Any] = {}

        if os.getenv(f"{ENV_PREFIX}SMT_MAX_DEPTH"):
            overrides.setdefault("tree", {})["max_depth"] = int(os.environ[f"{ENV_PREFIX}SMT_MAX_DEPTH"])

        if os.getenv(f"{ENV_PREFIX}HISTORY_PAGE_LIMIT"):
            overrides.setdefault("history", {})["page_limit"] = int(
                os.environ[f"{ENV_PREFIX}HISTORY_PAGE_LIMIT"]
            )

        if os.getenv(f"{ENV_PREFIX}DEFAULT_ID_TYPE"):
            overrides.setdefault("registry", {})["default_id_type"] = os.environ[
                f"{ENV_PREFIX}DEFAULT_ID_TYPE"
            ]
        if os.getenv(f"{ENV_PREFIX}SUPPORTED_ID_TYPES"):
            overrides.setdefault("registry", {})["supported_id_types"] = [
                t.strip() for t in os.environ[f"{ENV_PREFIX}SUPPORTED_ID_TYPES"].split(",") if t.strip()
            ]
        if os.getenv(f"{ENV_PREFIX}OWNER"):
            overrides.setdefault("registry", {})["owner"] = os.environ[f"{ENV_PREFIX}OWNER"]

        if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
            overrides.setdefault("api", {})["log_level"] = os.environ[f"{ENV_PREFIX}LOG_LEVEL"].upper()

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """
        Load configuration purely from environment variables.

        Uses defaults for any values not specified in env vars.
        """
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        tree_data = data.get("tree", {})
        history_data = data.get("history", {})
        registry_data = data.get("registry", {})
        api_data = data.get("api", {})

        tree = TreeConfig(**tree_data) if tree_data else TreeConfig()
        history = HistoryConfig(**history_data) if history_data else HistoryConfig()
        registry = RegistryConfig(**registry_data) if registry_data else RegistryConfig()
        api = ApiConfig(**api_data) if api_data else ApiConfig()

        return cls(
            tree=tree,
            history=history,
            registry=registry,
            api=api,
            extra=data.get("extra", {}),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)
        for section, values in overrides.items():
            target = getattr(new_config, section)
            for key, value in values.items():
                setattr(target, key, value)

        return new_config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "tree": {
                "max_depth": self.tree.max_depth,
            },
            "history": {
                "page_limit": self.history.page_limit,
            },
            "registry": {
                "default_id_type": self.registry.default_id_type,
                "supported_id_types": list(self.registry.supported_id_types),
                "owner": self.registry.owner,
            },
            "api": {
                "host": self.api.host,
                "port": self.api.port,
                "log_level": self.api.log_level,
            },
            "extra": self.extra,
        }

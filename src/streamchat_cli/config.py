"""Configuration manager for the streamchat CLI/TUI.

Handles loading, merging, and persisting configuration from two levels:
- **Global**: ``~/.streamchat/config.yaml`` -- user-wide defaults
- **Project**: ``.streamchat/config.yaml`` -- per-project overrides

Project values deep-merge over global values. ``STREAMCHAT_*`` environment
variables win over both files, and explicit overrides (CLI flags) win over
everything.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from streamchat.config import DEFAULT_WEBHOOK_URL, StreamchatConfig

logger = logging.getLogger(__name__)

# Directories and file names
GLOBAL_DIR = Path.home() / ".streamchat"
GLOBAL_CONFIG_PATH = GLOBAL_DIR / "config.yaml"
PROJECT_DIR_NAME = ".streamchat"
PROJECT_CONFIG_NAME = "config.yaml"

ENV_PREFIX = "STREAMCHAT_"


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (mutates *base*)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def _project_config_path(project_dir: Path | None = None) -> Path:
    root = project_dir or Path.cwd()
    return root / PROJECT_DIR_NAME / PROJECT_CONFIG_NAME


class ConfigManager:
    """Loads, merges, and persists streamchat configuration.

    Usage::

        mgr = ConfigManager()
        config = mgr.load(overrides={"transport": "echo"})
    """

    def __init__(self, project_dir: Path | None = None) -> None:
        self._project_dir = project_dir or Path.cwd()
        self._config: StreamchatConfig | None = None

    # -- Public API -----------------------------------------------------------

    @property
    def config(self) -> StreamchatConfig | None:
        """The currently loaded config, or None."""
        return self._config

    @property
    def global_config_path(self) -> Path:
        return GLOBAL_CONFIG_PATH

    @property
    def project_config_path(self) -> Path:
        return _project_config_path(self._project_dir)

    def config_files(self) -> list[Path]:
        """Config files that exist, lowest precedence first."""
        return [p for p in (self.global_config_path, self.project_config_path) if p.exists()]

    def load(self, overrides: dict[str, Any] | None = None) -> StreamchatConfig:
        """Load the layered configuration.

        *overrides* entries whose value is ``None`` are ignored, so unset CLI
        flags can be passed straight through.
        """
        data = self._load_file_values()
        for key in list(data):
            if os.environ.get(f"{ENV_PREFIX}{key.upper()}"):
                # Environment beats files.
                del data[key]
        if overrides:
            data.update({k: v for k, v in overrides.items() if v is not None})

        config = StreamchatConfig(**data)
        self._config = config
        logger.debug(
            "Loaded config (transport=%s, webhook_url=%s)", config.transport, config.webhook_url
        )
        return config

    def save_global(self, config_data: dict[str, Any]) -> Path:
        """Write configuration to the global config file."""
        path = self.global_config_path
        path.parent.mkdir(parents=True, exist_ok=True)
        self._write_yaml(path, config_data)
        logger.info("Saved global config to %s", path)
        return path

    def save_project(self, config_data: dict[str, Any]) -> Path:
        """Write configuration to the project config file."""
        path = self.project_config_path
        path.parent.mkdir(parents=True, exist_ok=True)
        self._write_yaml(path, config_data)
        logger.info("Saved project config to %s", path)
        return path

    def build_default_config(
        self,
        *,
        webhook_url: str = DEFAULT_WEBHOOK_URL,
        transport: str = "webhook",
    ) -> dict[str, Any]:
        """Build a starter config dict suitable for saving."""
        defaults = StreamchatConfig.model_fields
        return {
            "webhook_url": webhook_url,
            "transport": transport,
            "chunk_size": defaults["chunk_size"].default,
            "word_delay_ms": defaults["word_delay_ms"].default,
            "request_timeout": defaults["request_timeout"].default,
        }

    # -- Internal helpers -----------------------------------------------------

    def _load_file_values(self) -> dict[str, Any]:
        """Read and deep-merge global + project config files."""
        merged: dict[str, Any] = {}
        for path in self.config_files():
            data = self._read_yaml(path)
            if data:
                _deep_merge(merged, data)
        known = StreamchatConfig.model_fields
        unknown = sorted(set(merged) - set(known))
        if unknown:
            logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))
        return {k: v for k, v in merged.items() if k in known}

    @staticmethod
    def _read_yaml(path: Path) -> dict[str, Any] | None:
        """Read a YAML mapping, returning None when the file is unusable."""
        try:
            raw = path.read_text(encoding="utf-8")
            data = yaml.safe_load(raw) or {}
        except (OSError, yaml.YAMLError):
            logger.warning("Failed to read config file: %s", path, exc_info=True)
            return None
        if not isinstance(data, dict):
            logger.warning("Config file %s does not contain a mapping", path)
            return None
        return data

    @staticmethod
    def _write_yaml(path: Path, data: dict[str, Any]) -> None:
        content = yaml.dump(
            data,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
        path.write_text(content, encoding="utf-8")

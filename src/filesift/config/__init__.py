"""Configuration management for filesift.

Settings live in ``~/.filesift/config.yaml``. Effective values are resolved
from built-in defaults, then the file, then ``FILESIFT__SECTION__KEY``
environment variables, then dotted CLI overrides.
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import (
    ClassificationOptions,
    CLIOptions,
    FilesiftConfig,
    LoggingSettings,
    ScanOptions,
)
from .resolver import ENV_PREFIX, flatten_for_env, overrides_from_env, resolve_with_precedence

DEFAULT_CONFIG_PATH = Path("~/.filesift/config.yaml")
_HEADER_LINES = (
    "# filesift configuration file",
    "# Edit with `filesift config edit` or update one key with `filesift config set`.",
)


def render_config(data: Mapping[str, Any]) -> str:
    """Serialize configuration data with the standard header and a timestamp."""
    stamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    header = "\n".join((*_HEADER_LINES, f"# Last updated: {stamp}"))
    return f"{header}\n{yaml.safe_dump(dict(data), sort_keys=False)}"


class ConfigManager:
    """Read, resolve, and persist the filesift configuration file.

    Args:
        config_path: Location of the YAML file; defaults to ``~/.filesift/config.yaml``.
        env: Environment mapping consulted for overrides; defaults to ``os.environ``.
    """

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = os.environ if env is None else env

    @property
    def config_path(self) -> Path:
        return self._config_path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = True,
        env_overrides: Mapping[str, str] | None = None,
    ) -> FilesiftConfig:
        """Return the effective configuration.

        Args:
            cli_overrides: Dotted-key overrides with the highest precedence.
            include_env: Whether environment variables are consulted.
            ensure_file: Whether a default file is written when none exists.
            env_overrides: Environment mapping used instead of the manager's own.

        Raises:
            ConfigError: If the file is unreadable or any value is invalid.
        """
        if ensure_file:
            self.ensure_exists()

        env_layer = None
        if include_env:
            env_layer = overrides_from_env(self._env if env_overrides is None else env_overrides)

        return resolve_with_precedence(
            defaults=FilesiftConfig(),
            file_overrides=self.load_file_overrides(),
            env_overrides=env_layer,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return the raw mapping stored on disk, or an empty mapping when absent.

        Raises:
            ConfigError: If the file is not valid YAML or not a mapping.
        """
        text = self.read_text()
        if not text:
            return {}
        try:
            raw = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file: {exc}") from exc
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")
        return raw

    def save(self, config: FilesiftConfig | Mapping[str, Any]) -> None:
        """Write ``config`` to disk, replacing the previous contents."""
        if isinstance(config, FilesiftConfig):
            data: Mapping[str, Any] = config.model_dump(mode="python")
        else:
            data = config
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        self._config_path.write_text(render_config(data), encoding="utf-8")

    def ensure_exists(self) -> Path:
        """Write the default configuration if no file exists yet."""
        if not self._config_path.exists():
            self.save(FilesiftConfig())
        return self._config_path

    def read_text(self) -> str:
        if not self._config_path.exists():
            return ""
        return self._config_path.read_text(encoding="utf-8")


__all__ = [
    "CLIOptions",
    "ClassificationOptions",
    "ConfigError",
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "ENV_PREFIX",
    "FilesiftConfig",
    "LoggingSettings",
    "ScanOptions",
    "flatten_for_env",
    "overrides_from_env",
    "render_config",
    "resolve_with_precedence",
]

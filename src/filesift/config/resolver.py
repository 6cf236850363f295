"""Configuration resolution helpers."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Dict, Iterator, Mapping

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import FilesiftConfig

ENV_PREFIX = "FILESIFT__"


def resolve_with_precedence(
    *,
    defaults: FilesiftConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> FilesiftConfig:
    """Layer override sources on top of ``defaults`` and validate the result.

    Sources are applied in order file, environment, CLI; later layers win.
    Keys may be nested mappings or dotted paths such as
    ``classification.batch_size``.

    Raises:
        ConfigError: If a source is malformed or the merged values fail validation.
    """
    layers = (
        ("file", file_overrides),
        ("environment", env_overrides),
        ("cli", cli_overrides),
    )
    merged = defaults.model_dump(mode="python")
    for source_name, source in layers:
        if source:
            merged = _deep_merge(merged, _expand(source, source_name))

    try:
        return FilesiftConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def overrides_from_env(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``FILESIFT__SECTION__KEY`` variables as dotted override keys.

    Values are parsed as YAML scalars so ``"false"`` and ``"10"`` arrive typed.
    """
    overrides: dict[str, Any] = {}
    for key, raw in env.items():
        if not key.startswith(ENV_PREFIX):
            continue
        segments = [part.lower() for part in key[len(ENV_PREFIX) :].split("__") if part]
        if not segments:
            continue
        try:
            value: Any = yaml.safe_load(raw)
        except yaml.YAMLError:
            value = raw
        overrides[".".join(segments)] = value
    return overrides


def flatten_for_env(config: FilesiftConfig) -> Dict[str, str]:
    """Render every leaf setting as a ``FILESIFT__SECTION__KEY`` variable."""
    return {
        ENV_PREFIX + "__".join(part.upper() for part in path): _render_env_value(value)
        for path, value in _leaves(config.model_dump(mode="python"), ())
    }


def _leaves(
    data: Mapping[str, Any], prefix: tuple[str, ...]
) -> Iterator[tuple[tuple[str, ...], Any]]:
    for key, value in data.items():
        path = prefix + (str(key),)
        if isinstance(value, MappingABC):
            yield from _leaves(value, path)
        else:
            yield path, value


def _render_env_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return yaml.safe_dump(list(value), default_flow_style=True).strip()
    return str(value)


def _expand(source: Mapping[str, Any], source_name: str) -> dict[str, Any]:
    """Turn a mapping with dotted or nested keys into a nested dictionary."""
    label = source_name.capitalize()
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{label} overrides must be a mapping.")

    expanded: dict[str, Any] = {}
    for key, value in source.items():
        if not isinstance(key, str):
            raise ConfigError(f"{label} override keys must be strings.")
        *parents, leaf = key.split(".")
        node = expanded
        for segment in parents:
            child = node.setdefault(segment, {})
            if not isinstance(child, dict):
                raise ConfigError(f"{label} override for {key} conflicts with existing value.")
            node = child
        if isinstance(value, MappingABC):
            existing = node.get(leaf)
            base = existing if isinstance(existing, dict) else {}
            node[leaf] = _deep_merge(base, _expand(value, source_name))
        else:
            node[leaf] = value
    return expanded


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    result = deepcopy(dict(base))
    for key, value in overrides.items():
        current = result.get(key)
        if isinstance(value, MappingABC) and isinstance(current, MappingABC):
            result[key] = _deep_merge(current, value)
        else:
            result[key] = deepcopy(value)
    return result


__all__ = ["ENV_PREFIX", "flatten_for_env", "overrides_from_env", "resolve_with_precedence"]

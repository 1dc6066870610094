"""Layered TOML configuration for askuser.

Priority, highest first:
1. ``ASKUSER_*`` environment variables
2. ``<workspace>/.askuser/config.local.toml`` (per-machine, not committed)
3. ``<workspace>/.askuser/config.toml`` (project)
4. ``~/.askuser/config.toml`` (user)
"""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CONFIG_DIR = ".askuser"
ENV_PREFIX = "ASKUSER_"

# env var suffix -> dotted config key
ENV_KEYS = {
    "LOG_DIR": "log_dir",
    "LOG_LEVEL": "log_level",
    "SINGLE_QUESTION_VARIANT": "single_question_variant",
    "TAB_LABEL_WIDTH": "tab_label_width",
    "ALLOW_OTHER": "defaults.allow_other",
    "MULTI_SELECT": "defaults.multi_select",
    "REQUIRED": "defaults.required",
}


def lookup(data: Mapping[str, Any], key: str, default: Any = None) -> Any:
    """Resolve a dotted key such as ``defaults.required``."""
    current: Any = data
    for part in key.split("."):
        if not isinstance(current, Mapping) or current.get(part) is None:
            return default
        current = current[part]
    return current


def merge_into(base: dict[str, Any], updates: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge ``updates`` into ``base``; tables merge, scalars replace."""
    for key, value in updates.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), dict):
            merge_into(base[key], value)
        elif isinstance(value, Mapping):
            base[key] = merge_into({}, value)
        else:
            base[key] = value
    return base


@dataclass
class ConfigLayer:
    name: str
    path: Path | None
    data: dict[str, Any] = field(default_factory=dict)
    source: str = ""

    @classmethod
    def from_file(cls, path: Path) -> ConfigLayer:
        """A missing or unreadable file yields an empty layer."""
        data: dict[str, Any] = {}
        if path.exists():
            try:
                data = tomllib.loads(path.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
                logger.warning("Failed to load %s: %s", path, e)
        return cls(name=path.stem, path=path, data=data, source="file")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ConfigLayer:
        environ = os.environ if environ is None else environ
        data: dict[str, Any] = {}
        for suffix, key in ENV_KEYS.items():
            value = environ.get(ENV_PREFIX + suffix)
            if not value:
                continue
            *parents, leaf = key.split(".")
            table = data
            for part in parents:
                table = table.setdefault(part, {})
            table[leaf] = value
        return cls(name="environment", path=None, data=data, source="env")

    def get(self, key: str, default: Any = None) -> Any:
        return lookup(self.data, key, default)


class CascadingConfig:
    """All layers merged; later layers override earlier ones."""

    def __init__(
        self,
        workspace: Path | None = None,
        home: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ):
        self.workspace = workspace
        self.home = home or Path.home()
        self._environ = environ
        self.layers: list[ConfigLayer] = []
        self._merged: dict[str, Any] = {}
        self.reload()

    def layer_paths(self) -> list[Path]:
        """TOML files consulted, lowest priority first."""
        paths = [self.home / CONFIG_DIR / "config.toml"]
        if self.workspace:
            paths.append(self.workspace / CONFIG_DIR / "config.toml")
            paths.append(self.workspace / CONFIG_DIR / "config.local.toml")
        return paths

    def reload(self) -> None:
        self.layers = [ConfigLayer.from_file(p) for p in self.layer_paths()]
        self.layers.append(ConfigLayer.from_env(self._environ))
        merged: dict[str, Any] = {}
        for layer in self.layers:
            merge_into(merged, layer.data)
        self._merged = merged

    def get(self, key: str, default: Any = None) -> Any:
        return lookup(self._merged, key, default)

    def get_sources(self, key: str) -> list[str]:
        """Layers that set ``key``, highest priority first."""
        return [
            f"{layer.name} ({layer.source})"
            for layer in reversed(self.layers)
            if layer.get(key) is not None
        ]

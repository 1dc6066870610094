"""Configuration management for askuser.

Values come from the TOML cascade in ``askuser.cascade``. Bad scalar values
fall back to defaults instead of failing a session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from askuser.cascade import CascadingConfig
from askuser.models import QuestionDefaults

DEFAULT_TAB_LABEL_WIDTH = 12

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass
class Config:
    """Global configuration."""

    log_dir: Path | None = None
    log_level: int = logging.INFO
    single_question_variant: bool = True
    tab_label_width: int = DEFAULT_TAB_LABEL_WIDTH
    defaults: QuestionDefaults = field(default_factory=QuestionDefaults)

    @classmethod
    def load(
        cls,
        workspace: Path | None = None,
        home: Path | None = None,
        environ: dict[str, str] | None = None,
    ) -> Config:
        """Load config: env > config.local.toml > config.toml > ~/.askuser/config.toml."""
        cascade = CascadingConfig(workspace=workspace, home=home, environ=environ)
        cfg = cls()
        cfg._apply_cascade(cascade)
        return cfg

    def _apply_cascade(self, cascade: CascadingConfig):
        log_dir = cascade.get("log_dir")
        if log_dir:
            self.log_dir = Path(str(log_dir)).expanduser()
        self.log_level = self._parse_level(cascade.get("log_level"), logging.INFO)
        self.single_question_variant = self._parse_bool(
            cascade.get("single_question_variant"), True
        )
        self.tab_label_width = self._parse_positive_int(
            cascade.get("tab_label_width"), DEFAULT_TAB_LABEL_WIDTH
        )
        self.defaults = QuestionDefaults(
            multi_select=self._parse_bool(cascade.get("defaults.multi_select"), False),
            allow_other=self._parse_bool(cascade.get("defaults.allow_other"), True),
            required=self._parse_bool(cascade.get("defaults.required"), False),
        )

    # ── Parsing helpers ──────────────────────────────────────

    @staticmethod
    def _parse_bool(value: Any, default: bool) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE:
                return True
            if lowered in _FALSE:
                return False
        return default

    @staticmethod
    def _parse_positive_int(value: Any, default: int) -> int:
        """Parse a positive int with safe fallback."""
        try:
            parsed = int(value)
            if parsed > 0:
                return parsed
        except (TypeError, ValueError):
            pass
        return default

    @staticmethod
    def _parse_level(value: Any, default: int) -> int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str):
            level = logging.getLevelName(value.strip().upper())
            if isinstance(level, int):
                return level
        return default

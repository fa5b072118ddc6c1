"""Configuration loaded from environment variables.

All settings have sensible defaults. Override via LUMINA_* env vars, then
a YAML file (see ``yaml_config``), then CLI flags.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields, replace
from typing import Any

from lumina.engine.errors import ConfigError
from lumina.engine.prompts import SYSTEM_INSTRUCTION

logger = logging.getLogger(__name__)


@dataclass
class EngineConfig:
    """Chat engine configuration."""

    provider: str = "gemini"
    model: str = "gemini-2.5-flash"
    # Name of the env var holding the API key, never the key itself.
    api_key_env: str = "GEMINI_API_KEY"
    base_url: str = "https://generativelanguage.googleapis.com"
    system_instruction: str = field(default=SYSTEM_INSTRUCTION, repr=False)
    # Max wall-clock time for one model call.
    # Set to 0 (or a negative value) to wait indefinitely.
    request_timeout_seconds: float = 0.0
    # Most recent prior turns sent as history.
    # Set to 0 (or a negative value) to send the whole conversation.
    history_window_turns: int = 0

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> EngineConfig:
        env = os.environ if environ is None else environ
        config = cls()
        overrides: dict[str, Any] = {}
        if env.get("LUMINA_PROVIDER"):
            overrides["provider"] = env["LUMINA_PROVIDER"].strip()
        if env.get("LUMINA_MODEL"):
            overrides["model"] = env["LUMINA_MODEL"].strip()
        if env.get("LUMINA_API_KEY_ENV"):
            overrides["api_key_env"] = env["LUMINA_API_KEY_ENV"].strip()
        if env.get("LUMINA_BASE_URL"):
            overrides["base_url"] = env["LUMINA_BASE_URL"].strip()
        if env.get("LUMINA_REQUEST_TIMEOUT_SECONDS"):
            overrides["request_timeout_seconds"] = _parse_number(
                "LUMINA_REQUEST_TIMEOUT_SECONDS",
                env["LUMINA_REQUEST_TIMEOUT_SECONDS"],
                float,
            )
        if env.get("LUMINA_HISTORY_WINDOW"):
            overrides["history_window_turns"] = _parse_number(
                "LUMINA_HISTORY_WINDOW", env["LUMINA_HISTORY_WINDOW"], int,
            )
        if overrides:
            logger.debug("Engine env overrides: %s", sorted(overrides))
        return replace(config, **overrides)

    def merged(self, values: dict[str, Any]) -> EngineConfig:
        """Copy with known keys from ``values`` applied; unknown keys rejected."""
        known = {f.name for f in fields(self)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigError(f"Unknown engine setting(s): {', '.join(unknown)}")
        return replace(self, **values)

    @property
    def timeout_enabled(self) -> bool:
        return self.request_timeout_seconds > 0

    @property
    def window_enabled(self) -> bool:
        return self.history_window_turns > 0


def _parse_number(name: str, raw: str, kind: type) -> Any:
    try:
        return kind(raw.strip())
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc

"""YAML configuration loader.

Optional file layered over the env-var config. Auto-discovered at
``.lumina/lumina.yaml`` (preferred) or ``lumina.yaml`` in the working
directory, or passed explicitly with ``--config``.

Example YAML:
    engine:
      provider: gemini
      model: gemini-2.5-flash
      api_key_env: GEMINI_API_KEY
      request_timeout_seconds: 60
      history_window_turns: 40

    ui:
      dark_mode: false
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .config import EngineConfig
from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_CANDIDATES = (Path(".lumina") / "lumina.yaml", Path("lumina.yaml"))


@dataclass
class UIConfig:
    """UI settings from YAML. ``None`` means "use saved preference"."""
    dark_mode: bool | None = None


@dataclass
class LuminaConfig:
    """Complete parsed configuration."""
    engine: EngineConfig = field(default_factory=EngineConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    source: Path | None = None


def discover_config_path(cwd: Path) -> Path | None:
    """First existing config candidate under ``cwd``, if any."""
    for candidate in CONFIG_CANDIDATES:
        path = cwd / candidate
        if path.exists():
            logger.info("Auto-discovered config: %s", path)
            return path
    logger.debug(
        "No config file found (tried %s); using defaults",
        ", ".join(str(cwd / c) for c in CONFIG_CANDIDATES),
    )
    return None


def load_yaml_config(
    path: str | Path,
    base: EngineConfig | None = None,
) -> LuminaConfig:
    """Load and parse a YAML config file over ``base`` (env config)."""
    path = Path(path)
    try:
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.error("load_yaml_config: config file not found at %s", path.absolute())
        raise
    except yaml.YAMLError as exc:
        logger.error("load_yaml_config: YAML parse error in %s: %s", path, exc)
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"{path}: top level must be a mapping")

    engine_raw = raw.get("engine") or {}
    ui_raw = raw.get("ui") or {}
    if not isinstance(engine_raw, dict) or not isinstance(ui_raw, dict):
        raise ConfigError(f"{path}: 'engine' and 'ui' must be mappings")

    engine = (base or EngineConfig.from_env()).merged(engine_raw)

    dark_mode = ui_raw.get("dark_mode")
    if dark_mode is not None and not isinstance(dark_mode, bool):
        raise ConfigError(f"{path}: ui.dark_mode must be true or false")

    logger.info(
        "Loaded config from %s (provider=%s model=%s)",
        path, engine.provider, engine.model,
    )
    return LuminaConfig(engine=engine, ui=UIConfig(dark_mode=dark_mode), source=path)


def load_config(
    config_path: str | Path | None = None,
    cwd: Path | None = None,
) -> LuminaConfig:
    """Env config, overlaid with an explicit or auto-discovered YAML file."""
    base = EngineConfig.from_env()
    path = Path(config_path) if config_path else discover_config_path(cwd or Path.cwd())
    if path is None:
        return LuminaConfig(engine=base)
    return load_yaml_config(path, base=base)

"""Client registry — maps provider names to ModelClient factories."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from lumina.engine.errors import ConfigError

from .base import ModelClient
from .demo_provider import DemoClient
from .gemini_provider import GeminiClient

if TYPE_CHECKING:
    from ..config import EngineConfig

logger = logging.getLogger(__name__)


def _gemini(config: EngineConfig) -> ModelClient:
    return GeminiClient(
        model=config.model,
        api_key_env=config.api_key_env,
        base_url=config.base_url,
        system_instruction=config.system_instruction,
    )


def _demo(config: EngineConfig) -> ModelClient:
    return DemoClient()


_FACTORIES: dict[str, Callable[[EngineConfig], ModelClient]] = {
    "gemini": _gemini,
    "demo": _demo,
}


def build_client(config: EngineConfig) -> ModelClient:
    """Instantiate the client named by ``config.provider``."""
    factory = _FACTORIES.get(config.provider)
    if factory is None:
        available = ", ".join(sorted(_FACTORIES))
        raise ConfigError(
            f"Unknown provider '{config.provider}'. Available: {available}"
        )
    client = factory(config)
    logger.info("Model client: %s (model=%s)", client.name, client.model)
    return client

"""Chat engine — session state, model clients and configuration.

Public API:
    ChatSession      — turn history and single-flight model calls
    EngineConfig     — settings from env vars / YAML
    ModelClient      — request/response contract with the model
    GeminiClient     — Gemini REST client
    DemoClient       — offline canned replies
"""
from __future__ import annotations

__all__ = [
    "ChatSession",
    "EngineConfig",
    "LuminaConfig",
    "load_config",
    "ModelClient",
    "ModelReply",
    "GeminiClient",
    "DemoClient",
    "build_client",
    "LuminaError",
    "ModelClientError",
    "ModelTransportError",
    "ModelAuthError",
    "MalformedResponseError",
    "MissingApiKeyError",
    "ModelTimeoutError",
    "ConfigError",
]

from .config import EngineConfig
from .errors import (
    ConfigError,
    LuminaError,
    MalformedResponseError,
    MissingApiKeyError,
    ModelAuthError,
    ModelClientError,
    ModelTimeoutError,
    ModelTransportError,
)
from .providers import DemoClient, GeminiClient, ModelClient, ModelReply, build_client
from .session import ChatSession
from .yaml_config import LuminaConfig, load_config

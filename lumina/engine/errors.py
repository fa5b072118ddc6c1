"""Exception hierarchy for the chat engine.

Model-client failures are all ``ModelClientError`` subclasses so the
session engine can contain them at a single boundary.
"""
from __future__ import annotations


class LuminaError(Exception):
    """Base exception for all Lumina errors."""


class ModelClientError(LuminaError):
    """A call to the remote model did not produce a usable reply."""


class ModelTransportError(ModelClientError):
    """Network or HTTP-level failure talking to the model."""
    def __init__(self, reason: str, status: int | None = None):
        self.reason = reason
        self.status = status
        prefix = f"HTTP {status}: " if status is not None else ""
        super().__init__(f"{prefix}{reason}")


class ModelAuthError(ModelTransportError):
    """The model endpoint rejected the credentials."""


class MissingApiKeyError(ModelClientError):
    """No API key found in the configured environment variable."""
    def __init__(self, env_var: str):
        self.env_var = env_var
        super().__init__(f"API key not set (expected ${env_var})")


class MalformedResponseError(ModelClientError):
    """The model answered, but not with usable text."""


class ModelTimeoutError(ModelClientError):
    """The model call exceeded the configured request timeout."""
    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Model call timed out after {timeout_seconds}s")


class ConfigError(LuminaError):
    """Invalid configuration value or file."""


class ThemeError(LuminaError):
    """A token theme does not cover every required category."""
    def __init__(self, theme: str, missing: list[str]):
        self.theme = theme
        self.missing = missing
        super().__init__(
            f"Theme {theme} is missing colours for: {', '.join(missing)}"
        )

"""Model client abstraction."""
from .base import ModelClient, ModelReply
from .demo_provider import DemoClient
from .gemini_provider import GeminiClient
from .registry import build_client

__all__ = [
    "ModelClient",
    "ModelReply",
    "DemoClient",
    "GeminiClient",
    "build_client",
]

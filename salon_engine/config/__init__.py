"""Configuration loading and validation."""

from .models import (
    SystemConfig,
    LLMConfig,
    DatabaseConfig,
    ChatConfig,
)
from .loader import ConfigLoader, ConfigLoadError, ConfigValidationError

__all__ = [
    "SystemConfig",
    "LLMConfig",
    "DatabaseConfig",
    "ChatConfig",
    "ConfigLoader",
    "ConfigLoadError",
    "ConfigValidationError",
]

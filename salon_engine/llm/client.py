"""LLM client factory."""

from typing import TYPE_CHECKING
from .base import BaseLLMClient
from .ollama import OllamaLLMClient
from .openai_compatible import OpenAICompatibleLLMClient

if TYPE_CHECKING:
    from salon_engine.config.models import LLMConfig


def create_llm_client(config: "LLMConfig") -> BaseLLMClient:
    """
    Factory function to create appropriate LLM client based on provider.

    Args:
        config: LLM configuration with provider type and settings

    Returns:
        Provider-specific LLM client instance

    Raises:
        ValueError: If provider is unknown
    """
    provider = config.provider.lower()

    if provider == "openai-compatible":
        return OpenAICompatibleLLMClient(
            base_url=config.base_url,
            model=config.model,
            timeout=config.timeout_seconds,
            temperature=config.temperature,
            max_tokens=config.max_response_tokens,
            api_key=config.api_key,
        )

    elif provider == "ollama":
        return OllamaLLMClient(
            base_url=config.base_url,
            model=config.model,
            timeout=config.timeout_seconds,
            temperature=config.temperature,
            max_tokens=config.max_response_tokens,
            api_key=config.api_key,
        )

    else:
        raise ValueError(
            f"Unknown LLM provider: '{provider}'. "
            f"Supported providers: openai-compatible, ollama"
        )

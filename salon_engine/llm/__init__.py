"""LLM integration layer."""

from .base import BaseLLMClient, LLMError, LLMResponse
from .client import create_llm_client
from .ollama import OllamaLLMClient
from .openai_compatible import OpenAICompatibleLLMClient

__all__ = [
    "BaseLLMClient",
    "LLMError",
    "LLMResponse",
    "OllamaLLMClient",
    "OpenAICompatibleLLMClient",
    "create_llm_client",
]

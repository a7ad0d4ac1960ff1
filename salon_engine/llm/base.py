"""Base abstract class for LLM providers."""

from abc import ABC, abstractmethod
from typing import Optional, List, Dict
import httpx
from pydantic import BaseModel


class LLMResponse(BaseModel):
    """
    LLM response model.

    content is None when the provider answered but the first completion
    carried no text (missing choices, null or non-string content).
    """
    content: Optional[str] = None
    model: str
    finish_reason: Optional[str] = None


class LLMError(Exception):
    """Base exception for LLM operations."""
    pass


class BaseLLMClient(ABC):
    """
    Abstract base class for LLM provider clients.

    All provider implementations must inherit from this class and implement
    the required abstract methods.
    """

    def __init__(
        self,
        base_url: str,
        model: str,
        timeout: float,
        temperature: float,
        max_tokens: int,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize LLM client.

        Args:
            base_url: Base URL for the LLM provider
            model: Default model identifier
            timeout: Request timeout in seconds
            temperature: Default sampling temperature
            max_tokens: Default maximum tokens to generate
            api_key: Optional bearer token sent with every request
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip('/')
        self.model = model
        self.timeout = timeout
        self.temperature = temperature
        self.max_tokens = max_tokens

        headers = {"Authorization": f"Bearer {api_key}"} if api_key else None
        self.client = httpx.AsyncClient(timeout=timeout, headers=headers, transport=transport)

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the LLM provider is available and responding.

        Returns:
            True if provider is healthy, False otherwise
        """
        pass

    @abstractmethod
    async def generate_with_history(
        self,
        messages: List[Dict[str, str]],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        model: Optional[str] = None,
    ) -> LLMResponse:
        """
        Generate a non-streaming completion with conversation history.

        Args:
            messages: List of message dicts with 'role' and 'content'
            temperature: Override default temperature
            max_tokens: Override default max tokens
            model: Override default model

        Returns:
            LLMResponse with generated content

        Raises:
            LLMError: If generation fails
        """
        pass

    async def close(self) -> None:
        """Close the HTTP client. Can be overridden if needed."""
        await self.client.aclose()

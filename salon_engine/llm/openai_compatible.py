"""OpenAI-compatible chat completions client (hosted APIs, LM Studio, llama.cpp server)."""

import logging
from typing import Optional, List, Dict, Any
from .base import BaseLLMClient, LLMResponse, LLMError
import httpx

logger = logging.getLogger(__name__)


def _first_choice(data: Any) -> Dict[str, Any]:
    """Return choices[0] of a chat completions payload, or {} if the shape is off."""
    if not isinstance(data, dict):
        return {}
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return {}
    return choices[0]


def extract_completion_text(data: Any) -> Optional[str]:
    """
    Pull the first completion's text out of a chat completions payload.

    Anything other than a string at choices[0].message.content is treated
    as absent.
    """
    message = _first_choice(data).get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    return content if isinstance(content, str) else None


class OpenAICompatibleLLMClient(BaseLLMClient):
    """
    Client for any server exposing the OpenAI chat completions API.

    Endpoints used:
    - GET  /v1/models            (health check)
    - POST /v1/chat/completions  (generation, stream disabled)
    """

    async def health_check(self) -> bool:
        """Check if the server is available."""
        try:
            response = await self.client.get(f"{self.base_url}/v1/models")
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning(f"LLM health check failed: {e}")
            return False

    async def generate_with_history(
        self,
        messages: List[Dict[str, str]],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        model: Optional[str] = None,
    ) -> LLMResponse:
        """
        Generate a completion with full conversation history.

        Args:
            messages: Full message history array with roles and content
                     Format: [{"role": "system", "content": "..."}, {"role": "user", "content": "..."}, ...]
            temperature: Override default temperature
            max_tokens: Override default max tokens
            model: Override default model

        Returns:
            LLMResponse with generated content (None if the payload had no text)

        Raises:
            LLMError: If generation fails
        """
        payload = {
            "model": model if model is not None else self.model,
            "messages": messages,
            "stream": False,
            "temperature": temperature if temperature is not None else self.temperature,
            "max_tokens": max_tokens if max_tokens is not None else self.max_tokens,
        }

        logger.debug(
            f"Chat completions request: model={payload['model']}, temp={payload['temperature']}, "
            f"max_tokens={payload['max_tokens']}, messages={len(messages)}"
        )

        try:
            response = await self.client.post(
                f"{self.base_url}/v1/chat/completions",
                json=payload
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"LLM error response ({e.response.status_code}): {e.response.text[:500]}")
            raise LLMError(f"HTTP error during LLM generation: {e}") from e
        except httpx.HTTPError as e:
            raise LLMError(f"HTTP error during LLM generation: {e}") from e
        except ValueError as e:
            raise LLMError(f"LLM returned a non-JSON body: {e}") from e

        content = extract_completion_text(data)
        finish_reason = _first_choice(data).get("finish_reason")
        if not isinstance(finish_reason, str):
            finish_reason = None
        if content is None:
            logger.warning(f"LLM response had no completion text: {str(data)[:500]!r}")
        else:
            logger.debug(f"Chat completions response: {len(content)} chars, finish_reason={finish_reason}")

        used_model = data.get("model") if isinstance(data, dict) else None
        return LLMResponse(
            content=content,
            model=str(used_model or payload["model"]),
            finish_reason=finish_reason
        )

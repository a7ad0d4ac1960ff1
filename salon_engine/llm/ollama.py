"""Ollama LLM client implementation."""

import logging
from typing import Optional, List, Dict
from .base import BaseLLMClient, LLMResponse, LLMError
import httpx

logger = logging.getLogger(__name__)


class OllamaLLMClient(BaseLLMClient):
    """Client for interacting with Ollama API."""

    async def health_check(self) -> bool:
        """Check if Ollama is available."""
        try:
            response = await self.client.get(f"{self.base_url}/api/tags")
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning(f"Ollama health check failed: {e}")
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
            "options": {
                "temperature": temperature if temperature is not None else self.temperature,
                "num_predict": max_tokens if max_tokens is not None else self.max_tokens,
            }
        }

        logger.debug(
            f"Ollama request: model={payload['model']}, temp={payload['options']['temperature']}, "
            f"max_tokens={payload['options']['num_predict']}, messages={len(messages)}"
        )

        try:
            response = await self.client.post(
                f"{self.base_url}/api/chat",
                json=payload
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise LLMError(f"HTTP error during LLM generation: {e}") from e
        except ValueError as e:
            raise LLMError(f"Ollama returned a non-JSON body: {e}") from e

        if not isinstance(data, dict):
            logger.warning(f"[OLLAMA] Unexpected response type: {type(data).__name__}")
            return LLMResponse(content=None, model=payload["model"])

        message = data.get("message")
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            logger.warning(f"[OLLAMA] Response had no message content: keys={list(data.keys())}")
            content = None

        # Log Ollama timing metrics for debugging
        total_duration = data.get("total_duration")
        total_dur = total_duration / 1e9 if isinstance(total_duration, (int, float)) else 0.0  # nanoseconds to seconds
        if total_dur > 30:
            logger.info(
                f"[OLLAMA] Request completed: total={total_dur:.1f}s, "
                f"prompt_tokens={data.get('prompt_eval_count', 0)}, output_tokens={data.get('eval_count', 0)}"
            )

        done_reason = data.get("done_reason")
        return LLMResponse(
            content=content,
            model=str(data.get("model") or payload["model"]),
            finish_reason=done_reason if isinstance(done_reason, str) else None
        )

"""
LLM client - chat completions through the OpenAI SDK

One client is created per process from settings and shared by every request.
Responses are normalized to LLMResponse so the rest of the service does not
depend on SDK types.
"""

from typing import List, Optional, Dict, Any
import asyncio
import logging

from openai import AsyncOpenAI

from wizybot.core.config import Settings
from wizybot.services.tools.schema import LLMResponse, ToolCall

logger = logging.getLogger(__name__)


class LLMProviderError(Exception):
    """Raised when the LLM provider call fails or returns nothing usable"""
    pass


class LLMClient:
    """
    Thin async wrapper around `client.chat.completions.create`.

    Usage:
        llm = LLMClient.from_settings(settings)
        response = await llm.complete(messages, tools=tools_spec)
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str,
        base_url: Optional[str] = None,
        timeout: float = 60,
        client: Optional[AsyncOpenAI] = None
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "LLMClient":
        return cls(
            api_key=settings.OPENAI_API_KEY,
            model=settings.OPENAI_MODEL,
            base_url=settings.OPENAI_BASE_URL,
            timeout=settings.LLM_REQUEST_TIMEOUT,
        )

    @property
    def is_configured(self) -> bool:
        return self._client is not None or bool(self.api_key)

    def _get_client(self) -> AsyncOpenAI:
        """Get or create the shared SDK client."""
        if self._client is None:
            if not self.api_key:
                raise LLMProviderError("OPENAI_API_KEY not configured")
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout
            )
        return self._client

    async def complete(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        temperature: Optional[float] = None
    ) -> LLMResponse:
        """
        Submit the conversation (and optional tool schema) and return the top choice.

        Raises:
            LLMProviderError: on any provider failure or an empty choice list
        """
        client = self._get_client()

        request_kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
        }
        if tools:
            request_kwargs["tools"] = tools
        if temperature is not None:
            request_kwargs["temperature"] = temperature

        try:
            response = await client.chat.completions.create(**request_kwargs)
        except asyncio.TimeoutError as e:
            raise LLMProviderError("LLM API error: Request timed out") from e
        except Exception as e:
            error_type = type(e).__name__
            raise LLMProviderError(f"LLM API error: [{error_type}] {str(e)}") from e

        if not response.choices:
            raise LLMProviderError("LLM API error: completion returned no choices")

        choice = response.choices[0]
        message = choice.message

        tool_calls = [
            ToolCall(
                id=tc.id,
                name=tc.function.name,
                arguments_json=tc.function.arguments or "{}"
            )
            for tc in (message.tool_calls or [])
        ]

        usage = getattr(response, "usage", None)
        logger.debug(
            f"Completion finished: reason={choice.finish_reason}, "
            f"tool_calls={len(tool_calls)}, tokens={usage.total_tokens if usage else None}"
        )

        return LLMResponse(
            finish_reason=choice.finish_reason,
            content=message.content,
            tool_calls=tool_calls,
            tokens_used=usage.total_tokens if usage else None
        )

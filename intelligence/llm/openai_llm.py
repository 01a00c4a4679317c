"""
OpenAI-compatible LLM
Works against OpenAI directly or OpenRouter (same API, different base URL)
"""
from typing import List, Optional, Dict
import logging

from utils.exceptions import LLMError

from .base import BaseLLM, Message, LLMResponse


logger = logging.getLogger(__name__)


OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class OpenAILLM(BaseLLM):
    """
    Chat-completions client on the official ``openai`` SDK.

    With ``base_url`` pointing at OpenRouter, model names take the
    ``vendor/model`` form (``deepseek/deepseek-chat``, ``openai/gpt-4o-mini``).
    """

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        temperature: float = 0.2,
        max_tokens: int = 800,
        timeout: float = 30.0,
        default_headers: Optional[Dict[str, str]] = None,
        **kwargs,
    ):
        super().__init__(model, temperature, max_tokens, timeout, **kwargs)
        self.api_key = api_key
        self.base_url = base_url
        self.default_headers = dict(default_headers or {})
        self._async_client = None

    @property
    def provider(self) -> str:
        if self.base_url and "openrouter" in self.base_url:
            return "openrouter"
        return "openai"

    def _get_async_client(self):
        """Get or create the async client"""
        if self._async_client is None:
            from openai import AsyncOpenAI
            self._async_client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                default_headers=self.default_headers or None,
                max_retries=0,
            )
        return self._async_client

    async def acomplete(
        self,
        messages: List[Message],
        **kwargs,
    ) -> LLMResponse:
        """Generate a response asynchronously"""
        client = self._get_async_client()

        request_params = {
            "model": kwargs.get("model", self.model),
            "messages": [m.to_dict() for m in messages],
            "temperature": kwargs.get("temperature", self.temperature),
            "max_tokens": kwargs.get("max_tokens", self.max_tokens),
        }
        if kwargs.get("json_mode"):
            request_params["response_format"] = {"type": "json_object"}

        from openai import OpenAIError
        try:
            response = await client.chat.completions.create(**request_params)
        except OpenAIError as e:
            raise LLMError(str(e), provider=self.provider, model=request_params["model"]) from e
        if not response.choices:
            raise LLMError("completion returned no choices", provider=self.provider, model=request_params["model"])

        choice = response.choices[0]
        usage = getattr(response, "usage", None)
        return LLMResponse(
            content=choice.message.content or "",
            model=response.model,
            usage={
                "prompt_tokens": getattr(usage, "prompt_tokens", 0) or 0,
                "completion_tokens": getattr(usage, "completion_tokens", 0) or 0,
                "total_tokens": getattr(usage, "total_tokens", 0) or 0,
            },
            finish_reason=choice.finish_reason,
            raw_response=response,
        )

    async def aclose(self) -> None:
        if self._async_client is not None:
            await self._async_client.close()
            self._async_client = None

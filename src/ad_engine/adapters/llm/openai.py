"""OpenAI chat completions client."""

from typing import Any

import httpx

from ad_engine.adapters.llm.base import LLMMessage, LLMProvider, LLMResponse
from ad_engine.config import settings
from ad_engine.domain.errors import ProviderError
from ad_engine.logging import get_logger

logger = get_logger(__name__)


class OpenAIProvider(LLMProvider):
    """Chat completions over plain HTTP.

    A JSON-mode completion cut off by the token limit is reported as a
    ``ProviderError``, since the truncated object cannot be parsed.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 120.0,
    ) -> None:
        self.api_key = api_key or settings.openai_api_key
        self.model = model or settings.openai_model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        if not self.api_key:
            logger.warning("openai_api_key_not_configured", model=self.model)

    @property
    def name(self) -> str:
        return f"openai:{self.model}"

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    def _payload(
        self,
        messages: list[LLMMessage],
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}
        return payload

    async def complete(
        self,
        messages: list[LLMMessage],
        temperature: float = 0.7,
        max_tokens: int = 4096,
        json_mode: bool = False,
    ) -> LLMResponse:
        if not self.api_key:
            raise ProviderError(self.name, "OpenAI API key not configured")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers=self._headers(),
                    json=self._payload(messages, temperature, max_tokens, json_mode),
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                self.name,
                f"API error {e.response.status_code}: {e.response.text[:200]}",
                code=str(e.response.status_code),
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(self.name, f"request failed: {e}") from e

        result = self._to_response(response.json())

        if json_mode and result.finish_reason == "length":
            raise ProviderError(self.name, "JSON response truncated at max_tokens")

        logger.info(
            "openai_completion",
            model=result.model,
            total_tokens=result.total_tokens,
            finish_reason=result.finish_reason,
        )
        return result

    @staticmethod
    def _to_response(data: dict[str, Any]) -> LLMResponse:
        choice = data["choices"][0]
        usage = data.get("usage") or {}
        return LLMResponse(
            content=choice["message"]["content"] or "",
            model=data.get("model", ""),
            usage={
                "prompt_tokens": usage.get("prompt_tokens", 0),
                "completion_tokens": usage.get("completion_tokens", 0),
                "total_tokens": usage.get("total_tokens", 0),
            },
            raw_response=data,
            finish_reason=choice.get("finish_reason"),
        )

    async def health_check(self) -> bool:
        if not self.api_key:
            return False

        try:
            async with httpx.AsyncClient(timeout=10.0) as client:
                response = await client.get(f"{self.base_url}/models", headers=self._headers())
        except httpx.HTTPError as e:
            logger.error("openai_health_check_failed", error=str(e))
            return False
        return response.status_code == 200

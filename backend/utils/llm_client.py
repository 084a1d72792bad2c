import logging

import httpx

from utils.errors import LLMError

logger = logging.getLogger(__name__)

# Statuses worth one more try on the secondary model: unknown model name,
# rate/quota limits and upstream failures.
_RETRYABLE_STATUSES = {404, 408, 429, 500, 502, 503, 504}


class LLMClient:
    """Chat client for an OpenAI-compatible endpoint (OpenRouter by default).

    Each call goes to the configured model; on a retryable failure it is
    repeated exactly once against ``fallback_model``.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        api_key: str,
        base_url: str = "https://openrouter.ai/api/v1",
        model: str = "openai/gpt-4o-mini",
        fallback_model: str = "",
    ):
        self._http = http
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self.model = model
        self.fallback_model = fallback_model

    async def _call_llm(self, model: str, messages: list[dict],
                        temperature: float, max_tokens: int) -> httpx.Response:
        """Single LLM call."""
        return await self._http.post(
            f"{self._base_url}/chat/completions",
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
            },
            json={
                "model": model,
                "messages": messages,
                "temperature": temperature,
                "max_tokens": max_tokens,
            },
        )

    async def _call_with_fallback(self, messages: list[dict], temperature: float,
                                  max_tokens: int, retry: bool) -> httpx.Response:
        can_retry = retry and self.fallback_model and self.fallback_model != self.model
        try:
            response = await self._call_llm(self.model, messages, temperature, max_tokens)
        except httpx.TransportError:
            if not can_retry:
                raise
            logger.warning("Model %s unreachable, retrying with %s", self.model,
                           self.fallback_model, exc_info=True)
            return await self._call_llm(self.fallback_model, messages, temperature, max_tokens)

        if response.status_code not in _RETRYABLE_STATUSES or not can_retry:
            return response

        logger.warning("Model %s failed with %s, retrying with %s",
                       self.model, response.status_code, self.fallback_model)
        return await self._call_llm(self.fallback_model, messages, temperature, max_tokens)

    async def chat_completion_with_history(
        self,
        messages: list[dict],
        temperature: float = 0.7,
        max_tokens: int = 1024,
        retry: bool = True,
    ) -> str:
        if not self._api_key:
            raise LLMError("LLM API key is not configured")

        response = await self._call_with_fallback(messages, temperature, max_tokens, retry)
        if response.status_code != 200:
            logger.error("LLM error %s: %s", response.status_code, response.text)
        response.raise_for_status()

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise LLMError("Malformed response from the AI provider") from e
        return content or ""

    async def chat_completion(
        self,
        prompt: str,
        system: str = "",
        temperature: float = 0.7,
        max_tokens: int = 1024,
        retry: bool = True,
    ) -> str:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return await self.chat_completion_with_history(messages, temperature, max_tokens, retry)

import logging

import httpx

from app.core.config import settings
from app.core.errors import ProviderError, ProviderTimeout
from app.adapters.llm.base import LLM

logger = logging.getLogger(__name__)


def _error_message(r: httpx.Response) -> str:
    """Pull a readable message out of an OpenRouter/OpenAI-style error envelope."""
    try:
        body = r.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict):
            msg = err.get("message") or err.get("code")
            if msg:
                return str(msg)
    text = (r.text or "")[:500]
    return text or f"API request failed (status: {r.status_code})"


class OpenRouterLLM(LLM):
    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self.base_url = settings.OPENROUTER_BASE_URL.rstrip("/")
        self.model = settings.OPENROUTER_MODEL
        self.timeout = httpx.Timeout(settings.LLM_TIMEOUT, connect=settings.LLM_CONNECT_TIMEOUT)
        # tests inject httpx.MockTransport here
        self._transport = transport

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {settings.OPENROUTER_API_KEY or ''}",
            "HTTP-Referer": settings.OPENROUTER_REFERER,
            "X-Title": settings.OPENROUTER_TITLE,
        }

    async def complete(self, messages: list[dict]) -> str:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                r = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers=self._headers(),
                    json={"model": self.model, "messages": messages},
                )
        except httpx.TimeoutException as e:
            raise ProviderTimeout("OpenRouter API timeout - the request took too long") from e
        except httpx.TransportError as e:
            raise ProviderError(f"Could not connect to OpenRouter API: {e}") from e

        if not r.is_success:
            logger.error("OpenRouter API error - status=%s body=%s", r.status_code, (r.text or "")[:1000])
            raise ProviderError(
                f"OpenRouter API error ({r.status_code}): {_error_message(r)}",
                status_code=r.status_code,
            )

        try:
            content = r.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError):
            content = None
        if not content:
            raise ProviderError(f"OpenRouter returned empty response. Response: {(r.text or '')[:500]}")
        return content

import logging

from app.core.config import settings
from app.core.errors import ProviderError, ProviderTimeout
from app.adapters.llm.base import LLM

logger = logging.getLogger(__name__)


class OpenAILLM(LLM):
    """Chat completions through the official SDK (OpenAI or any compatible base URL)."""

    def __init__(self, client=None):
        # tests pass a prebuilt client; otherwise one is built per call
        self._client = client

    def _make_client(self):
        import httpx
        from openai import AsyncOpenAI

        return AsyncOpenAI(
            api_key=settings.OPENAI_API_KEY,
            base_url=settings.OPENAI_BASE_URL,
            timeout=httpx.Timeout(settings.LLM_TIMEOUT, connect=settings.LLM_CONNECT_TIMEOUT),
            max_retries=0,
        )

    async def complete(self, messages: list[dict]) -> str:
        if self._client is not None:
            return await self._create(self._client, messages)
        async with self._make_client() as client:
            return await self._create(client, messages)

    async def _create(self, client, messages: list[dict]) -> str:
        import openai

        try:
            resp = await client.chat.completions.create(
                model=settings.OPENAI_MODEL,
                messages=messages,
                temperature=0.2,
            )
        except openai.APITimeoutError as e:
            raise ProviderTimeout("OpenAI API timeout - the request took too long") from e
        except openai.APIConnectionError as e:
            raise ProviderError(f"Could not connect to OpenAI API: {e}") from e
        except openai.APIStatusError as e:
            logger.error("OpenAI API error - status=%s body=%s", e.status_code, str(e.body)[:1000])
            raise ProviderError(f"OpenAI API error ({e.status_code}): {e.message}", status_code=e.status_code) from e

        content = resp.choices[0].message.content if resp.choices else None
        if not content:
            raise ProviderError("OpenAI returned empty response")
        return content

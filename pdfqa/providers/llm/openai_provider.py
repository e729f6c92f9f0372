"""OpenAI-compatible completion provider adapter.

Wraps the ``openai`` async client to implement :class:`ICompletionProvider`.
The assembled RAG prompt is sent as a single user message to the chat
completions endpoint.  When ``openai_base_url`` is configured the client
points at that OpenAI-compatible endpoint instead.
"""

from __future__ import annotations

import openai
import structlog

from pdfqa.config.settings import Settings
from pdfqa.interfaces.completion_provider import ICompletionProvider
from pdfqa.providers.openai_errors import to_upstream_error
from pdfqa.utils.errors import UpstreamError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_MODEL = "gpt-4o-mini"


class OpenAICompletionProvider(ICompletionProvider):
    """Completion provider backed by an OpenAI-compatible chat API."""

    def __init__(self, settings: Settings, timeout: float = 25.0) -> None:
        self._settings = settings
        self._api_key = settings.openai_api_key

        client_kwargs: dict = {
            "api_key": self._api_key or "unset",
            "timeout": openai.Timeout(timeout, connect=5.0),
            # Retries are owned by pdfqa.utils.retry.
            "max_retries": 0,
        }
        if settings.openai_base_url:
            client_kwargs["base_url"] = settings.openai_base_url

        self._client = openai.AsyncOpenAI(**client_kwargs)
        self._model = settings.openai_completion_model or _DEFAULT_MODEL
        self._provider_label = "openai-compatible" if settings.openai_base_url else "openai"

    async def complete(
        self,
        prompt: str,
        temperature: float = 0.0,
        max_tokens: int = 500,
    ) -> str:
        """Generate a completion for the assembled prompt and return it verbatim."""
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.APIError as exc:
            raise to_upstream_error(exc, self._provider_label, self.get_provider_name()) from exc

        content = response.choices[0].message.content if response.choices else None
        if content is None:
            raise UpstreamError(
                message=f"{self._provider_label} returned empty response",
                provider_name=self.get_provider_name(),
            )
        logger.info(
            "openai_completion",
            model=self._model,
            provider=self._provider_label,
            tokens=response.usage.total_tokens if response.usage else None,
        )
        return content

    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured (doesn't verify it works)."""
        return bool(self._api_key)

    def get_provider_name(self) -> str:
        return self._provider_label

    async def close(self) -> None:
        await self._client.close()

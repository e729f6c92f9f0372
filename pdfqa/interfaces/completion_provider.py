"""Abstract base class for text-generation (completion) providers."""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementation: OpenAICompletionProvider (pdfqa/providers/llm/)
class ICompletionProvider(ABC):
    """Contract for the model that turns an assembled prompt into an answer."""

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        temperature: float = 0.0,
        max_tokens: int = 500,
    ) -> str:
        """Generate text for *prompt*.

        Parameters
        ----------
        prompt:
            The fully assembled prompt (instructions, context and question).
        temperature:
            Sampling temperature; ``0.0`` is deterministic.
        max_tokens:
            Upper bound on generated tokens.

        Returns
        -------
        str
            The generated text, verbatim.

        Raises
        ------
        pdfqa.utils.errors.UpstreamError
            If the API call fails or returns no content.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"openai"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if credentials are configured."""

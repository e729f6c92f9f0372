"""Completion provider adapters.

OpenAICompletionProvider implements ICompletionProvider
(pdfqa/interfaces/completion_provider.py) on top of the chat completions
API.  main.py creates one instance at startup and stores it on
``app.state`` for dependency injection.
"""

from pdfqa.providers.llm.openai_provider import OpenAICompletionProvider

__all__ = ["OpenAICompletionProvider"]

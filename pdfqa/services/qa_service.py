"""Retrieval-augmented question answering over a single document.

Accepts a document id and a natural-language question, retrieves the
document's most similar pages from its vector namespace, and asks the
completion service to answer from that context only.

The data flow follows a classic RAG (Retrieval-Augmented Generation)
pattern:
  1. LOOKUP     -- Load the document record to find its namespace.  An
                   unknown id fails here, before any paid call is made.
  2. EMBED      -- Embed the question with the same model used for pages.
  3. RETRIEVE   -- Query the namespace for the top ``TOP_K`` pages,
                   keeping the index's rank order (no re-ranking).
  4. CONTEXT    -- Join the page texts with ``CONTEXT_DELIMITER``.  Fewer
                   matches than ``TOP_K`` (or none at all) is not an error.
  5. COMPLETE   -- Wrap context and question in the fixed prompt template
                   and return the completion text verbatim.
"""

from __future__ import annotations

import structlog

from pdfqa.interfaces.completion_provider import ICompletionProvider
from pdfqa.interfaces.document_store import IDocumentStore
from pdfqa.interfaces.embedding_provider import IEmbeddingProvider
from pdfqa.interfaces.vector_index_provider import IVectorIndexProvider
from pdfqa.models.rag import AnswerResult, IndexMatch
from pdfqa.utils.errors import NotFoundError, ValidationError
from pdfqa.utils.logging import get_logger
from pdfqa.utils.retry import RetryPolicy, call_upstream

logger: structlog.BoundLogger = get_logger(__name__)

TOP_K = 5
CONTEXT_DELIMITER = "\n\n===\n\n"
PROMPT_PREFIX = "Answer the question based on the context below: \n\n"
PROMPT_SUFFIX = "\n\nQuestion: {query} \n\nAnswer:"


def build_context(matches: list[IndexMatch]) -> str:
    """Join the texts of at most ``TOP_K`` matches, in the order given."""
    return CONTEXT_DELIMITER.join(match.text for match in matches[:TOP_K])


def build_prompt(context: str, query: str) -> str:
    return PROMPT_PREFIX + " " + context + " " + PROMPT_SUFFIX.format(query=query)


class QAService:
    """Answers questions about one document using its page vectors.

    Parameters
    ----------
    document_store:
        Resolves a document id to its namespace.
    embedding_provider:
        Embeds the question.  Must be the provider used at ingestion.
    vector_index:
        Holds each document's page vectors.
    completion_provider:
        Generates the answer from the assembled prompt.
    retry_policy:
        Deadline and retry parameters applied to every external call.
    temperature, max_tokens:
        Completion parameters.
    """

    def __init__(
        self,
        document_store: IDocumentStore,
        embedding_provider: IEmbeddingProvider,
        vector_index: IVectorIndexProvider,
        completion_provider: ICompletionProvider,
        retry_policy: RetryPolicy | None = None,
        temperature: float = 0.0,
        max_tokens: int = 500,
    ) -> None:
        self._document_store = document_store
        self._embedding_provider = embedding_provider
        self._vector_index = vector_index
        self._completion_provider = completion_provider
        self._retry_policy = retry_policy or RetryPolicy()
        self._temperature = temperature
        self._max_tokens = max_tokens

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def answer(self, document_id: str, query_text: str) -> AnswerResult:
        """Answer *query_text* from the content of document *document_id*.

        Raises
        ------
        ValidationError
            If the question or the id is blank.  No external call is made.
        NotFoundError
            If the document does not exist.  Nothing is embedded, queried
            or completed.
        UpstreamError
            If the embedding, index or completion call fails.
        """
        if not query_text or not query_text.strip():
            raise ValidationError(message="Query must not be empty")
        if not document_id or not document_id.strip():
            raise ValidationError(message="Document id must not be empty")

        policy = self._retry_policy

        # LOOKUP
        document = await call_upstream(
            "get_document",
            lambda: self._document_store.get_document(document_id),
            policy,
        )
        if document is None:
            raise NotFoundError()

        # EMBED
        vector = await call_upstream(
            "embed_query",
            lambda: self._embedding_provider.embed_single(query_text),
            policy,
        )

        # RETRIEVE
        matches = await call_upstream(
            "index_query",
            lambda: self._vector_index.query(document.namespace, vector, top_k=TOP_K),
            policy,
        )

        # CONTEXT + COMPLETE
        context = build_context(matches)
        prompt = build_prompt(context, query_text)
        answer = await call_upstream(
            "complete",
            lambda: self._completion_provider.complete(
                prompt,
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            ),
            policy,
        )

        segments = min(len(matches), TOP_K)
        logger.info(
            "query_answered",
            document_id=document_id,
            namespace=document.namespace,
            context_segments=segments,
            top_score=matches[0].score if matches else None,
        )
        return AnswerResult(document_id=document_id, answer=answer, context_segments=segments)

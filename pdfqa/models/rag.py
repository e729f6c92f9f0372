"""RAG pipeline data models.

Defines Pydantic v2 models for page records, index matches and the
results the two pipelines return.  All models are frozen.

Data flow:

    1. INGESTION: a PDF's pages become :class:`PageRecord` objects, each
       carrying its extracted text and embedding vector.
    2. STORAGE: page records are upserted into the document's namespace
       under the id ``page{N}`` with metadata ``{page_number, text}``.
    3. RETRIEVAL: a query vector returns ranked :class:`IndexMatch` objects
       whose texts become the prompt context.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PageRecord(BaseModel):
    """One page of a document, ready for upsert into the vector index."""

    model_config = ConfigDict(frozen=True)

    page_number: int = Field(ge=1, description="1-based page number in document order.")
    text: str = Field(default="", description="Extracted text of the page (may be empty).")
    embedding: list[float] = Field(description="Embedding vector of the page text.")

    @property
    def record_id(self) -> str:
        """Identity of this page inside its namespace."""
        return page_record_id(self.page_number)

    def metadata(self) -> dict[str, int | str]:
        return {"page_number": self.page_number, "text": self.text}


def page_record_id(page_number: int) -> str:
    return f"page{page_number}"


class IndexMatch(BaseModel):
    """A single ranked result of a top-K vector query."""

    model_config = ConfigDict(frozen=True)

    record_id: str = Field(description="Record id inside the namespace, e.g. 'page3'.")
    score: float = Field(default=0.0, description="Similarity score; higher is closer.")
    page_number: int | None = Field(default=None, description="Stored page number metadata.")
    text: str = Field(default="", description="Stored page text metadata.")


class IngestionResult(BaseModel):
    """Summary of one successful ingestion run."""

    model_config = ConfigDict(frozen=True)

    document_id: str
    namespace: str
    pages_indexed: int = Field(default=0, ge=0)
    ingestion_time: float = Field(default=0.0, ge=0.0, description="Wall-clock seconds.")


class AnswerResult(BaseModel):
    """Answer produced by the retrieval pipeline."""

    model_config = ConfigDict(frozen=True)

    document_id: str
    answer: str
    context_segments: int = Field(
        default=0, ge=0, description="Number of page texts included in the prompt."
    )

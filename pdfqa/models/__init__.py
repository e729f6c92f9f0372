"""Pydantic models shared across pdfqa layers."""

from pdfqa.models.document import MAX_FIELD_LENGTH, Document, NewDocument
from pdfqa.models.rag import AnswerResult, IndexMatch, IngestionResult, PageRecord, page_record_id

__all__ = [
    "MAX_FIELD_LENGTH",
    "AnswerResult",
    "Document",
    "IndexMatch",
    "IngestionResult",
    "NewDocument",
    "PageRecord",
    "page_record_id",
]

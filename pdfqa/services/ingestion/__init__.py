"""Document ingestion pipeline.

Orchestrates **fetch -> extract -> embed -> upsert -> mark processed**:

1. **Extract** (pdf_extractor.py / PDFTextExtractor) -- splits a PDF into
   numbered page texts, keeping empty pages.

2. **Ingest** (ingestion_service.py / IngestionService) -- embeds every
   page with bounded concurrency, upserts the page vectors into the
   document's namespace, then flips the document to processed.
"""

from pdfqa.services.ingestion.ingestion_service import IngestionService
from pdfqa.services.ingestion.pdf_extractor import PDFTextExtractor

__all__ = [
    "IngestionService",
    "PDFTextExtractor",
]

"""Per-page text extraction for PDF documents.

Reads PDF bytes with PyMuPDF (fitz) and returns one ``(page_number, text)``
pair per page.  A page's text is the concatenation, in document order, of
every text span PyMuPDF reports for it, joined by a configurable token
separator (``""`` by default).  Pages without text are kept with ``""`` so
that page numbering stays contiguous.
"""

from __future__ import annotations

import fitz  # PyMuPDF -- the "fitz" import name is a PyMuPDF convention
import structlog

from pdfqa.utils.errors import ParseError

logger = structlog.get_logger(logger_name=__name__)

# PyMuPDF block type for text (1 is image).
_TEXT_BLOCK = 0


class PDFTextExtractor:
    """Splits a PDF byte stream into numbered page texts.

    Parameters
    ----------
    token_separator:
        String placed between consecutive text spans of a page.
    """

    def __init__(self, token_separator: str = "") -> None:
        self._separator = token_separator

    def extract(self, data: bytes) -> list[tuple[int, str]]:
        """Extract the text of every page.

        Parameters
        ----------
        data:
            Raw PDF bytes.

        Returns
        -------
        list[tuple[int, str]]
            ``(page_number, page_text)`` for pages ``1..N`` in order.

        Raises
        ------
        ParseError
            If *data* is empty or is not a readable PDF.
        """
        if not data:
            raise ParseError(message="Document is empty", provider_name="pymupdf")

        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as exc:
            logger.error("pdf_open_failed", size_bytes=len(data), error=str(exc))
            raise ParseError(
                message=f"Document is not a valid PDF: {exc}",
                provider_name="pymupdf",
            ) from exc

        pages: list[tuple[int, str]] = []
        try:
            for index in range(len(doc)):
                pages.append((index + 1, self._page_text(doc[index])))
        except Exception as exc:
            raise ParseError(
                message=f"Failed to read page {len(pages) + 1}: {exc}",
                provider_name="pymupdf",
            ) from exc
        finally:
            doc.close()

        logger.info(
            "pages_extracted",
            pages=len(pages),
            empty_pages=sum(1 for _, text in pages if not text),
        )
        return pages

    def _page_text(self, page: fitz.Page) -> str:
        spans: list[str] = []
        for block in page.get_text("dict").get("blocks", []):
            if block.get("type") != _TEXT_BLOCK:
                continue
            for line in block.get("lines", []):
                for span in line.get("spans", []):
                    text = span.get("text", "")
                    if text:
                        spans.append(text)
        return self._separator.join(spans)

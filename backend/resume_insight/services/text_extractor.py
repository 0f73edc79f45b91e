"""
PDF text extraction using PyMuPDF (no poppler dependency).
"""
import logging
import fitz  # PyMuPDF

from ..exceptions import ExtractionFailed

logger = logging.getLogger(__name__)


def extract_text(pdf_bytes: bytes) -> str:
    """
    Extract plain text from every page of a PDF.

    Args:
        pdf_bytes: Raw PDF file bytes

    Returns:
        Trimmed text of all pages joined by newlines. Never empty.

    Raises:
        ExtractionFailed: bytes are empty, not a readable PDF, or contain no text
    """
    if not pdf_bytes:
        raise ExtractionFailed("PDF payload is empty")

    try:
        pdf_document = fitz.open(stream=pdf_bytes, filetype="pdf")
    except Exception as e:
        raise ExtractionFailed(f"Could not open PDF: {e}") from e

    try:
        pages = [page.get_text() for page in pdf_document]
    except Exception as e:
        raise ExtractionFailed(f"Could not read PDF pages: {e}") from e
    finally:
        pdf_document.close()

    text = "\n".join(pages).strip()
    if not text:
        raise ExtractionFailed("PDF parsing returned empty text")

    logger.debug(f"Extracted {len(text)} characters from {len(pages)} page(s)")
    return text

"""Text extraction for uploaded documents."""

import io
import logging

import pypdf
from pypdf.errors import PyPdfError

from app.core.errors import ValidationError


logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


def is_pdf(content_type: str, filename: str) -> bool:
    return content_type == PDF_CONTENT_TYPE or filename.lower().endswith(".pdf")


def extract_pdf_text(data: bytes, filename: str = "upload.pdf") -> str:
    """
    Extract the text layer of a PDF, page by page.

    Raises:
        ValidationError: The bytes are not a readable PDF
    """
    try:
        reader = pypdf.PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
    except (PyPdfError, ValueError) as e:
        logger.warning(f"Unreadable PDF '{filename}': {e}")
        raise ValidationError("file", "is not a readable PDF") from e
    text = "\n".join(pages).strip()
    logger.info(f"Extracted {len(text)} chars from {len(pages)} pages of '{filename}'")
    return text

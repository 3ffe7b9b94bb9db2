"""PDF inspection module using pypdf.

Validates an uploaded file before it is forwarded to the AI backend and
reads the page count that drives the viewer's pagination. The document text
is not extracted: the whole file is handed to the model.
"""

import io
import logging

from pydantic import BaseModel, Field
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from pdfchat.errors import InvalidDocumentError

logger = logging.getLogger(__name__)

# Constants
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
PDF_MAGIC_BYTES = b"%PDF"
PDF_MIME_TYPE = "application/pdf"


class PDFInfo(BaseModel):
    """Facts about a validated PDF file.

    Attributes:
        pages: Total number of pages in the document.
        size_bytes: Size of the raw file.
        metadata: Document metadata (title, author, etc.).
    """

    pages: int = Field(ge=1)
    size_bytes: int = Field(ge=1)
    metadata: dict[str, str]


class PDFParseError(InvalidDocumentError):
    """Raised when PDF validation or parsing fails."""

    pass


def _format_size(size: int) -> str:
    return f"{size / (1024 * 1024):.1f}MB"


def _validate_pdf_bytes(
    file_content: bytes,
    mime_type: str,
    max_size: int,
) -> None:
    """Validate PDF file content before parsing.

    Args:
        file_content: Raw bytes of the PDF file.
        mime_type: Declared MIME type of the upload.
        max_size: Size ceiling in bytes.

    Raises:
        PDFParseError: If validation fails.
    """
    if mime_type != PDF_MIME_TYPE:
        raise PDFParseError(f"Only PDF files are accepted (got {mime_type})")

    if not file_content:
        raise PDFParseError("Empty file provided")

    if len(file_content) > max_size:
        raise PDFParseError(
            f"File size ({_format_size(len(file_content))}) exceeds maximum "
            f"allowed ({_format_size(max_size)})",
            too_large=True,
        )

    if not file_content.lstrip()[:10].startswith(PDF_MAGIC_BYTES):
        raise PDFParseError("Invalid PDF: file does not start with PDF header")


def _extract_metadata(reader: PdfReader) -> dict[str, str]:
    """Extract metadata from PDF reader.

    Args:
        reader: Initialized PdfReader instance.

    Returns:
        Dictionary of metadata fields that are present.
    """
    metadata: dict[str, str | None] = {}

    try:
        if reader.metadata:
            metadata["title"] = reader.metadata.get("/Title")
            metadata["author"] = reader.metadata.get("/Author")
            metadata["subject"] = reader.metadata.get("/Subject")
    except Exception as e:
        logger.warning(f"Failed to extract some metadata: {e}")

    return {k: str(v) for k, v in metadata.items() if v is not None}


def inspect_pdf(
    file_content: bytes,
    mime_type: str = PDF_MIME_TYPE,
    max_size: int = MAX_FILE_SIZE,
) -> PDFInfo:
    """Validate a PDF file and read its page count.

    Args:
        file_content: Raw bytes of the PDF file.
        mime_type: Declared MIME type of the upload.
        max_size: Size ceiling in bytes.

    Returns:
        PDFInfo with page count, size, and metadata.

    Raises:
        PDFParseError: If the file is not a PDF, too large, empty, or corrupt.
    """
    _validate_pdf_bytes(file_content, mime_type, max_size)

    try:
        reader = PdfReader(io.BytesIO(file_content))
        pages = len(reader.pages)
    except PdfReadError as e:
        raise PDFParseError(f"Corrupt or invalid PDF: {e}") from e
    except Exception as e:
        raise PDFParseError(f"Failed to read PDF: {e}") from e

    if pages == 0:
        raise PDFParseError("PDF contains no pages")

    return PDFInfo(
        pages=pages,
        size_bytes=len(file_content),
        metadata=_extract_metadata(reader),
    )

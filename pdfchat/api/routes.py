"""PDF upload endpoint for document ingestion.

Handles file upload, validation, and hand-off to the session, which forwards
the document to the AI backend and requests the initial summary.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, UploadFile, status

from pdfchat.api.dependencies import get_session
from pdfchat.errors import NotReady
from pdfchat.models.schemas import PDFUploadResponse
from pdfchat.parsing.pdf_parser import PDF_MIME_TYPE, PDFParseError
from pdfchat.session.controller import SessionController

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["upload"])


def _validate_file_extension(filename: str | None) -> str:
    """Validate that file has .pdf extension.

    Args:
        filename: The uploaded filename.

    Returns:
        The validated filename.

    Raises:
        HTTPException: 400 if extension is invalid.
    """
    if not filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Filename is required",
        )

    if not filename.lower().endswith(".pdf"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only PDF files are accepted",
        )

    return filename


async def _read_and_validate_size(file: UploadFile, max_size: int) -> bytes:
    """Read file content and validate size.

    Args:
        file: The uploaded file.
        max_size: Size ceiling in bytes.

    Returns:
        File content as bytes.

    Raises:
        HTTPException: 413 if file exceeds size limit.
    """
    content = await file.read()

    if len(content) > max_size:
        size_mb = len(content) / (1024 * 1024)
        raise HTTPException(
            status_code=status.HTTP_413_CONTENT_TOO_LARGE,
            detail=(
                f"File size ({size_mb:.1f}MB) exceeds maximum allowed "
                f"({max_size / (1024 * 1024):.0f}MB)"
            ),
        )

    return content


@router.post("/pdf", response_model=PDFUploadResponse)
async def upload_pdf(
    file: UploadFile,
    session: SessionController = Depends(get_session),
) -> PDFUploadResponse:
    """Upload a PDF document and start a conversation about it.

    Replaces any previous document and its conversation. Returns once the
    backend has processed the file and produced the initial summary.

    Args:
        file: The uploaded PDF file (multipart/form-data).

    Returns:
        PDFUploadResponse with filename, page count, and the first reply.

    Raises:
        400: Invalid file (not PDF, empty, corrupt).
        409: Another upload or completion is in progress.
        413: File exceeds the size limit.
    """
    filename = _validate_file_extension(file.filename)
    content = await _read_and_validate_size(file, session.config.max_file_size_bytes)

    try:
        message = await session.submit_file(content, filename, PDF_MIME_TYPE)
    except NotReady as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except PDFParseError as e:
        logger.warning(f"PDF validation error for {filename}: {e}")
        raise HTTPException(
            status_code=(
                status.HTTP_413_CONTENT_TOO_LARGE
                if e.too_large
                else status.HTTP_400_BAD_REQUEST
            ),
            detail=str(e),
        ) from e

    success = session.file is not None
    if success:
        logger.info(f"Document ready for chat: {filename}")

    return PDFUploadResponse(
        filename=filename,
        pages=session.pagination.page_count,
        success=success,
        message=message,
        error=message.text if message.is_error else None,
    )

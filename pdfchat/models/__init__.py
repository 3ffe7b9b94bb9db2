"""Pydantic models for the transcript and the HTTP API.

Provides type safety, validation, and automatic OpenAPI documentation.

Models:
    - FileReference: Backend handle for an uploaded document
    - TextPart / FileRefPart: Content parts of a turn
    - Turn: Immutable transcript entry
    - Citation: ``[Page N]`` marker located in generated text
    - Message: Rendering-facing projection of a turn
    - ChatRequest / ChatResponse, PDFUploadResponse, SessionSnapshot: API payloads
"""

from pdfchat.models.schemas import (
    CancelResponse,
    ChatRequest,
    ChatResponse,
    PageRequest,
    PageResponse,
    PDFUploadResponse,
    SessionSnapshot,
)
from pdfchat.models.transcript import (
    Citation,
    ContentPart,
    FileReference,
    FileRefPart,
    Message,
    ProcessingState,
    Role,
    TextPart,
    Turn,
)

__all__ = [
    "CancelResponse",
    "ChatRequest",
    "ChatResponse",
    "Citation",
    "ContentPart",
    "FileRefPart",
    "FileReference",
    "Message",
    "PDFUploadResponse",
    "PageRequest",
    "PageResponse",
    "ProcessingState",
    "Role",
    "SessionSnapshot",
    "TextPart",
    "Turn",
]

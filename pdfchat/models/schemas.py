from pydantic import BaseModel, Field, field_validator

from pdfchat.models.transcript import FileReference, Message


class ChatRequest(BaseModel):
    """Request payload for the chat endpoint.

    Attributes:
        message: User's question or prompt.
    """

    message: str = Field(..., min_length=1)

    @field_validator("message", mode="before")
    @classmethod
    def strip_message(cls, v: str) -> str:
        """Strip whitespace from message before validation."""
        if isinstance(v, str):
            return v.strip()
        return v


class ChatResponse(BaseModel):
    """The model's reply to a chat request.

    Attributes:
        message: The appended MODEL message (may be an error entry).
        state: Session state after the reply.
    """

    message: Message
    state: str


class PDFUploadResponse(BaseModel):
    """Response after PDF upload processing.

    Attributes:
        filename: Name of the uploaded file.
        pages: Number of pages in the document.
        success: Whether the document is ready for chat.
        message: The first MODEL message (summary or error entry).
        error: Error message if upload failed.
    """

    filename: str
    pages: int
    success: bool
    message: Message
    error: str | None = None


class PageRequest(BaseModel):
    """Viewer navigation request."""

    page: int = Field(..., ge=1)


class PageResponse(BaseModel):
    current_page: int
    page_count: int
    fragment: str


class SessionSnapshot(BaseModel):
    """Current state of the session for the presentation layer.

    Attributes:
        state: Session lifecycle state.
        file: The processed document reference, if any.
        current_page: Page shown by the viewer.
        page_count: Pages in the active document (0 if none).
        message_count: Number of transcript entries.
    """

    state: str
    file: FileReference | None = None
    current_page: int
    page_count: int
    message_count: int = Field(ge=0)


class CancelResponse(BaseModel):
    cancelled: bool

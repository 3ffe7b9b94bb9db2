"""Domain models for the conversation transcript.

All models are frozen: a turn, once appended, never changes.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProcessingState(str, Enum):
    """Processing state of a file held by the AI backend."""

    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


class Role(str, Enum):
    """Speaker of a turn, using the backend's wire names."""

    USER = "user"
    MODEL = "model"


class FileReference(BaseModel):
    """Opaque handle to a file stored by the AI backend.

    Attributes:
        handle: Backend resource name used for status polling.
        uri: URI the completion endpoint uses to reference the file.
        mime_type: MIME type reported by the backend.
        processing_state: Current processing state.
        display_name: Name the file was uploaded under.
    """

    model_config = ConfigDict(frozen=True)

    handle: str
    uri: str
    mime_type: str
    processing_state: ProcessingState = ProcessingState.PENDING
    display_name: str = ""

    @property
    def is_terminal(self) -> bool:
        return self.processing_state is not ProcessingState.PENDING


class TextPart(BaseModel):
    """Plain text content."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str


class FileRefPart(BaseModel):
    """Reference to an uploaded file."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["file_ref"] = "file_ref"
    file: FileReference


ContentPart = Annotated[TextPart | FileRefPart, Field(discriminator="kind")]


class Turn(BaseModel):
    """One entry of the transcript.

    Attributes:
        id: Stable identifier, reused as the view-model message id.
        role: Who produced the turn.
        parts: Ordered content parts.
        created_at: Creation timestamp (UTC).
        is_error: True when the session wrote this turn to report a failure.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: Role
    parts: tuple[ContentPart, ...]
    created_at: datetime = Field(default_factory=_utcnow)
    is_error: bool = False

    @classmethod
    def for_user(cls, *parts: TextPart | FileRefPart) -> "Turn":
        return cls(role=Role.USER, parts=parts)

    @classmethod
    def for_model(cls, text: str, is_error: bool = False) -> "Turn":
        return cls(role=Role.MODEL, parts=(TextPart(text=text),), is_error=is_error)

    @property
    def text(self) -> str:
        """Concatenated text parts, ignoring file references."""
        return "\n".join(p.text for p in self.parts if isinstance(p, TextPart))


class Citation(BaseModel):
    """A ``[Page N]`` marker found in generated text.

    Attributes:
        page: 1-indexed page number.
        raw_marker: The exact matched substring.
        span_start: Offset of the first character of the marker.
        span_end: Offset one past the last character of the marker.
    """

    model_config = ConfigDict(frozen=True)

    page: int = Field(ge=1)
    raw_marker: str
    span_start: int = Field(ge=0)
    span_end: int = Field(ge=0)


class Message(BaseModel):
    """Rendering-facing projection of a turn."""

    model_config = ConfigDict(frozen=True)

    id: str
    role: Role
    text: str
    timestamp: datetime
    is_error: bool = False
    citations: list[Citation] = Field(default_factory=list)

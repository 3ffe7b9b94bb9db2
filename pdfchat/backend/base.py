"""Backend protocols and wire models.

The session core talks to the AI provider only through these two protocols,
so tests and alternate providers can be injected in place of Gemini.
"""

from typing import Literal, Protocol

from pydantic import BaseModel, Field

from pdfchat.models.transcript import ProcessingState


class RemoteFile(BaseModel):
    """Storage API response for an uploaded file."""

    handle: str
    uri: str
    mime_type: str
    state: ProcessingState


class WireFileRef(BaseModel):
    uri: str
    mime_type: str


class WirePart(BaseModel):
    """One part of a wire turn: either text or a file reference."""

    text: str | None = None
    file_ref: WireFileRef | None = None


class WireTurn(BaseModel):
    role: Literal["user", "model"]
    parts: list[WirePart] = Field(min_length=1)


class CompletionRequest(BaseModel):
    """Payload sent to the completion endpoint on every call."""

    model: str
    system_instruction: str
    turns: list[WireTurn] = Field(min_length=1)


class CompletionResponse(BaseModel):
    """Completion endpoint result; ``text`` is None when nothing was generated."""

    text: str | None = None


class StorageBackend(Protocol):
    """File storage endpoint of the AI backend.

    Implementations raise ``BackendError`` on transport or API failure.
    """

    async def upload(self, data: bytes, display_name: str, mime_type: str) -> RemoteFile: ...

    async def get(self, handle: str) -> RemoteFile: ...


class CompletionBackend(Protocol):
    """Stateless completion endpoint of the AI backend.

    Implementations raise ``BackendError`` on transport or API failure.
    """

    async def generate(self, request: CompletionRequest) -> CompletionResponse: ...

"""Gemini implementation of the storage and completion backends.

Uses the google-genai SDK's async client. Files go through the Files API
(upload, then poll ``files.get`` until the file is ACTIVE) and completions
through ``models.generate_content`` with the whole transcript as contents.
"""

import io
import logging

import httpx
from google import genai
from google.genai import errors, types

from pdfchat.backend.base import (
    CompletionRequest,
    CompletionResponse,
    RemoteFile,
    WirePart,
)
from pdfchat.backend.config import BackendConfig, get_backend_config
from pdfchat.errors import BackendError
from pdfchat.models.transcript import ProcessingState

logger = logging.getLogger(__name__)

_STATE_MAP = {
    types.FileState.ACTIVE: ProcessingState.READY,
    types.FileState.FAILED: ProcessingState.FAILED,
}


def _to_remote_file(file: types.File) -> RemoteFile:
    if not file.name:
        raise BackendError("Storage API returned a file without a name")
    return RemoteFile(
        handle=file.name,
        uri=file.uri or "",
        mime_type=file.mime_type or "",
        state=_STATE_MAP.get(file.state, ProcessingState.PENDING),
    )


def _to_part(part: WirePart) -> types.Part:
    if part.file_ref is not None:
        return types.Part.from_uri(
            file_uri=part.file_ref.uri,
            mime_type=part.file_ref.mime_type,
        )
    return types.Part.from_text(text=part.text or "")


def to_contents(request: CompletionRequest) -> list[types.Content]:
    """Convert wire turns into google-genai contents."""
    return [
        types.Content(role=turn.role, parts=[_to_part(p) for p in turn.parts])
        for turn in request.turns
    ]


class GeminiBackend:
    """Storage and completion backend backed by a single genai client.

    The client only carries credentials; no conversation state lives here,
    so one instance can serve any number of sessions.
    """

    def __init__(
        self,
        config: BackendConfig | None = None,
        client: genai.Client | None = None,
    ) -> None:
        """Initialize the backend.

        Args:
            config: Optional backend configuration.
                    Loads from environment if not provided.
            client: Optional pre-built genai client.
        """
        if client is None:
            self._config = config or get_backend_config()
            client = genai.Client(api_key=self._config.api_key)
        self._client = client

    async def upload(self, data: bytes, display_name: str, mime_type: str) -> RemoteFile:
        try:
            file = await self._client.aio.files.upload(
                file=io.BytesIO(data),
                config=types.UploadFileConfig(
                    mime_type=mime_type,
                    display_name=display_name,
                ),
            )
        except (errors.APIError, httpx.HTTPError) as e:
            raise BackendError(f"File upload failed: {e}") from e
        return _to_remote_file(file)

    async def get(self, handle: str) -> RemoteFile:
        try:
            file = await self._client.aio.files.get(name=handle)
        except (errors.APIError, httpx.HTTPError) as e:
            raise BackendError(f"File status check failed: {e}") from e
        return _to_remote_file(file)

    async def generate(self, request: CompletionRequest) -> CompletionResponse:
        try:
            response = await self._client.aio.models.generate_content(
                model=request.model,
                contents=to_contents(request),
                config=types.GenerateContentConfig(
                    system_instruction=request.system_instruction,
                ),
            )
        except (errors.APIError, httpx.HTTPError) as e:
            raise BackendError(f"Content generation failed: {e}") from e
        return CompletionResponse(text=response.text)

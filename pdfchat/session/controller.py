"""Session controller: the state machine behind a document conversation.

One session holds one active document and its transcript. Every mutating
operation is guarded by the session state, so at most one network operation
(upload or completion) is in flight at a time. Overlapping calls are
rejected with ``NotReady`` rather than queued, because interleaved
completions against the same transcript would corrupt turn order.

Backend failures never propagate out of ``submit_file``/``submit_message``.
They are written into the transcript as a MODEL turn so the conversation
itself shows what went wrong.
"""

import logging
from collections.abc import Callable, Iterator
from enum import Enum

from pdfchat.backend.base import CompletionBackend, StorageBackend
from pdfchat.backend.completion_client import CompletionClient
from pdfchat.backend.config import SessionConfig, get_session_config
from pdfchat.backend.upload_gateway import UploadGateway
from pdfchat.cancellation import CancellationToken
from pdfchat.errors import (
    CompletionError,
    CompletionErrorKind,
    NotReady,
    OperationCancelled,
    UploadError,
    UploadErrorKind,
)
from pdfchat.models.transcript import (
    FileReference,
    FileRefPart,
    Message,
    Role,
    TextPart,
    Turn,
)
from pdfchat.parsing.citations import extract_citations
from pdfchat.parsing.pdf_parser import PDF_MIME_TYPE, PDFInfo, inspect_pdf
from pdfchat.session.pagination import PaginationController

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """Lifecycle states of a session."""

    EMPTY = "empty"
    UPLOADING = "uploading"
    READY_IDLE = "ready_idle"
    AWAITING_COMPLETION = "awaiting_completion"


BUSY_STATES = frozenset({SessionState.UPLOADING, SessionState.AWAITING_COMPLETION})

StateListener = Callable[[SessionState, SessionState], None]
MessageListener = Callable[[Message], None]


class Transcript:
    """Append-only, ordered sequence of turns."""

    def __init__(self) -> None:
        self._turns: list[Turn] = []

    def append(self, turn: Turn) -> None:
        self._turns.append(turn)

    @property
    def turns(self) -> tuple[Turn, ...]:
        return tuple(self._turns)

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(tuple(self._turns))


def to_message(turn: Turn) -> Message:
    """Project a turn onto the view model, resolving citations in replies."""
    text = turn.text
    citations = list(extract_citations(text)) if turn.role is Role.MODEL else []
    return Message(
        id=turn.id,
        role=turn.role,
        text=text,
        timestamp=turn.created_at,
        is_error=turn.is_error,
        citations=citations,
    )


UNEXPECTED_ERROR_TEXT = "Error: something went wrong. Please try again."


def describe_upload_error(error: UploadError) -> str:
    if error.kind is UploadErrorKind.TRANSPORT:
        return (
            "Error: the document could not be uploaded. "
            "Please check your connection and try again."
        )
    return f"Error: the document could not be prepared for chat ({error.reason})."


def describe_completion_error(error: CompletionError) -> str:
    if error.kind is CompletionErrorKind.EMPTY_RESPONSE:
        return "Error: the assistant returned an empty response. Please try again."
    if error.kind is CompletionErrorKind.INVALID_INPUT:
        return f"Error: the conversation could not be sent ({error.detail})."
    return "Error: the assistant could not be reached. Please try again."


class SessionController:
    """Orchestrates upload, transcript, completion, and pagination.

    Backends are injected so the controller holds no global client state
    and can run against test doubles.
    """

    def __init__(
        self,
        storage: StorageBackend,
        completion: CompletionBackend,
        config: SessionConfig | None = None,
    ) -> None:
        """Initialize an empty session.

        Args:
            storage: Backend file storage.
            completion: Backend completion endpoint.
            config: Optional session configuration.
                    Loads from environment if not provided.
        """
        self._config = config or get_session_config()
        self._gateway = UploadGateway(storage, self._config.poll_policy())
        self._client = CompletionClient(completion, self._config.completion_model)

        self._state = SessionState.EMPTY
        self._file: FileReference | None = None
        self._document: PDFInfo | None = None
        self._transcript = Transcript()
        self._pagination = PaginationController()
        self._token: CancellationToken | None = None

        self._state_listeners: list[StateListener] = []
        self._message_listeners: list[MessageListener] = []

    # === Read side ===

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def is_busy(self) -> bool:
        return self._state in BUSY_STATES

    @property
    def file(self) -> FileReference | None:
        return self._file

    @property
    def document(self) -> PDFInfo | None:
        return self._document

    @property
    def transcript(self) -> tuple[Turn, ...]:
        return self._transcript.turns

    @property
    def pagination(self) -> PaginationController:
        return self._pagination

    def messages(self) -> list[Message]:
        """View models for every turn, in transcript order."""
        return [to_message(turn) for turn in self._transcript]

    def current_page(self) -> int:
        return self._pagination.current_page

    def set_page(self, page: int) -> int:
        return self._pagination.set_page(page)

    # === Subscriptions ===

    def on_state_change(self, callback: StateListener) -> Callable[[], None]:
        """Register ``callback(old, new)``; returns a function that unregisters it."""
        self._state_listeners.append(callback)
        return lambda: self._state_listeners.remove(callback)

    def on_message(self, callback: MessageListener) -> Callable[[], None]:
        """Register ``callback(message)`` for appended turns."""
        self._message_listeners.append(callback)
        return lambda: self._message_listeners.remove(callback)

    # === Operations ===

    async def submit_file(
        self,
        data: bytes,
        display_name: str,
        mime_type: str = PDF_MIME_TYPE,
    ) -> Message:
        """Replace the active document and ask for an initial summary.

        Args:
            data: Raw PDF bytes.
            display_name: Original file name.
            mime_type: Declared MIME type.

        Returns:
            The final MODEL message: the summary, or an error entry.

        Raises:
            NotReady: If an upload or completion is already in flight.
            PDFParseError: If the file fails validation; the session is left untouched.
        """
        if self.is_busy:
            raise NotReady(f"Cannot upload while session is {self._state.value}")

        info = inspect_pdf(data, mime_type, self._config.max_file_size_bytes)

        self._file = None
        self._document = info
        self._transcript = Transcript()
        self._pagination.reset(info.pages)
        logger.info(f"Uploading {display_name} ({info.pages} pages, {info.size_bytes} bytes)")

        token = self._begin(SessionState.UPLOADING)
        try:
            try:
                file = await self._gateway.upload(data, display_name, mime_type, token)
            except UploadError as e:
                return self._fail(describe_upload_error(e))
            except OperationCancelled:
                return self._fail("Error: the upload was cancelled.", SessionState.EMPTY)
            except Exception:
                logger.exception(f"Unexpected failure while uploading {display_name}")
                return self._fail(UNEXPECTED_ERROR_TEXT)

            self._file = file
            self._append(
                Turn.for_user(FileRefPart(file=file), TextPart(text=self._config.seed_prompt))
            )
            self._set_state(SessionState.AWAITING_COMPLETION)
            return await self._complete(token)
        finally:
            self._end()

    async def submit_message(self, text: str) -> Message:
        """Append a user message and fetch the model's reply.

        Returns:
            The MODEL message appended in response: the reply or an error entry.

        Raises:
            NotReady: Unless the session is idle with a processed document.
            ValueError: If ``text`` is blank.
        """
        if self._state is not SessionState.READY_IDLE or self._file is None:
            raise NotReady(f"Cannot send a message while session is {self._state.value}")
        if not text or not text.strip():
            raise ValueError("Message must not be empty")

        self._append(Turn.for_user(TextPart(text=text)))
        token = self._begin(SessionState.AWAITING_COMPLETION)
        try:
            return await self._complete(token)
        finally:
            self._end()

    def cancel(self) -> bool:
        """Abandon the in-flight operation, if any.

        Returns:
            True if an operation was signalled.
        """
        if self._token is None:
            return False
        logger.info(f"Cancelling operation in state {self._state.value}")
        self._token.cancel()
        return True

    # === Internals ===

    async def _complete(self, token: CancellationToken) -> Message:
        try:
            text = await self._client.complete(
                self._transcript.turns, self._config.system_instruction, token
            )
        except CompletionError as e:
            return self._fail(describe_completion_error(e))
        except OperationCancelled:
            return self._fail("Error: the request was cancelled.")
        except Exception:
            logger.exception("Unexpected failure while waiting for a completion")
            return self._fail(UNEXPECTED_ERROR_TEXT)

        message = self._append(Turn.for_model(text))
        self._set_state(SessionState.READY_IDLE)
        return message

    def _begin(self, state: SessionState) -> CancellationToken:
        self._token = CancellationToken()
        self._set_state(state)
        return self._token

    def _end(self) -> None:
        self._token = None
        if self.is_busy:
            # Only reached when the calling task itself was cancelled mid-operation.
            self._set_state(
                SessionState.READY_IDLE if self._file else SessionState.EMPTY
            )

    def _fail(
        self,
        text: str,
        state: SessionState = SessionState.READY_IDLE,
    ) -> Message:
        logger.warning(f"Session operation failed: {text}")
        message = self._append(Turn.for_model(text, is_error=True))
        self._set_state(state)
        return message

    def _append(self, turn: Turn) -> Message:
        self._transcript.append(turn)
        message = to_message(turn)
        for listener in list(self._message_listeners):
            try:
                listener(message)
            except Exception:
                logger.exception("Message listener failed")
        return message

    def _set_state(self, state: SessionState) -> None:
        old, self._state = self._state, state
        if old is state:
            return
        logger.debug(f"Session state {old.value} -> {state.value}")
        for listener in list(self._state_listeners):
            try:
                listener(old, state)
            except Exception:
                logger.exception("State listener failed")

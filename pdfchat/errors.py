"""Exception hierarchy for the PDF chat core.

Backend failures (``UploadError``, ``CompletionError``) never escape the
session controller; it turns them into a visible transcript entry. Only
caller misuse (``NotReady``, ``InvalidDocumentError``) is raised to callers.
"""

from enum import Enum


class PDFChatError(Exception):
    """Base class for all errors raised by this package."""

    pass


class BackendError(PDFChatError):
    """Raised by a storage or completion backend when the remote call fails."""

    pass


class UploadErrorKind(str, Enum):
    """Failure categories for the upload gateway."""

    TRANSPORT = "transport"
    PROCESSING_FAILED = "processing_failed"


class UploadError(PDFChatError):
    """Raised when a file could not be made available to the AI backend.

    Attributes:
        kind: Failure category.
        reason: Short human-readable reason.
    """

    def __init__(self, kind: UploadErrorKind, reason: str) -> None:
        super().__init__(reason)
        self.kind = kind
        self.reason = reason


class CompletionErrorKind(str, Enum):
    """Failure categories for the completion client."""

    TRANSPORT = "transport"
    INVALID_INPUT = "invalid_input"
    EMPTY_RESPONSE = "empty_response"


class CompletionError(PDFChatError):
    """Raised when the completion endpoint did not produce usable text."""

    def __init__(self, kind: CompletionErrorKind, detail: str = "") -> None:
        super().__init__(detail or kind.value)
        self.kind = kind
        self.detail = detail


class NotReady(PDFChatError):
    """Raised when a session operation is called in a state that forbids it."""

    pass


class InvalidDocumentError(PDFChatError):
    """Raised when an uploaded file fails caller-side validation."""

    def __init__(self, message: str, too_large: bool = False) -> None:
        super().__init__(message)
        self.too_large = too_large


class OperationCancelled(PDFChatError):
    """Raised at a suspension point when its cancellation token has fired."""

    pass

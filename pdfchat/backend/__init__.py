"""AI backend access for the document chat.

Responsibilities:
    - Uploading documents to backend storage and polling until they are usable
    - Sending the full transcript to the stateless completion endpoint
    - Configuration of credentials, model, and poll policy

Backends are injected through the ``StorageBackend`` and ``CompletionBackend``
protocols; ``GeminiBackend`` implements both with google-genai.
"""

from pdfchat.backend.base import CompletionBackend, StorageBackend
from pdfchat.backend.completion_client import CompletionClient
from pdfchat.backend.config import (
    BackendConfig,
    PollPolicy,
    SessionConfig,
    get_backend_config,
    get_session_config,
)
from pdfchat.backend.gemini import GeminiBackend
from pdfchat.backend.upload_gateway import UploadGateway

__all__ = [
    "BackendConfig",
    "CompletionBackend",
    "CompletionClient",
    "GeminiBackend",
    "PollPolicy",
    "SessionConfig",
    "StorageBackend",
    "UploadGateway",
    "get_backend_config",
    "get_session_config",
]

"""Document chat session: state machine, transcript, and viewer pagination.

Responsibilities:
    - Seeding the transcript when a document is uploaded
    - Guarding against overlapping uploads and completions
    - Recording backend failures as visible transcript entries
    - Projecting turns into view models with resolved citations
"""

from pdfchat.session.controller import (
    SessionController,
    SessionState,
    Transcript,
    to_message,
)
from pdfchat.session.pagination import PaginationController

__all__ = [
    "PaginationController",
    "SessionController",
    "SessionState",
    "Transcript",
    "to_message",
]

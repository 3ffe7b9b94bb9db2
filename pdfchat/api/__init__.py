"""FastAPI endpoints for the PDF chat.

Endpoints:
    - GET /health: Service health status
    - POST /upload/pdf: Upload a document and get its summary
    - POST /chat: Ask a question about the active document
    - GET /chat/messages: Conversation with resolved citations
    - GET /session: Session state snapshot
    - GET|PUT /session/page: Viewer page
    - POST /session/cancel: Abandon the in-flight request
"""

from pdfchat.api.app import app, create_app

__all__ = ["app", "create_app"]

"""Request dependencies shared by the API routers."""

import logging

from fastapi import HTTPException, Request, status
from pydantic import ValidationError

from pdfchat.backend.gemini import GeminiBackend
from pdfchat.session.controller import SessionController

logger = logging.getLogger(__name__)


def create_default_session() -> SessionController:
    """Build a session wired to the Gemini backend from environment config.

    Raises:
        ValidationError: If the API key or session settings are invalid.
    """
    backend = GeminiBackend()
    return SessionController(storage=backend, completion=backend)


def get_session(request: Request) -> SessionController:
    """Return the application's session, creating it on first use.

    Raises:
        HTTPException: 503 if the backend is not configured.
    """
    session: SessionController | None = request.app.state.session
    if session is None:
        try:
            session = create_default_session()
        except ValidationError as e:
            logger.error(f"Backend configuration invalid: {e}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="AI backend is not configured",
            ) from e
        request.app.state.session = session
    return session

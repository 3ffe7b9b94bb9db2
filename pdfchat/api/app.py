"""FastAPI application factory and configuration.

Main application entry point with lifespan management, middleware,
and router registration.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pdfchat import __version__
from pdfchat.api.chat import router as chat_router
from pdfchat.api.routes import router as upload_router
from pdfchat.api.viewer import router as session_router
from pdfchat.session.controller import SessionController

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application startup and shutdown lifecycle.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    logger.info("Starting PDF Chat API...")
    yield
    session: SessionController | None = app.state.session
    if session is not None and session.cancel():
        logger.info("Cancelled in-flight request on shutdown")
    logger.info("Shutting down PDF Chat API...")


def create_app(session: SessionController | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        session: Optional pre-built session. When omitted, a Gemini-backed
                 session is created from the environment on first request.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="PDF Chat API",
        description=(
            "Upload a PDF and chat with a generative model about it. "
            "Replies cite source pages as [Page N] markers, which are resolved "
            "into citations that drive the document viewer."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    application.state.session = session

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    application.include_router(upload_router)
    application.include_router(chat_router)
    application.include_router(session_router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "pdf-chat"}

    return application


app = create_app()

"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - make_pdf: Factory producing real PDF bytes with pypdf
    - storage / completion: In-memory doubles for the AI backend
    - session_config: Fast configuration (no poll delay)
    - session: SessionController wired to the doubles
    - async_client: HTTPX client for API testing
"""

import io
from collections.abc import AsyncGenerator, Callable

import pytest
from httpx import ASGITransport, AsyncClient
from pypdf import PdfWriter

from pdfchat.api.app import create_app
from pdfchat.backend.config import SessionConfig
from pdfchat.session.controller import SessionController
from tests.fakes import FakeCompletion, FakeStorage


@pytest.fixture
def make_pdf() -> Callable[..., bytes]:
    """Return a factory for in-memory PDF files.

    Returns:
        Callable taking a page count and optional title.
    """

    def _make(pages: int = 3, title: str | None = None) -> bytes:
        writer = PdfWriter()
        for _ in range(pages):
            writer.add_blank_page(width=612, height=792)
        if title:
            writer.add_metadata({"/Title": title})
        buffer = io.BytesIO()
        writer.write(buffer)
        return buffer.getvalue()

    return _make


@pytest.fixture
def sample_pdf(make_pdf: Callable[..., bytes]) -> bytes:
    """A valid three-page PDF."""
    return make_pdf(3, title="Quarterly Report")


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def completion() -> FakeCompletion:
    return FakeCompletion()


@pytest.fixture
def session_config() -> SessionConfig:
    """Session configuration with no poll delay and a small size ceiling."""
    return SessionConfig(
        max_file_size_bytes=64 * 1024,
        poll_interval_ms=0,
        max_poll_attempts=5,
        completion_model="gemini-test",
        system_instruction="Cite pages as [Page X].",
        seed_prompt="Summarize this document.",
    )


@pytest.fixture
def session(
    storage: FakeStorage,
    completion: FakeCompletion,
    session_config: SessionConfig,
) -> SessionController:
    return SessionController(storage=storage, completion=completion, config=session_config)


@pytest.fixture
async def async_client(session: SessionController) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        AsyncClient bound to an app serving the fixture session.
    """
    transport = ASGITransport(app=create_app(session=session))
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

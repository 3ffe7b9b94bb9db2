"""Session status and viewer navigation endpoints."""

from fastapi import APIRouter, Depends

from pdfchat.api.dependencies import get_session
from pdfchat.models.schemas import (
    CancelResponse,
    PageRequest,
    PageResponse,
    SessionSnapshot,
)
from pdfchat.session.controller import SessionController

router = APIRouter(prefix="/session", tags=["session"])


def _page_response(session: SessionController) -> PageResponse:
    pagination = session.pagination
    return PageResponse(
        current_page=pagination.current_page,
        page_count=pagination.page_count,
        fragment=pagination.viewer_fragment(),
    )


@router.get("", response_model=SessionSnapshot)
async def get_snapshot(
    session: SessionController = Depends(get_session),
) -> SessionSnapshot:
    """Return the session state for the presentation layer."""
    return SessionSnapshot(
        state=session.state.value,
        file=session.file,
        current_page=session.current_page(),
        page_count=session.pagination.page_count,
        message_count=len(session.transcript),
    )


@router.put("/page", response_model=PageResponse)
async def set_page(
    request: PageRequest,
    session: SessionController = Depends(get_session),
) -> PageResponse:
    """Navigate the viewer, e.g. after a citation click.

    Pages beyond the document are clamped to the last page.
    """
    session.set_page(request.page)
    return _page_response(session)


@router.get("/page", response_model=PageResponse)
async def get_page(
    session: SessionController = Depends(get_session),
) -> PageResponse:
    return _page_response(session)


@router.post("/cancel", response_model=CancelResponse)
async def cancel(
    session: SessionController = Depends(get_session),
) -> CancelResponse:
    """Abandon the in-flight upload or completion, if any."""
    return CancelResponse(cancelled=session.cancel())

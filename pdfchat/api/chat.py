"""Chat endpoints: send a message about the active document, list the transcript."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from pdfchat.api.dependencies import get_session
from pdfchat.errors import NotReady
from pdfchat.models.schemas import ChatRequest, ChatResponse
from pdfchat.models.transcript import Message
from pdfchat.session.controller import SessionController

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    session: SessionController = Depends(get_session),
) -> ChatResponse:
    """Send a message and wait for the complete reply.

    Backend failures come back as an error entry in ``message`` rather than
    an HTTP error, mirroring what the transcript shows.

    Raises:
        409: No processed document, or another request is in flight.
    """
    try:
        message = await session.submit_message(request.message)
    except NotReady as e:
        logger.info(f"Rejected chat message: {e}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    return ChatResponse(message=message, state=session.state.value)


@router.get("/messages", response_model=list[Message])
async def list_messages(
    session: SessionController = Depends(get_session),
) -> list[Message]:
    """Return the conversation in order, with citations resolved."""
    return session.messages()

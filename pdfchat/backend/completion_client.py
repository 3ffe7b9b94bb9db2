"""Completion client: sends the whole transcript to the stateless endpoint.

The backend keeps no conversation state, so every call carries every turn.
Payload size therefore grows with the length of the conversation.
"""

import logging
from collections.abc import Sequence

from pdfchat.backend.base import (
    CompletionBackend,
    CompletionRequest,
    WireFileRef,
    WirePart,
    WireTurn,
)
from pdfchat.cancellation import CancellationToken
from pdfchat.errors import BackendError, CompletionError, CompletionErrorKind
from pdfchat.models.transcript import FileRefPart, TextPart, Turn

logger = logging.getLogger(__name__)


def _to_wire_part(part: TextPart | FileRefPart) -> WirePart:
    if isinstance(part, FileRefPart):
        return WirePart(
            file_ref=WireFileRef(uri=part.file.uri, mime_type=part.file.mime_type)
        )
    return WirePart(text=part.text)


def build_request(
    transcript: Sequence[Turn],
    system_instruction: str,
    model: str,
) -> CompletionRequest:
    """Serialize a transcript into the completion wire format.

    Raises:
        CompletionError: INVALID_INPUT if the transcript or any turn is empty.
    """
    if not transcript:
        raise CompletionError(CompletionErrorKind.INVALID_INPUT, "transcript is empty")

    turns: list[WireTurn] = []
    for index, turn in enumerate(transcript):
        if not turn.parts:
            raise CompletionError(
                CompletionErrorKind.INVALID_INPUT, f"turn {index} has no parts"
            )
        turns.append(
            WireTurn(role=turn.role.value, parts=[_to_wire_part(p) for p in turn.parts])
        )

    return CompletionRequest(
        model=model,
        system_instruction=system_instruction,
        turns=turns,
    )


class CompletionClient:
    """Turns a transcript into generated text or a typed ``CompletionError``."""

    def __init__(self, backend: CompletionBackend, model: str) -> None:
        self._backend = backend
        self._model = model

    async def complete(
        self,
        transcript: Sequence[Turn],
        system_instruction: str,
        token: CancellationToken | None = None,
    ) -> str:
        """Generate the next model reply.

        Args:
            transcript: Every turn so far, in conversation order.
            system_instruction: Fixed instruction for the model.
            token: Optional cancellation token.

        Returns:
            The generated text, unmodified.

        Raises:
            CompletionError: INVALID_INPUT before any network call, TRANSPORT
                on backend failure, EMPTY_RESPONSE when no text came back.
            OperationCancelled: If ``token`` fires.
        """
        request = build_request(transcript, system_instruction, self._model)
        token = token or CancellationToken()

        try:
            response = await token.guard(self._backend.generate(request))
        except BackendError as e:
            logger.error(f"Completion request failed: {e}")
            raise CompletionError(CompletionErrorKind.TRANSPORT, str(e)) from e

        if not response.text:
            logger.warning("Completion returned no text")
            raise CompletionError(CompletionErrorKind.EMPTY_RESPONSE, "no text generated")

        logger.info(
            f"Completion returned {len(response.text)} characters "
            f"for {len(request.turns)} turns"
        )
        return response.text

"""Unit tests for the SessionController state machine."""

import asyncio
from collections.abc import Callable
from unittest.mock import AsyncMock

import pytest
import pytest_check as check

from pdfchat.errors import BackendError, NotReady
from pdfchat.models.transcript import FileRefPart, ProcessingState, Role, TextPart
from pdfchat.parsing.pdf_parser import PDFParseError
from pdfchat.session.controller import SessionController, SessionState
from tests.fakes import FakeCompletion, FakeStorage, wait_for_state


class TestSubmitFile:
    """Tests for uploading a document."""

    async def test_upload_and_summary(
        self,
        session: SessionController,
        sample_pdf: bytes,
    ) -> None:
        """A ready file yields a seed turn plus a summary with citations."""
        message = await session.submit_file(sample_pdf, "report.pdf")

        check.equal(session.state, SessionState.READY_IDLE)
        check.is_not_none(session.file)
        check.equal(session.file.processing_state, ProcessingState.READY)
        check.equal(len(session.transcript), 2)

        seed = session.transcript[0]
        check.equal(seed.role, Role.USER)
        check.is_instance(seed.parts[0], FileRefPart)
        check.equal(seed.parts[0].file.uri, "https://storage.example/files/abc123")
        check.equal(seed.parts[1], TextPart(text="Summarize this document."))

        check.equal(message.role, Role.MODEL)
        check.equal(message.text, "Summary text [Page 1]")
        check.is_false(message.is_error)
        check.equal([c.page for c in message.citations], [1])

    async def test_sets_page_count_and_resets_page(
        self,
        session: SessionController,
        sample_pdf: bytes,
    ) -> None:
        await session.submit_file(sample_pdf, "report.pdf")

        check.equal(session.pagination.page_count, 3)
        check.equal(session.current_page(), 1)
        check.equal(session.document.pages, 3)

    async def test_processing_failure(
        self,
        completion: FakeCompletion,
        session_config,
        sample_pdf: bytes,
    ) -> None:
        """A file the backend rejects leaves one error turn and no file."""
        storage = FakeStorage(states=(ProcessingState.FAILED,))
        session = SessionController(storage, completion, session_config)

        message = await session.submit_file(sample_pdf, "report.pdf")

        check.equal(session.state, SessionState.READY_IDLE)
        check.is_none(session.file)
        check.equal(len(session.transcript), 1)
        check.is_true(message.is_error)
        check.is_true(message.text.startswith("Error:"))
        check.equal(completion.requests, [])

    async def test_upload_transport_failure(
        self,
        completion: FakeCompletion,
        session_config,
        sample_pdf: bytes,
    ) -> None:
        session = SessionController(FakeStorage(fail_upload=True), completion, session_config)

        message = await session.submit_file(sample_pdf, "report.pdf")

        check.is_true(message.is_error)
        check.is_in("could not be uploaded", message.text)
        check.is_none(session.file)

    async def test_summary_failure_keeps_file(
        self,
        storage: FakeStorage,
        session_config,
        sample_pdf: bytes,
    ) -> None:
        """A failed summary still leaves the document available for questions."""
        completion = FakeCompletion(replies=(BackendError("503"), "Answer [Page 2]"))
        session = SessionController(storage, completion, session_config)

        message = await session.submit_file(sample_pdf, "report.pdf")

        check.is_true(message.is_error)
        check.equal(session.state, SessionState.READY_IDLE)
        check.is_not_none(session.file)

        reply = await session.submit_message("What is on page 2?")
        check.equal(reply.text, "Answer [Page 2]")

    async def test_invalid_file_leaves_session_untouched(
        self,
        session: SessionController,
        sample_pdf: bytes,
        storage: FakeStorage,
    ) -> None:
        await session.submit_file(sample_pdf, "report.pdf")
        before = session.transcript

        with pytest.raises(PDFParseError):
            await session.submit_file(b"not a pdf", "notes.pdf")

        check.equal(session.transcript, before)
        check.equal(session.state, SessionState.READY_IDLE)
        check.equal(len(storage.upload_calls), 1)

    async def test_oversized_file_is_rejected(
        self,
        session: SessionController,
        make_pdf: Callable[..., bytes],
    ) -> None:
        oversized = make_pdf(1) + b"\x00" * (64 * 1024)

        with pytest.raises(PDFParseError) as exc_info:
            await session.submit_file(oversized, "big.pdf")

        check.is_true(exc_info.value.too_large)
        check.equal(session.state, SessionState.EMPTY)

    async def test_new_upload_replaces_transcript(
        self,
        session: SessionController,
        sample_pdf: bytes,
        make_pdf: Callable[..., bytes],
    ) -> None:
        """A second document starts a fresh conversation."""
        await session.submit_file(sample_pdf, "report.pdf")
        await session.submit_message("What is this?")
        session.set_page(3)
        check.equal(len(session.transcript), 4)

        await session.submit_file(make_pdf(5), "other.pdf")

        check.equal(len(session.transcript), 2)
        check.equal(session.pagination.page_count, 5)
        check.equal(session.current_page(), 1)
        check.equal(session.file.display_name, "other.pdf")


class TestSubmitMessage:
    """Tests for follow-up questions."""

    async def test_requires_document(self, session: SessionController) -> None:
        with pytest.raises(NotReady):
            await session.submit_message("Hello?")

        check.equal(session.transcript, ())

    async def test_rejects_blank_text(
        self,
        session: SessionController,
        sample_pdf: bytes,
    ) -> None:
        await session.submit_file(sample_pdf, "report.pdf")

        with pytest.raises(ValueError):
            await session.submit_message("   ")

        check.equal(len(session.transcript), 2)

    async def test_sends_whole_transcript(
        self,
        session: SessionController,
        completion: FakeCompletion,
        sample_pdf: bytes,
    ) -> None:
        """Each completion carries every prior turn plus the new question."""
        await session.submit_file(sample_pdf, "report.pdf")

        await session.submit_message("Who wrote it?")

        request = completion.requests[-1]
        check.equal([t.role for t in request.turns], ["user", "model", "user"])
        check.equal(request.turns[-1].parts[0].text, "Who wrote it?")
        check.equal(request.system_instruction, "Cite pages as [Page X].")
        check.equal(request.model, "gemini-test")

    async def test_completion_failure_appends_one_error_turn(
        self,
        storage: FakeStorage,
        session_config,
        sample_pdf: bytes,
    ) -> None:
        completion = FakeCompletion(replies=("Summary [Page 1]", None))
        session = SessionController(storage, completion, session_config)
        await session.submit_file(sample_pdf, "report.pdf")

        message = await session.submit_message("And then?")

        check.equal(len(session.transcript), 4)
        check.equal(session.transcript[-1].role, Role.MODEL)
        check.is_true(message.is_error)
        check.is_in("empty response", message.text)
        check.equal(session.state, SessionState.READY_IDLE)

    async def test_rejected_while_awaiting_completion(
        self,
        session: SessionController,
        completion: FakeCompletion,
        sample_pdf: bytes,
    ) -> None:
        """Overlapping requests are refused and leave the transcript unchanged."""
        await session.submit_file(sample_pdf, "report.pdf")
        completion.gate = asyncio.Event()

        task = asyncio.create_task(session.submit_message("First question"))
        await wait_for_state(session, SessionState.AWAITING_COMPLETION)
        before = session.transcript

        with pytest.raises(NotReady):
            await session.submit_message("Second question")
        with pytest.raises(NotReady):
            await session.submit_file(sample_pdf, "report.pdf")
        check.equal(session.transcript, before)

        completion.gate.set()
        await task
        check.equal(len(session.transcript), 4)
        check.equal(session.state, SessionState.READY_IDLE)

    async def test_unexpected_completion_failure_appends_error_turn(
        self,
        storage: FakeStorage,
        session_config,
        sample_pdf: bytes,
    ) -> None:
        """Errors the backend does not translate still end in one error reply."""
        completion = FakeCompletion(replies=("Summary [Page 1]", RuntimeError("socket closed")))
        session = SessionController(storage, completion, session_config)
        await session.submit_file(sample_pdf, "report.pdf")

        message = await session.submit_message("Question?")

        check.equal([t.role.value for t in session.transcript], ["user", "model", "user", "model"])
        check.is_true(message.is_error)
        check.equal(session.state, SessionState.READY_IDLE)

    async def test_unexpected_upload_failure_appends_error_turn(
        self,
        storage: FakeStorage,
        session: SessionController,
        sample_pdf: bytes,
    ) -> None:
        storage.upload = AsyncMock(side_effect=RuntimeError("socket closed"))

        message = await session.submit_file(sample_pdf, "report.pdf")

        check.is_true(message.is_error)
        check.is_none(session.file)
        check.equal(len(session.transcript), 1)
        check.equal(session.state, SessionState.READY_IDLE)

    async def test_reply_with_zero_padded_marker_stays_readable(
        self,
        storage: FakeStorage,
        session_config,
        sample_pdf: bytes,
    ) -> None:
        """A pathological citation marker neither breaks the reply nor the message list."""
        completion = FakeCompletion(replies=("See [Page " + "0" * 5000 + "3]",))
        session = SessionController(storage, completion, session_config)

        message = await session.submit_file(sample_pdf, "report.pdf")

        check.equal([c.page for c in message.citations], [3])
        check.equal(len(session.messages()), 2)


class TestCancel:
    """Tests for abandoning in-flight work."""

    async def test_cancel_when_idle(self, session: SessionController) -> None:
        check.is_false(session.cancel())

    async def test_cancel_during_upload(
        self,
        session: SessionController,
        storage: FakeStorage,
        sample_pdf: bytes,
    ) -> None:
        storage.gate = asyncio.Event()

        task = asyncio.create_task(session.submit_file(sample_pdf, "report.pdf"))
        await wait_for_state(session, SessionState.UPLOADING)
        check.is_true(session.cancel())
        message = await task

        check.equal(session.state, SessionState.EMPTY)
        check.is_none(session.file)
        check.is_true(message.is_error)
        check.is_in("cancelled", message.text)

    async def test_cancel_during_completion(
        self,
        session: SessionController,
        completion: FakeCompletion,
        sample_pdf: bytes,
    ) -> None:
        await session.submit_file(sample_pdf, "report.pdf")
        completion.gate = asyncio.Event()

        task = asyncio.create_task(session.submit_message("Slow question"))
        await wait_for_state(session, SessionState.AWAITING_COMPLETION)
        session.cancel()
        message = await task

        check.equal(session.state, SessionState.READY_IDLE)
        check.is_true(message.is_error)
        check.equal(len(session.transcript), 4)

        # Session accepts new work after cancelling
        completion.gate.set()
        reply = await session.submit_message("Try again")
        check.is_false(reply.is_error)


class TestListenersAndMessages:
    """Tests for subscriptions and the view-model projection."""

    async def test_state_transitions_are_published(
        self,
        session: SessionController,
        sample_pdf: bytes,
    ) -> None:
        transitions: list[tuple[SessionState, SessionState]] = []
        session.on_state_change(lambda old, new: transitions.append((old, new)))

        await session.submit_file(sample_pdf, "report.pdf")

        assert transitions == [
            (SessionState.EMPTY, SessionState.UPLOADING),
            (SessionState.UPLOADING, SessionState.AWAITING_COMPLETION),
            (SessionState.AWAITING_COMPLETION, SessionState.READY_IDLE),
        ]

    async def test_message_listener_and_unsubscribe(
        self,
        session: SessionController,
        sample_pdf: bytes,
    ) -> None:
        seen: list[str] = []
        unsubscribe = session.on_message(lambda m: seen.append(m.role.value))

        await session.submit_file(sample_pdf, "report.pdf")
        unsubscribe()
        await session.submit_message("More?")

        check.equal(seen, ["user", "model"])

    async def test_failing_listener_does_not_break_session(
        self,
        session: SessionController,
        sample_pdf: bytes,
    ) -> None:
        def broken(message) -> None:
            raise RuntimeError("render failed")

        session.on_message(broken)

        message = await session.submit_file(sample_pdf, "report.pdf")

        check.is_false(message.is_error)
        check.equal(session.state, SessionState.READY_IDLE)

    async def test_messages_mirror_transcript(
        self,
        session: SessionController,
        sample_pdf: bytes,
    ) -> None:
        """One message per turn, same ids, citations only on replies."""
        await session.submit_file(sample_pdf, "report.pdf")
        await session.submit_message("Where is [Page 2] discussed?")

        messages = session.messages()

        check.equal([m.id for m in messages], [t.id for t in session.transcript])
        check.equal(messages[2].role, Role.USER)
        check.equal(messages[2].citations, [])
        check.equal(len(messages[3].citations), 1)

    async def test_set_page_clamps(
        self,
        session: SessionController,
        sample_pdf: bytes,
    ) -> None:
        await session.submit_file(sample_pdf, "report.pdf")

        check.equal(session.set_page(99), 3)
        check.equal(session.set_page(0), 1)

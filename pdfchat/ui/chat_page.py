"""NiceGUI chat page: document viewer on the left, conversation on the right.

Talks to the HTTP API only. Replies are revealed with a typewriter effect
driven by ``ui.timer`` over already-complete text; citation markers become
buttons that move the viewer to the cited page.
"""

import base64
import os
import re

import httpx
from nicegui import events, ui

from pdfchat.parsing.citations import split_citations

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")
REQUEST_TIMEOUT = 600.0
TYPEWRITER_INTERVAL = 0.02
TYPEWRITER_STEP = 3

QUICK_QUESTIONS = [
    "What is this document about?",
    "Summarize the key points",
    "What are the main conclusions?",
]


def inline_markdown_to_html(text: str) -> str:
    """Convert inline markdown to HTML for chat display.

    Supports: bold, italic, inline code, line breaks.
    """
    text = text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
    text = re.sub(
        r"`([^`]+)`",
        r'<code class="bg-gray-200 text-pink-600 px-1 rounded text-xs">\1</code>',
        text,
    )
    text = re.sub(r"\*\*(.+?)\*\*", r"<strong>\1</strong>", text)
    text = re.sub(r"\*([^*\n]+)\*", r"<em>\1</em>", text)
    return text.replace("\n", "<br>")


CUSTOM_CSS = """
<style>
    body { background: #f5f5f5; }
    .panel {
        background: white;
        border-radius: 12px;
        box-shadow: 0 2px 8px rgba(0, 0, 0, 0.1);
        overflow: hidden;
    }
    .message-user { background: #3b82f6; color: white; border-radius: 18px 18px 4px 18px; }
    .message-assistant { background: #f3f4f6; color: #1f2937; border-radius: 18px 18px 18px 4px; }
    .message-error { background: #fef2f2; color: #991b1b; border-radius: 18px 18px 18px 4px; }
    .typing-dot {
        width: 8px; height: 8px; background: #3b82f6; border-radius: 50%;
        animation: bounce 1.4s infinite ease-in-out;
    }
    .typing-dot:nth-child(2) { animation-delay: 0.2s; }
    .typing-dot:nth-child(3) { animation-delay: 0.4s; }
    @keyframes bounce {
        0%, 60%, 100% { transform: translateY(0); }
        30% { transform: translateY(-6px); }
    }
</style>
"""


class ApiClient:
    """Thin async wrapper over the PDF chat HTTP API."""

    def __init__(self, base_url: str = API_BASE_URL) -> None:
        self._base_url = base_url

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        async with httpx.AsyncClient(base_url=self._base_url, timeout=REQUEST_TIMEOUT) as client:
            response = await client.request(method, path, **kwargs)
            response.raise_for_status()
            return response

    async def upload(self, filename: str, content: bytes) -> dict:
        response = await self._request(
            "POST", "/upload/pdf", files={"file": (filename, content, "application/pdf")}
        )
        return response.json()

    async def send(self, message: str) -> dict:
        response = await self._request("POST", "/chat", json={"message": message})
        return response.json()

    async def messages(self) -> list[dict]:
        response = await self._request("GET", "/chat/messages")
        return response.json()

    async def set_page(self, page: int) -> dict:
        response = await self._request("PUT", "/session/page", json={"page": page})
        return response.json()


def describe_http_error(error: httpx.HTTPError) -> str:
    if isinstance(error, httpx.HTTPStatusError):
        try:
            detail = error.response.json().get("detail")
        except ValueError:
            detail = None
        return str(detail or f"HTTP {error.response.status_code}")
    return f"Connection failed: {error}"


def parse_page_input(value: float | str | None) -> int | None:
    """Whole page number typed into the viewer, or None when it is not one."""
    if value is None:
        return None
    try:
        page = int(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return page if page >= 1 else None


class PageState:
    """Per-browser-tab view state."""

    def __init__(self) -> None:
        self.messages: list[dict] = []
        self.filename: str = ""
        self.pdf_url: str = ""
        self.current_page: int = 1
        self.page_count: int = 0
        self.is_busy: bool = False
        self.typing_id: str | None = None


@ui.page("/")
def chat_page() -> None:
    """Main page."""
    ui.add_head_html(CUSTOM_CSS)
    api = ApiClient()
    state = PageState()

    messages_container: ui.column
    viewer: ui.html
    page_input: ui.number
    page_label: ui.label
    input_field: ui.input
    send_btn: ui.button

    # === Viewer ===

    def refresh_viewer() -> None:
        page_input.set_value(state.current_page)
        page_label.set_text(f"of {state.page_count}" if state.page_count else "")
        if state.pdf_url:
            viewer.set_content(
                f'<iframe src="{state.pdf_url}#page={state.current_page}" '
                'class="w-full" style="height: calc(100vh - 12rem)" title="PDF Viewer"></iframe>'
            )

    async def go_to_page(page: int) -> None:
        try:
            result = await api.set_page(page)
        except httpx.HTTPError as e:
            ui.notify(describe_http_error(e), type="negative")
            return
        state.current_page = result["current_page"]
        state.page_count = result["page_count"]
        refresh_viewer()

    async def submit_page_input() -> None:
        page = parse_page_input(page_input.value)
        if page is None or page == state.current_page:
            page_input.set_value(state.current_page)
            return
        await go_to_page(page)

    # === Messages ===

    def render_text(msg: dict, text: str) -> None:
        if msg["role"] == "user" or msg.get("is_error"):
            ui.label(text).classes("text-sm whitespace-pre-wrap")
            return
        with ui.element("div").classes("text-sm leading-relaxed"):
            for segment in split_citations(text):
                if segment.kind == "citation":
                    ui.button(
                        f"Page {segment.page}",
                        icon="description",
                        on_click=lambda p=segment.page: go_to_page(p),
                    ).props("outline dense no-caps size=sm").classes("inline-flex mx-1")
                else:
                    ui.html(inline_markdown_to_html(segment.text), sanitize=False).classes(
                        "inline"
                    )

    def render_message(msg: dict) -> None:
        is_user = msg["role"] == "user"
        align = "justify-end" if is_user else "justify-start"
        if is_user:
            bubble = "message-user"
        else:
            bubble = "message-error" if msg.get("is_error") else "message-assistant"

        with ui.row().classes(f"w-full {align}"):
            with ui.element("div").classes(f"px-4 py-3 max-w-[80%] {bubble}"):
                if msg["id"] == state.typing_id:
                    typewriter(msg)
                else:
                    render_text(msg, msg["text"])

    def typewriter(msg: dict) -> None:
        label = ui.label("").classes("text-sm whitespace-pre-wrap")
        full_text = msg["text"]
        shown = 0

        def tick() -> None:
            nonlocal shown
            shown = min(shown + TYPEWRITER_STEP, len(full_text))
            label.set_text(full_text[:shown])
            if shown >= len(full_text):
                timer.deactivate()
                state.typing_id = None
                refresh_messages()

        timer = ui.timer(TYPEWRITER_INTERVAL, tick)

    def render_status_indicator(status_text: str) -> None:
        with ui.row().classes("w-full justify-start"):
            with ui.element("div").classes("message-assistant px-4 py-3"):
                with ui.row().classes("items-center gap-2"):
                    with ui.row().classes("gap-1"):
                        for _ in range(3):
                            ui.element("div").classes("typing-dot")
                    ui.label(status_text).classes("text-sm text-gray-500 italic")

    def refresh_messages(status_text: str | None = None) -> None:
        messages_container.clear()
        with messages_container:
            if not state.messages and status_text is None:
                with ui.column().classes("w-full h-64 items-center justify-center gap-3"):
                    ui.icon("forum").classes("text-5xl text-gray-300")
                    hint = (
                        "Ask me anything about your PDF document!"
                        if state.filename
                        else "Upload a PDF file to start chatting about its contents"
                    )
                    ui.label(hint).classes("text-gray-400")
            for msg in state.messages:
                render_message(msg)
            if status_text is not None:
                render_status_indicator(status_text)

    async def reload_messages(reveal_last: bool) -> None:
        try:
            state.messages = await api.messages()
        except httpx.HTTPError as e:
            ui.notify(describe_http_error(e), type="negative")
            return
        if reveal_last and state.messages and state.messages[-1]["role"] == "model":
            state.typing_id = state.messages[-1]["id"]
        refresh_messages()

    def set_busy(busy: bool) -> None:
        state.is_busy = busy
        if busy:
            send_btn.disable()
        else:
            send_btn.enable()

    # === Actions ===

    async def handle_upload(e: events.UploadEventArguments) -> None:
        if state.is_busy:
            ui.notify("Please wait for the current request to finish", type="warning")
            return
        content = await e.file.read()
        state.filename = e.file.name
        state.pdf_url = "data:application/pdf;base64," + base64.b64encode(content).decode()
        state.messages = []
        set_busy(True)
        refresh_messages("Processing document...")
        try:
            result = await api.upload(e.file.name, content)
        except httpx.HTTPError as err:
            state.pdf_url = ""
            ui.notify(describe_http_error(err), type="negative")
            refresh_messages()
            return
        finally:
            set_busy(False)

        state.current_page = 1
        state.page_count = result["pages"]
        file_label.set_text(state.filename)
        refresh_viewer()
        await reload_messages(reveal_last=True)

    async def send_message() -> None:
        text = (input_field.value or "").strip()
        if not text or state.is_busy:
            return
        if not state.filename:
            ui.notify("Upload a PDF first to start chatting", type="warning")
            return

        input_field.value = ""
        set_busy(True)
        state.messages.append({"id": "pending", "role": "user", "text": text})
        refresh_messages("Thinking...")
        try:
            await api.send(text)
        except httpx.HTTPError as err:
            ui.notify(describe_http_error(err), type="negative")
        finally:
            set_busy(False)
        await reload_messages(reveal_last=True)

    # === Layout ===

    with ui.row().classes("w-full p-4 gap-4 no-wrap items-stretch"):
        with ui.column().classes("w-1/2 panel p-4 gap-2"):
            with ui.row().classes("w-full items-center justify-between"):
                file_label = ui.label("PDF Viewer").classes("font-semibold truncate")
                with ui.row().classes("items-center gap-2"):
                    ui.button(
                        icon="chevron_left",
                        on_click=lambda: go_to_page(state.current_page - 1),
                    ).props("flat dense")
                    page_input = (
                        ui.number(value=1, min=1, format="%d")
                        .props("dense outlined")
                        .classes("w-16")
                        .on("keydown.enter", submit_page_input)
                        .on("blur", submit_page_input)
                    )
                    page_label = ui.label("").classes("text-sm text-gray-500")
                    ui.button(
                        icon="chevron_right",
                        on_click=lambda: go_to_page(state.current_page + 1),
                    ).props("flat dense")
            ui.upload(
                label="Choose PDF File",
                on_upload=handle_upload,
                auto_upload=True,
                max_files=1,
            ).props("accept=.pdf flat bordered").classes("w-full")
            viewer = ui.html("", sanitize=False).classes("w-full")

        with ui.column().classes("w-1/2 panel p-4 gap-2"):
            ui.label("Chat Assistant").classes("font-semibold")
            with ui.scroll_area().classes("w-full flex-grow bg-gray-50").style(
                "height: calc(100vh - 16rem)"
            ):
                messages_container = ui.column().classes("w-full gap-3 p-2")
                refresh_messages()
            with ui.row().classes("w-full gap-2 items-center no-wrap"):
                input_field = (
                    ui.input(placeholder="Ask about your PDF...")
                    .classes("flex-grow")
                    .on("keydown.enter", send_message)
                )
                send_btn = ui.button(icon="send", on_click=send_message).props("round")
            with ui.row().classes("gap-2"):
                for question in QUICK_QUESTIONS:
                    ui.chip(
                        question,
                        on_click=lambda q=question: input_field.set_value(q),
                    ).props("outline dense")

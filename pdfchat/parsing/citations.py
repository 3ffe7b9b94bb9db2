"""Citation marker extraction.

Generated answers reference the document with literal ``[Page N]`` markers.
Extraction is pure and never raises: anything that does not parse to a
usable page number is simply not a citation.
"""

import re
from collections.abc import Iterator
from typing import Literal

from pydantic import BaseModel

from pdfchat.models.transcript import Citation

CITATION_PATTERN = re.compile(r"\[Page ([0-9]+)\]")

# Far beyond any real document; larger values are treated as noise.
MAX_PAGE_NUMBER = 1_000_000


class Segment(BaseModel):
    """A run of message text, either plain or a citation marker."""

    kind: Literal["text", "citation"]
    text: str
    page: int | None = None


def _parse_page(digits: str) -> int | None:
    significant = digits.lstrip("0")
    if len(significant) > len(str(MAX_PAGE_NUMBER)):
        return None
    page = int(significant or "0")
    if page < 1 or page > MAX_PAGE_NUMBER:
        return None
    return page


def extract_citations(text: str) -> Iterator[Citation]:
    """Yield citations found in ``text``, left to right.

    Every call starts a fresh scan, so the result can be iterated again by
    calling the function again.

    Args:
        text: Generated text, possibly a partial fragment.

    Yields:
        Citation for each well-formed marker, duplicates included.
    """
    for match in CITATION_PATTERN.finditer(text):
        page = _parse_page(match.group(1))
        if page is None:
            continue
        yield Citation(
            page=page,
            raw_marker=match.group(0),
            span_start=match.start(),
            span_end=match.end(),
        )


def cited_pages(text: str) -> list[int]:
    """Distinct cited pages in order of first appearance."""
    seen: dict[int, None] = {}
    for citation in extract_citations(text):
        seen.setdefault(citation.page, None)
    return list(seen)


def split_citations(text: str) -> list[Segment]:
    """Split text into plain and citation segments for rendering.

    Text without markers comes back as a single plain segment, so renderers
    fall back to plain text with nothing clickable.
    """
    segments: list[Segment] = []
    cursor = 0
    for citation in extract_citations(text):
        if citation.span_start > cursor:
            segments.append(Segment(kind="text", text=text[cursor : citation.span_start]))
        segments.append(
            Segment(kind="citation", text=citation.raw_marker, page=citation.page)
        )
        cursor = citation.span_end
    if cursor < len(text) or not segments:
        segments.append(Segment(kind="text", text=text[cursor:]))
    return segments

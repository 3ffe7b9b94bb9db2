"""Document and answer parsing utilities.

Responsibilities:
    - PDF validation and page counting with pypdf
    - Extraction of ``[Page N]`` citation markers from generated answers
    - Splitting answers into plain and clickable segments for rendering
"""

from pdfchat.parsing.citations import (
    Segment,
    cited_pages,
    extract_citations,
    split_citations,
)
from pdfchat.parsing.pdf_parser import PDFInfo, PDFParseError, inspect_pdf

__all__ = [
    "PDFInfo",
    "PDFParseError",
    "Segment",
    "cited_pages",
    "extract_citations",
    "inspect_pdf",
    "split_citations",
]

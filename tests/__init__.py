"""Test package for PDF Chat.

Structure:
    - unit/: Individual function and class tests
    - integration/: API tests driving the full app over ASGI

The AI backend is replaced by in-memory doubles (tests/fakes.py); PDFs are
generated on the fly with pypdf. Leverages pytest with pytest-check for
soft assertions.
"""

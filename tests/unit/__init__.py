"""Unit tests for individual components in isolation.

Coverage:
    - parsing/: PDF inspection and citation extraction
    - backend/: Configuration, upload polling, completion requests, Gemini adapter
    - session/: State machine, cancellation, and pagination

Uses doubles or mocks for the AI backend. Leverages pytest-check for
multiple assertions per test.
"""

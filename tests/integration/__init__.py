"""Integration tests for components working together as a system.

Coverage:
    - API endpoints with real HTTP requests over ASGI transport
    - Full workflow from upload through summary, chat, and navigation

Only the AI backend is replaced; validation, session, and routing are real.
"""

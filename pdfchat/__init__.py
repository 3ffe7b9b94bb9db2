"""PDF Chat - converse with a generative model about an uploaded document.

Combines FastAPI for HTTP, google-genai for the Gemini backend,
NiceGUI for visualization, and Pydantic for data validation.

Components:
    - backend: File upload gateway and completion client
    - session: Conversation state machine and viewer pagination
    - parsing: PDF validation and citation extraction
    - api: HTTP endpoints over the session
    - ui: Web interface for chat interactions
    - models: Transcript and request/response schemas
"""

__version__ = "0.1.0"

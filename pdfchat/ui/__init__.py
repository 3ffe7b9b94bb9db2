"""NiceGUI interface - thin visualization layer for the document chat.

Responsibilities:
    - PDF upload and in-browser viewing with page navigation
    - Chat bubbles with clickable page citations
    - Typewriter reveal of completed replies

Contains no conversation state of its own. Delegates all operations to the API.
"""

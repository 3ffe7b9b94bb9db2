"""Viewer pagination state."""

from pdfchat.models.transcript import Citation


class PaginationController:
    """Current page and page count of the document viewer.

    Pages are 1-indexed. A page count of 0 means the count is unknown, in
    which case any positive page is accepted.
    """

    def __init__(self, page_count: int = 0) -> None:
        self._page_count = max(page_count, 0)
        self._current_page = 1

    @property
    def current_page(self) -> int:
        return self._current_page

    @property
    def page_count(self) -> int:
        return self._page_count

    def reset(self, page_count: int = 0) -> None:
        self._page_count = max(page_count, 0)
        self._current_page = 1

    def set_page(self, page: int) -> int:
        """Move to ``page``, clamped into the document's range.

        Returns:
            The page now shown.
        """
        page = max(page, 1)
        if self._page_count:
            page = min(page, self._page_count)
        self._current_page = page
        return page

    def next_page(self) -> int:
        return self.set_page(self._current_page + 1)

    def previous_page(self) -> int:
        return self.set_page(self._current_page - 1)

    def go_to_citation(self, citation: Citation) -> int:
        return self.set_page(citation.page)

    def viewer_fragment(self) -> str:
        """URL fragment that opens a browser PDF viewer at the current page."""
        return f"#page={self._current_page}"

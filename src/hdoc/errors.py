"""
Exceptions raised by hdoc.

All of them are RuntimeErrors so the CLI can report them uniformly.
"""

from typing import Optional


class ServerError(RuntimeError):
    """The godoc http server could not be reached, started or read."""


class ScrapeError(ServerError):
    """The server's /pkg/ page did not have the expected layout."""


class NotFoundError(RuntimeError):
    """No package on the server matches the search term."""

    def __init__(self, term: str, message: Optional[str] = None):
        self.term = term
        super().__init__(message or f"failed to find {term}")

"""
hdoc - open godoc for a Go package in the browser.

Finds (or starts) a local godoc http server, resolves a package name, path or
``pkg#Fragment`` argument against the server's package list, and opens the
matching page.
"""

__version__ = "0.1.0"

from hdoc.errors import NotFoundError, ServerError
from hdoc.paths import NormalizedArgument, normalize_argument, workspace_package
from hdoc.resolve import ResolvedTarget, Resolver
from hdoc.search import MatchResult, get_pkg_matches

__all__ = [
    "MatchResult",
    "NormalizedArgument",
    "NotFoundError",
    "ResolvedTarget",
    "Resolver",
    "ServerError",
    "get_pkg_matches",
    "normalize_argument",
    "workspace_package",
    "__version__",
]

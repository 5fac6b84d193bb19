"""
Resolve a normalized argument to a package on the godoc server.

The resolver never talks to the network itself. Whether a package page is
actually reachable is asked through the injected ``page_exists`` callable,
which lets the whole algorithm run against an in-memory fake.

Usage:
    from hdoc.paths import normalize_argument
    from hdoc.resolve import Resolver

    resolver = Resolver(pkgs, page_exists=server.page_exists, root=config.gopath)
    target = resolver.resolve(normalize_argument(cwd, 'byt'))
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

from hdoc.errors import NotFoundError
from hdoc.paths import NormalizedArgument, workspace_package
from hdoc.search import get_pkg_matches

logger = logging.getLogger(__name__)

# How a target was found
SOURCE_WORKSPACE = 'workspace'
SOURCE_PATH = 'path'
SOURCE_EXACT = 'exact'
SOURCE_SEARCH = 'search'


@dataclass(frozen=True)
class ResolvedTarget:
    """The package to open, plus the ranked candidates when a search was needed."""
    package: str
    fragment: Optional[str] = None
    source: str = SOURCE_PATH
    matches: Tuple[str, ...] = ()


class Resolver:
    """
    Pick the package for an argument.

    Resolution order:
        1. the path's location under ``<root>/src``
        2. the path itself, dropping one leading segment at a time
        3. name search: exact match, otherwise the first reachable candidate
    """

    def __init__(self, pkgs: Sequence[str], page_exists: Callable[[str], bool], root: str = ''):
        self.pkgs = tuple(pkgs)
        self.page_exists = page_exists
        self.root = root
        self._known = frozenset(self.pkgs)

    def _confirmed(self, pkg: str) -> bool:
        if pkg not in self._known:
            return False
        ok = self.page_exists(pkg)
        logger.debug(f"page_exists({pkg!r}) -> {ok}")
        return ok

    def resolve_path(self, path: str) -> Optional[Tuple[str, str]]:
        """
        Find a package for an absolute path. Returns (package, source) or None.
        """
        pkg, on_workspace = workspace_package(self.root, path)
        if on_workspace:
            logger.debug(f"path {path} is package {pkg} on workspace {self.root}")
            if self._confirmed(pkg):
                return pkg, SOURCE_WORKSPACE

        segments = [s for s in path.lstrip('/').split('/') if s]
        for i in range(len(segments)):
            candidate = '/'.join(segments[i:])
            if self._confirmed(candidate):
                logger.debug(f"path walk matched {candidate} after dropping {i} segment(s)")
                return candidate, SOURCE_PATH

        return None

    def resolve_name(self, name: str, fragment: Optional[str] = None,
                     term: Optional[str] = None) -> ResolvedTarget:
        """
        Resolve a (possibly partial) package name by search.

        ``term`` is what NotFoundError reports; it defaults to ``name``.
        """
        term = term or name
        matches, exact = get_pkg_matches(self.pkgs, name)
        logger.debug(f"search {name!r}: {len(matches)} match(es), exact={exact}")

        if exact:
            return ResolvedTarget(matches[0], fragment, SOURCE_EXACT, tuple(matches))

        for match in matches:
            if self._confirmed(match):
                return ResolvedTarget(match, fragment, SOURCE_SEARCH, tuple(matches))

        if matches:
            raise NotFoundError(
                term, f"failed to find {term}: {len(matches)} possible match(es), none reachable"
            )
        raise NotFoundError(term)

    def resolve(self, arg: NormalizedArgument, term: Optional[str] = None) -> ResolvedTarget:
        """
        Resolve ``arg``, raising NotFoundError when nothing fits.

        ``term`` is the argument as the user typed it, for the error message.
        """
        found = self.resolve_path(arg.path)
        if found:
            pkg, source = found
            return ResolvedTarget(pkg, arg.fragment, source)

        logger.debug(f"no package at path {arg.path}, searching for {arg.name!r}")
        return self.resolve_name(arg.name, arg.fragment, term)

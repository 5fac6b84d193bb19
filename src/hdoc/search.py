"""
Package name matching.

Ranks the packages known to the godoc server against a search term such as
"fmt", "byt" or "encoding/jso".
"""

from typing import List, NamedTuple, Sequence


class MatchResult(NamedTuple):
    """Ranked matches, best first. ``exact`` means matches[0] == term."""
    matches: List[str]
    exact: bool


def get_pkg_matches(pkgs: Sequence[str], term: str) -> MatchResult:
    """
    Return the packages in ``pkgs`` that match ``term``, best match first.

    Each package lands in the first bucket it qualifies for:

    1. exact     - equals term (reported via ``exact``, emitted first)
    2. suffix    - ends with term
    3. prefix    - starts with term
    4. contains  - has term somewhere inside

    Buckets are sorted individually and concatenated in that order.
    Comparisons are case-sensitive plain string tests.
    """
    if not term or not pkgs:
        return MatchResult([], False)

    exact = False
    suffix, prefix, contains = set(), set(), set()

    for pkg in pkgs:
        if pkg == term:
            exact = True
        elif pkg.endswith(term):
            suffix.add(pkg)
        elif pkg.startswith(term):
            prefix.add(pkg)
        elif term in pkg:
            contains.add(pkg)

    matches = [term] if exact else []
    matches.extend(sorted(suffix))
    matches.extend(sorted(prefix))
    matches.extend(sorted(contains))

    return MatchResult(matches, exact)

"""
Path handling for hdoc arguments.

Turns the single free-form command-line argument into an absolute path guess,
a package-name guess and an optional fragment, and maps directories under
``$GOPATH/src`` to package paths. Everything here is pure string work; the
filesystem is never touched.

Usage:
    from hdoc.paths import normalize_argument, workspace_package

    arg = normalize_argument('/go/src/github.com/me/proj', 'sub/pkg#Frag')
    pkg, found = workspace_package('/go', arg.path)
"""

import posixpath
import re
from dataclasses import dataclass
from typing import Optional, Tuple

# "C:" or any other colon-terminated volume prefix; never part of a fragment
_VOLUME_PREFIX = re.compile(r'^[^/\\:#]*:')


@dataclass(frozen=True)
class NormalizedArgument:
    """An argument split into path guess, package-name guess and fragment."""
    path: str
    name: str
    fragment: Optional[str] = None


def clean_file_path(p: str) -> str:
    """
    Lexically clean a path written in either slash convention.

    The volume prefix is dropped, backslashes become forward slashes, and
    ``.``/``..`` segments and repeated separators are resolved. An empty
    path cleans to ``"."``.

        clean_file_path('C:\\go\\src')       -> '/go/src'
        clean_file_path('\\\\server\\go')    -> '/server/go'
    """
    p = _VOLUME_PREFIX.sub('', p, count=1)
    p = p.replace('\\', '/')
    if not p:
        return '.'
    cleaned = posixpath.normpath(p)
    # normpath keeps a leading "//" (POSIX implementation-defined root)
    if cleaned.startswith('//'):
        cleaned = '/' + cleaned.lstrip('/')
    return cleaned


def _split_fragment(arg: str) -> Tuple[str, Optional[str]]:
    """Split ``path#fragment``; an empty fragment is reported as None."""
    head, sep, tail = arg.partition('#')
    if not sep:
        return arg, None

    # Only the text after the last '#' can be a fragment
    tail = tail.rpartition('#')[2]
    return head, tail or None


def normalize_argument(cwd: str, arg: str) -> NormalizedArgument:
    """
    Interpret ``arg`` relative to ``cwd``.

    Args:
        cwd: Current working directory (absolute; either slash convention)
        arg: Raw argument, possibly empty, possibly ``pkg#Fragment``

    Returns:
        NormalizedArgument. Never raises.
    """
    cwd = clean_file_path(cwd)
    cleaned = clean_file_path(arg) if arg else ''
    if cleaned == '.':
        cleaned = ''

    path_part, fragment = _split_fragment(cleaned)

    if not path_part:
        return NormalizedArgument(cwd, posixpath.basename(cwd), fragment)

    path_part = clean_file_path(path_part)
    if path_part == '.':
        return NormalizedArgument(cwd, posixpath.basename(cwd), fragment)

    if posixpath.isabs(path_part):
        return NormalizedArgument(path_part, posixpath.basename(path_part), fragment)

    # Relative: the name keeps every segment ("sub/pkg"), not just the last
    return NormalizedArgument(clean_file_path(posixpath.join(cwd, path_part)), path_part, fragment)


def workspace_package(root: str, dir_path: str) -> Tuple[str, bool]:
    """
    Return the package path of ``dir_path`` relative to ``<root>/src``.

        workspace_package('/go', '/go/src/github.com/x/y') -> ('github.com/x/y', True)
        workspace_package('/go', '/go/src')                -> ('', False)
        workspace_package('/go', '/go/src2/x')             -> ('', False)

    A root that is empty or not absolute never matches.
    """
    if not root:
        return '', False

    root = clean_file_path(root)
    if not posixpath.isabs(root):
        return '', False

    src_dir = posixpath.join(root, 'src')
    dir_path = clean_file_path(dir_path)

    if dir_path == src_dir or not dir_path.startswith(src_dir + '/'):
        return '', False

    pkg = dir_path[len(src_dir) + 1:]
    if not pkg:
        return '', False
    return pkg, True

"""
Runtime configuration, read from the environment.

    GODOC_HTTP_PORT   port of the godoc http server (default 6060)
    GOPATH            workspace root (default ~/go)
    HDOC_GODOC_BIN    godoc executable to start (default "godoc")
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_PORT = 6060
ENV_PORT = 'GODOC_HTTP_PORT'
ENV_GOPATH = 'GOPATH'
ENV_GODOC_BIN = 'HDOC_GODOC_BIN'


def _parse_port(value: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise ValueError(f"invalid {ENV_PORT} {value!r}: not a number")
    if not 0 < port < 65536:
        raise ValueError(f"invalid {ENV_PORT} {value!r}: out of range")
    return port


def default_gopath(environ: Optional[Mapping[str, str]] = None) -> str:
    """GOPATH as the go tool sees it: $GOPATH, else $HOME/go."""
    environ = os.environ if environ is None else environ
    gopath = environ.get(ENV_GOPATH, '')
    if gopath:
        # Only the first entry of a list is a usable root
        return gopath.split(os.pathsep)[0]
    home = environ.get('HOME') or str(Path.home())
    return os.path.join(home, 'go')


@dataclass(frozen=True)
class Config:
    port: int = DEFAULT_PORT
    gopath: str = ''
    cwd: str = ''
    godoc_bin: str = 'godoc'

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, cwd: Optional[str] = None) -> 'Config':
        """
        Build a Config from environment variables.

        Raises:
            ValueError: If GODOC_HTTP_PORT is set but unusable
        """
        environ = os.environ if environ is None else environ

        port = DEFAULT_PORT
        if environ.get(ENV_PORT):
            port = _parse_port(environ[ENV_PORT])

        return cls(
            port=port,
            gopath=default_gopath(environ),
            cwd=cwd if cwd is not None else os.getcwd(),
            godoc_bin=environ.get(ENV_GODOC_BIN) or 'godoc',
        )

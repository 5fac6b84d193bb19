"""
Find and stop running godoc http servers.

A godoc http server is a process whose executable name starts with "godoc"
and that was given an ``-http`` flag.
"""

import logging
import os
import signal
import subprocess
import time
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

PS_COMMAND = ['ps', '-axo', 'pid=,user=,args=']


@dataclass
class ServerProcess:
    pid: int
    user: str = ''
    cmdline: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        return f"{self.user or 'UNKNOWN_USER':<16}  {self.pid:<6d}  {' '.join(self.cmdline)}"


def is_server_cmdline(cmdline: List[str]) -> bool:
    """True for ``godoc ... -http=...`` style command lines."""
    if not cmdline:
        return False
    if not os.path.basename(cmdline[0]).startswith('godoc'):
        return False
    return any(a.startswith('-http') for a in cmdline[1:])


def parse_ps_output(output: str) -> List[ServerProcess]:
    """Pick godoc http servers out of ``ps -o pid=,user=,args=`` output."""
    matches = []
    for line in output.splitlines():
        parts = line.split()
        if len(parts) < 3:
            continue
        try:
            pid = int(parts[0])
        except ValueError:
            continue

        cmdline = parts[2:]
        if is_server_cmdline(cmdline):
            logger.debug(f"found process named godoc [{pid}] with http server flag [{' '.join(cmdline)}]")
            matches.append(ServerProcess(pid=pid, user=parts[1], cmdline=cmdline))
    return matches


def list_server_processes() -> List[ServerProcess]:
    """
    List running godoc http server processes.

    Raises:
        RuntimeError: If the process table cannot be read
    """
    try:
        result = subprocess.run(PS_COMMAND, capture_output=True, text=True, check=True)
    except (OSError, subprocess.CalledProcessError) as e:
        raise RuntimeError(f"failed to list processes: {e}")
    return parse_ps_output(result.stdout)


def _alive(pid: int) -> bool:
    """
    True while ``pid`` can still be signalled.

    An exited child of this process that has not been reaped is a zombie and
    still counts as alive, so ``kill_process`` on our own child waits out the
    full grace period unless the caller reaps it. Servers found through ``ps``
    are not our children and are unaffected.
    """
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    return True


def kill_process(pid: int, grace: float = 2.0) -> None:
    """
    Stop a process: SIGTERM first, SIGKILL if it is still around after ``grace``.

    Raises:
        OSError: If the process could not be signalled
    """
    try:
        os.kill(pid, signal.SIGTERM)
    except ProcessLookupError:
        return

    deadline = time.monotonic() + grace
    while time.monotonic() < deadline:
        time.sleep(0.1)
        if not _alive(pid):
            return

    logger.debug(f"process [{pid}] ignored SIGTERM, sending SIGKILL")
    try:
        os.kill(pid, signal.SIGKILL)
    except ProcessLookupError:
        pass


def kill_server_processes(procs: Optional[List[ServerProcess]] = None) -> List[Tuple[ServerProcess, OSError]]:
    """
    Kill godoc http servers.

    Args:
        procs: Processes to kill; defaults to every running server

    Returns:
        (process, error) pairs for the processes that could not be killed
    """
    if procs is None:
        procs = list_server_processes()

    failures = []
    for proc in procs:
        logger.debug(f"will attempt to kill process [{proc.pid}]")
        try:
            kill_process(proc.pid)
        except OSError as e:
            failures.append((proc, e))
    return failures

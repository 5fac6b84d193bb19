"""
Godoc HTTP server access.

Finds a godoc http server on the configured port, or starts one in the
background, then answers the questions the resolver asks: which packages
exist, and whether a given package page can be fetched.

The server keeps running after hdoc exits; ``hdoc --killall`` stops it.
"""

import logging
import os
import subprocess
import time
import urllib.error
import urllib.request
from typing import List, Optional

from hdoc.errors import ServerError
from hdoc.scrape import scrape_pkg_page

logger = logging.getLogger(__name__)

# Existence checks poll every POLL_INTERVAL for up to PAGE_TIMEOUT
POLL_INTERVAL = 0.1
PAGE_TIMEOUT = 0.5
# A freshly started server gets this long to answer /pkg/
STARTUP_TIMEOUT = 2.0
REQUEST_TIMEOUT = 5.0


class DocServer:
    """
    A godoc http server on localhost.

    Attributes:
        port: Port the server listens on
        started_process: The Popen handle if this instance started the server
    """

    def __init__(self, port: int = 6060, host: str = 'localhost', godoc_bin: str = 'godoc'):
        self.port = port
        self.host = host
        self.godoc_bin = godoc_bin
        self.started_process: Optional[subprocess.Popen] = None
        self._pkg_page: Optional[str] = None
        self._pkgs: Optional[List[str]] = None

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    def pkg_url(self, pkg: str, fragment: Optional[str] = None) -> str:
        """
        URL of a package's page.

            pkg_url('sync/atomic')        -> 'http://localhost:6060/pkg/sync/atomic/'
            pkg_url('fmt', 'Println')     -> 'http://localhost:6060/pkg/fmt/#Println'
        """
        url = f"{self.base_url}/pkg/{pkg}/"
        if fragment:
            url += f"#{fragment}"
        return url

    # ========================================================================
    # Server discovery
    # ========================================================================

    def _get_pkg_page(self) -> Optional[str]:
        """GET /pkg/; returns the body on 200, None when nothing answers."""
        url = f"{self.base_url}/pkg/"
        try:
            with urllib.request.urlopen(url, timeout=REQUEST_TIMEOUT) as response:
                return response.read().decode('utf-8', errors='replace')
        except urllib.error.HTTPError as e:
            logger.debug(f"{url} answered {e.code}")
            return None
        except (urllib.error.URLError, OSError) as e:
            logger.debug(f"no godoc http server at {url}: {e}")
            return None

    def start(self, gopath: str = '') -> subprocess.Popen:
        """Start a detached godoc http server on our port."""
        cmd = [self.godoc_bin, f"-http=:{self.port}", '-index', '-index_throttle=0.5']
        env = None
        if gopath:
            env = dict(os.environ, GOPATH=gopath)

        logger.debug(f"starting: {' '.join(cmd)}")
        try:
            proc = subprocess.Popen(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
                env=env,
            )
        except OSError as e:
            raise ServerError(f"failed to start {self.godoc_bin}: {e}")

        self.started_process = proc
        return proc

    def ensure_running(self, gopath: str = '') -> bool:
        """
        Make sure a server answers on our port, starting one if needed.

        Returns:
            True if this call started the server, False if one was already up

        Raises:
            ServerError: If a started server never became reachable
        """
        if self._pkg_page is not None:
            return False

        body = self._get_pkg_page()
        if body is not None:
            logger.debug(f"found existing godoc server at {self.base_url}")
            self._pkg_page = body
            return False

        logger.debug("no existing godoc server, starting one")
        self.start(gopath)

        deadline = time.monotonic() + STARTUP_TIMEOUT
        while time.monotonic() < deadline:
            if self.started_process.poll() is not None:
                raise ServerError(
                    f"{self.godoc_bin} exited with code {self.started_process.returncode} "
                    f"before serving {self.base_url}"
                )
            body = self._get_pkg_page()
            if body is not None:
                self._pkg_page = body
                logger.debug(f"godoc server is running at {self.base_url}")
                return True
            time.sleep(POLL_INTERVAL)

        raise ServerError(f"started godoc server did not answer at {self.base_url}/pkg/ "
                          f"within {STARTUP_TIMEOUT:g}s")

    def terminate_started(self) -> None:
        """Kill the server this instance started, if any."""
        if self.started_process is None or self.started_process.poll() is not None:
            return
        logger.debug(f"killing the godoc http server [{self.started_process.pid}] hdoc started")
        self.started_process.kill()
        self.started_process.wait(timeout=2)

    # ========================================================================
    # Package queries
    # ========================================================================

    def fetch_package_index(self, gopath: str = '') -> List[str]:
        """All package names listed on the server's /pkg/ page."""
        if self._pkgs is None:
            self.ensure_running(gopath)
            if not self._pkg_page:
                raise ServerError("apparently no data from godoc http server /pkg/")
            self._pkgs = scrape_pkg_page(self._pkg_page)
            logger.debug(f"server lists {len(self._pkgs)} packages")
        return self._pkgs

    def page_exists(self, pkg: str, retry: bool = True) -> bool:
        """
        Check whether the server has a page for ``pkg``.

        Args:
            pkg: Package path such as "bytes" or "encoding/json"
            retry: Keep polling for up to PAGE_TIMEOUT (a server that is
                still indexing may 404 briefly)

        Raises:
            ValueError: If pkg has a leading or trailing slash
            ServerError: If the server cannot be reached at all
        """
        if pkg.startswith('/') or pkg.endswith('/'):
            raise ValueError(f"invalid pkg path (has '/' prefix or suffix): {pkg}")

        url = self.pkg_url(pkg)
        request = urllib.request.Request(url, method='HEAD')
        deadline = time.monotonic() + (PAGE_TIMEOUT if retry else 0)
        last_error = None

        while True:
            try:
                with urllib.request.urlopen(request, timeout=REQUEST_TIMEOUT) as response:
                    if response.status == 200:
                        return True
                last_error = None
            except urllib.error.HTTPError as e:
                logger.debug(f"HEAD {url} -> {e.code}")
                last_error = None
            except (urllib.error.URLError, OSError) as e:
                last_error = e

            if time.monotonic() >= deadline:
                break
            time.sleep(POLL_INTERVAL)

        if last_error is not None:
            raise ServerError(f"failed to access godoc http server: {last_error}")
        return False

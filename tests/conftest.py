"""
Pytest configuration and shared fixtures for hdoc tests.
"""

import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest


STDLIB_PKGS = ['bufio', 'bytes', 'encoding', 'encoding/json', 'fmt', 'sync', 'sync/atomic']
THIRDPARTY_PKGS = ['github.com/neilotoole/gohdoc', 'github.com/neilotoole/gohdoc/sub/pkg']


def render_pkg_page(stdlib, thirdparty) -> str:
    """Render a /pkg/ page laid out the way godoc does it."""
    def section(section_id, pkgs):
        rows = ''.join(
            f'<tr><td class="pkg-name" style="padding-left: 0px;">'
            f'<a href="{pkg}/">{pkg.rsplit("/", 1)[-1]}</a></td>'
            f'<td class="pkg-synopsis">Package {pkg}.</td></tr>\n'
            for pkg in pkgs
        )
        return (
            f'<div id="{section_id}" class="toggleVisible">\n'
            f'<div class="collapsed"><h2 class="toggleButton">Packages ▹</h2></div>\n'
            f'<div class="expanded">\n'
            f'<div class="pkg-dir">\n<table>\n'
            f'<tr><th class="pkg-name">Name</th><th class="pkg-synopsis">Synopsis</th></tr>\n'
            f'{rows}</table>\n</div>\n</div>\n</div>\n'
        )

    return (
        '<!DOCTYPE html>\n<html><head><title>Packages - The Go Programming Language</title></head>\n'
        '<body><div id="page" class="wide"><div class="container">\n'
        '<h1>Packages</h1>\n'
        f'{section("stdlib", stdlib)}'
        f'{section("thirdparty", thirdparty)}'
        '</div></div></body></html>\n'
    )


class FakeGodoc:
    """A godoc-like http server on an ephemeral localhost port."""

    def __init__(self, stdlib=None, thirdparty=None):
        self.stdlib = list(STDLIB_PKGS if stdlib is None else stdlib)
        self.thirdparty = list(THIRDPARTY_PKGS if thirdparty is None else thirdparty)
        # Packages listed on /pkg/ whose own page answers 404
        self.missing = set()
        self.requests = []

        fake = self

        class Handler(BaseHTTPRequestHandler):
            def _pkg_status(self):
                path = self.path.split('#', 1)[0]
                if path == '/pkg/':
                    return 200
                if path.startswith('/pkg/') and path.endswith('/'):
                    pkg = path[len('/pkg/'):-1]
                    if pkg in fake.packages and pkg not in fake.missing:
                        return 200
                return 404

            def do_GET(self):
                fake.requests.append(('GET', self.path))
                status = self._pkg_status()
                body = b''
                if status == 200 and self.path == '/pkg/':
                    body = render_pkg_page(fake.stdlib, fake.thirdparty).encode('utf-8')
                self.send_response(status)
                self.send_header('Content-Type', 'text/html; charset=utf-8')
                self.send_header('Content-Length', str(len(body)))
                self.end_headers()
                self.wfile.write(body)

            def do_HEAD(self):
                fake.requests.append(('HEAD', self.path))
                self.send_response(self._pkg_status())
                self.send_header('Content-Length', '0')
                self.end_headers()

            def log_message(self, format, *args):
                pass

        self.httpd = ThreadingHTTPServer(('127.0.0.1', 0), Handler)
        self.port = self.httpd.server_address[1]
        self._thread = threading.Thread(target=self.httpd.serve_forever, daemon=True)

    @property
    def packages(self):
        return set(self.stdlib) | set(self.thirdparty)

    def start(self):
        self._thread.start()
        return self

    def stop(self):
        self.httpd.shutdown()
        self.httpd.server_close()


@pytest.fixture
def godoc_server():
    """A running fake godoc http server."""
    server = FakeGodoc().start()
    yield server
    server.stop()


@pytest.fixture
def doc_server(godoc_server):
    """A DocServer pointed at the fake godoc server."""
    from hdoc.server import DocServer
    return DocServer(port=godoc_server.port, host='127.0.0.1')


@pytest.fixture
def closed_port():
    """A localhost port with nothing listening on it."""
    import socket
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(('127.0.0.1', 0))
        return sock.getsockname()[1]


@pytest.fixture
def sample_index():
    """A package index as scraped from a godoc server."""
    return STDLIB_PKGS + THIRDPARTY_PKGS


# Stands in for the godoc binary: serves a fixed /pkg/ page on -http=:PORT
GODOC_SCRIPT = '''#!{python}
import sys
from http.server import BaseHTTPRequestHandler, HTTPServer

with open({page!r}, 'rb') as f:
    PAGE = f.read()
port = int([a for a in sys.argv[1:] if a.startswith('-http=')][0].rsplit(':', 1)[1])


class Handler(BaseHTTPRequestHandler):
    def do_GET(self):
        body = PAGE if self.path == '/pkg/' else b''
        self.send_response(200 if body else 404)
        self.send_header('Content-Length', str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def do_HEAD(self):
        self.send_response(200 if self.path.startswith('/pkg/') else 404)
        self.send_header('Content-Length', '0')
        self.end_headers()

    def log_message(self, format, *args):
        pass


HTTPServer(('127.0.0.1', port), Handler).serve_forever()
'''


@pytest.fixture
def godoc_bin(tmp_path, monkeypatch):
    """Path to an executable that behaves like `godoc -http=:PORT`."""
    import sys
    from hdoc import server

    page = tmp_path / 'pkg.html'
    page.write_text(render_pkg_page(STDLIB_PKGS, THIRDPARTY_PKGS), encoding='utf-8')

    script = tmp_path / 'godoc'
    script.write_text(GODOC_SCRIPT.format(python=sys.executable, page=str(page)))
    script.chmod(0o755)

    # Interpreter startup can be slow on a loaded machine
    monkeypatch.setattr(server, 'STARTUP_TIMEOUT', 15.0)
    return str(script)

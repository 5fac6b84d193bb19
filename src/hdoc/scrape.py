"""
Scrape the package list from a godoc http server's /pkg/ page.

The page lists packages in tables like:

    <div class="pkg-dir">
      <table>
        <tr><th class="pkg-name">Name</th>...</tr>
        <tr><td class="pkg-name"><a href="archive/">archive</a></td>...</tr>

Only the links inside ``.pkg-dir td.pkg-name`` are package names.
"""

from html.parser import HTMLParser
from typing import List

from hdoc.errors import ScrapeError


def _classes(attrs) -> set:
    for key, value in attrs:
        if key == 'class' and value:
            return set(value.split())
    return set()


class _PkgPageParser(HTMLParser):
    """Collects hrefs of ``.pkg-dir td.pkg-name a`` elements."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.pkgs: List[str] = []
        self.seen_pkg_dir = False
        # Depth of <div> nesting inside the current .pkg-dir, 0 when outside
        self._pkg_dir_depth = 0
        self._in_name_cell = False

    def handle_starttag(self, tag, attrs):
        if tag == 'div':
            if self._pkg_dir_depth:
                self._pkg_dir_depth += 1
            elif 'pkg-dir' in _classes(attrs):
                self._pkg_dir_depth = 1
                self.seen_pkg_dir = True
            return

        if not self._pkg_dir_depth:
            return

        if tag == 'td':
            self._in_name_cell = 'pkg-name' in _classes(attrs)
        elif tag == 'a' and self._in_name_cell:
            href = dict(attrs).get('href')
            if href:
                # The link looks like "encoding/json/"
                self.pkgs.append(href.rstrip('/'))

    def handle_endtag(self, tag):
        if tag == 'div' and self._pkg_dir_depth:
            self._pkg_dir_depth -= 1
            if not self._pkg_dir_depth:
                self._in_name_cell = False
        elif tag in ('td', 'tr'):
            self._in_name_cell = False


def scrape_pkg_page(html: str) -> List[str]:
    """
    Return all package names listed on a /pkg/ page, in page order.

    Raises:
        ScrapeError: If the page has no package directory listing
    """
    parser = _PkgPageParser()
    parser.feed(html)
    parser.close()

    if not parser.seen_pkg_dir:
        raise ScrapeError("no package listing found on godoc /pkg/ page")

    # The stdlib and third-party sections can repeat a name
    return [pkg for pkg in dict.fromkeys(parser.pkgs) if pkg]

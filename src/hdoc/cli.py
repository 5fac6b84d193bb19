#!/usr/bin/env python3
"""
hdoc CLI - open godoc for a Go package in the browser.

Usage:
    hdoc                            # Docs for the package in the current dir
    hdoc .                          # Same as above
    hdoc my/sub/pkg                 # Package at a relative path
    hdoc ~/go/src/github.com/me/p   # Package at an absolute path
    hdoc fmt#Println                # Package by (partial) name, with anchor
    hdoc --list                     # List packages on the server
    hdoc --search pkg/name          # List packages matching a name
    hdoc --killall                  # Kill running godoc http servers
"""

import argparse
import logging
import sys
import webbrowser

from hdoc import __version__
from hdoc.colors import Colors, error_str
from hdoc.config import ENV_PORT, Config
from hdoc.errors import NotFoundError
from hdoc.paths import normalize_argument
from hdoc.processes import kill_server_processes, list_server_processes
from hdoc.resolve import SOURCE_SEARCH, Resolver
from hdoc.search import get_pkg_matches
from hdoc.server import DocServer

logger = logging.getLogger('hdoc')

# Fuzzy matches printed before opening the best one
MAX_PKG_LIST = 10


def configure_logging(debug: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S',
    )


def open_browser(url: str) -> None:
    """Open url in the user's browser."""
    logger.debug(f"attempting to open a browser for: {url}")
    if not webbrowser.open(url):
        raise RuntimeError(f"failed to open browser for {url}")


# ============================================================================
# Output Helpers
# ============================================================================

def print_pkgs_with_link(server: DocServer, pkgs: list) -> None:
    """Print one line per package: the name, padded, then its URL."""
    width = max((len(p) for p in pkgs), default=0)
    for pkg in pkgs:
        padding = ' ' * (width - len(pkg))
        print(f"{Colors.format_pkg(pkg)}{padding}    {Colors.format_url(server.pkg_url(pkg))}")


def print_possible_matches(server: DocServer, term: str, matches: list) -> None:
    if len(matches) > MAX_PKG_LIST:
        print(f"Found {len(matches)} possible matches; showing first {MAX_PKG_LIST}. "
              f"To see full set: hdoc --searchv {term}")
        matches = matches[:MAX_PKG_LIST]
    else:
        print(f"Found {len(matches)} possible matches:")
    print_pkgs_with_link(server, matches)


def print_started(server: DocServer, config: Config) -> None:
    print(f"Started godoc server [{server.started_process.pid}] for GOPATH {config.gopath} "
          f"at {server.base_url}")
    print("Server will continue to run in the background. Kill with: hdoc --killall\n")


# ============================================================================
# Commands
# ============================================================================

def _load_index(server: DocServer, config: Config) -> list:
    started = server.ensure_running(config.gopath)
    if started:
        print_started(server, config)
    return server.fetch_package_index(config.gopath)


def cmd_list(args, config: Config, server: DocServer) -> int:
    """List all packages on the godoc http server."""
    pkgs = _load_index(server, config)
    if args.listv:
        print_pkgs_with_link(server, pkgs)
    else:
        for pkg in pkgs:
            print(pkg)
    return 0


def cmd_search(args, config: Config, server: DocServer) -> int:
    """List all server packages that match the argument."""
    if len(args.targets) != 1:
        print(error_str("search takes exactly one arg"), file=sys.stderr)
        return 2

    pkgs = _load_index(server, config)
    term = args.targets[0]
    logger.debug(f"searching {len(pkgs)} pkg names for term {term!r}")

    matches, _ = get_pkg_matches(pkgs, term)
    if not matches:
        print(f"No package found matching {term}", file=sys.stderr)
        return 1

    if args.searchv:
        print_pkgs_with_link(server, matches)
    else:
        for pkg in matches:
            print(pkg)
    return 0


def cmd_servers(args) -> int:
    """List running godoc http server processes."""
    for proc in list_server_processes():
        print(proc)
    return 0


def cmd_killall(args) -> int:
    """Kill any running godoc http servers."""
    procs = list_server_processes()
    failures = kill_server_processes(procs)
    failed = {proc.pid for proc, _ in failures}

    for proc in procs:
        if proc.pid not in failed:
            print(f"Killed {proc}")
    for proc, e in failures:
        print(error_str(f"{proc}  :  {e}"), file=sys.stderr)

    if not failures:
        return 0
    if len(procs) == 1:
        raise RuntimeError("failed to kill 1 process")
    raise RuntimeError(f"failed to kill {len(failures)} of {len(procs)} processes")


def cmd_open(args, config: Config, server: DocServer, navigate=None) -> int:
    """Resolve the argument to a package and open its page."""
    navigate = navigate or open_browser
    if len(args.targets) > 1:
        print(error_str(f"must supply maximum one arg to hdoc, but received {len(args.targets)} "
                        f"[{','.join(args.targets)}]"), file=sys.stderr)
        return 2

    raw = args.targets[0] if args.targets else ''
    arg = normalize_argument(config.cwd, raw)
    logger.debug(f"normalized {raw!r} -> {arg}")

    pkgs = _load_index(server, config)
    resolver = Resolver(pkgs, page_exists=server.page_exists, root=config.gopath)
    # Errors name what was typed; with no argument, the directory searched
    target = resolver.resolve(arg, term=raw or arg.path)

    if target.source == SOURCE_SEARCH:
        print_possible_matches(server, arg.name, list(target.matches))

    url = server.pkg_url(target.package, target.fragment)
    navigate(url)

    if server.started_process is not None:
        print(f"Opening {url} on GOPATH {config.gopath}")
    else:
        print(f"Opening {url} on already-existing server")
    return 0


# ============================================================================
# Entry Point
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='hdoc',
        description='hdoc - open godoc for a Go package in the browser',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f'''
hdoc looks for an existing godoc http server, and uses that if available. If
not, it starts one on port 6060 (override with {ENV_PORT}). The server keeps
running after hdoc exits; stop it with hdoc --killall.

Examples:
  hdoc                                   Open docs for the current package
  hdoc my/sub/pkg                        Package at a relative path
  hdoc ~/go/src/github.com/ksoze/myproj  Package at this path
  hdoc fmt#Println                       Package fmt, anchored at Println
  hdoc --search encoding/jso             Packages matching a partial name

The godoc http server is tied to a particular GOPATH. If your package is not
found, check which GOPATH the server uses; hdoc --killall and rerun if needed.
'''
    )
    parser.add_argument('--version', action='version', version=f'hdoc {__version__}')
    parser.add_argument('--debug', action='store_true', help='Print debug messages')

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument('--list', action='store_true', help='List all pkgs from godoc http server')
    mode.add_argument('--listv', action='store_true', help='Like --list but with verbose output')
    mode.add_argument('--search', action='store_true', help='List all pkgs that match pkg arg')
    mode.add_argument('--searchv', action='store_true', help='Like --search but with verbose output')
    mode.add_argument('--servers', action='store_true', help='List running godoc http servers')
    mode.add_argument('--killall', action='store_true', help='Kill any running godoc http servers')

    parser.add_argument('targets', nargs='*', metavar='pkg',
                        help='Package name or path, optionally with #Fragment')
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.debug)

    if args.killall:
        sys.exit(_run(cmd_killall, args))
    if args.servers:
        sys.exit(_run(cmd_servers, args))

    try:
        config = Config.from_env()
    except ValueError as e:
        print(error_str(str(e)), file=sys.stderr)
        sys.exit(1)
    logger.debug(f"using GOPATH: {config.gopath}")

    server = DocServer(port=config.port, godoc_bin=config.godoc_bin)

    if args.list or args.listv:
        command = cmd_list
    elif args.search or args.searchv:
        command = cmd_search
    else:
        command = cmd_open

    code = _run(command, args, config, server)
    if code != 0:
        print(f" info: was using GOPATH: {config.gopath}", file=sys.stderr)
        # Don't leave behind a server this failed invocation started
        server.terminate_started()
    sys.exit(code)


def _run(command, args, *rest) -> int:
    try:
        return command(args, *rest)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130
    except NotFoundError as e:
        print(error_str(str(e)), file=sys.stderr)
        return 1
    except (RuntimeError, ValueError) as e:
        print(error_str(str(e)), file=sys.stderr)
        if args.debug:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == '__main__':
    main()

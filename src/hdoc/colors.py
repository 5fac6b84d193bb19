"""
Colors Utility Module

Terminal color support with automatic detection of terminal capabilities.
Honours NO_COLOR and FORCE_COLOR.
"""

import os
import sys


def _supports_color(stream=None) -> bool:
    """Check if the terminal supports ANSI color codes."""
    # FORCE_COLOR overrides all detection
    if 'FORCE_COLOR' in os.environ:
        return True

    if 'NO_COLOR' in os.environ:
        return False

    stream = stream or sys.stdout
    if not hasattr(stream, 'isatty') or not stream.isatty():
        return False

    if os.environ.get('TERM', '') == 'dumb':
        return False

    return True


class Colors:
    """
    ANSI color codes - automatically disabled on unsupported terminals.

    Usage:
        from hdoc.colors import Colors
        print(f"{Colors.BOLD}Opening{Colors.RESET} {url}")
    """
    _enabled = _supports_color()

    RESET = "\033[0m" if _enabled else ""
    BOLD = "\033[1m" if _enabled else ""
    UNDERLINE = "\033[4m" if _enabled else ""

    RED = "\033[31m" if _enabled else ""
    CYAN = "\033[36m" if _enabled else ""

    @classmethod
    def is_enabled(cls) -> bool:
        """Check if color output is enabled."""
        return cls._enabled

    @classmethod
    def format_pkg(cls, pkg: str) -> str:
        """Package names are bold."""
        return f"{cls.BOLD}{pkg}{cls.RESET}"

    @classmethod
    def format_url(cls, url: str) -> str:
        """URLs are cyan and underlined."""
        return f"{cls.CYAN}{cls.UNDERLINE}{url}{cls.RESET}"


def colorize(text: str, color: str) -> str:
    """Apply a color to text if colors are enabled."""
    if Colors._enabled:
        return f"{color}{text}{Colors.RESET}"
    return text


def error_str(message: str) -> str:
    """Format an error line as printed by the CLI."""
    return colorize(f"✗ {message}", Colors.RED)

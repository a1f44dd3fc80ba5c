"""CLI console helpers with optional Rich support.

Diagnostics and errors go to stderr; the format listing goes to stdout
so it can be piped.  Rich is imported lazily so that bootstrap paths
(``--help``, ``--version``) keep working without it.
"""

from __future__ import annotations

import sys
from typing import Any

from ytsig.exceptions import EnvironmentError


def _load_rich_console_class() -> type[Any]:
    """Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
    try:
        from rich.console import Console
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Console


def get_rich_console(*, stderr: bool = True) -> Any:
    """Create a Rich console targeting stderr (default) or stdout."""
    console_class = _load_rich_console_class()
    return console_class(stderr=stderr)


class _ConsoleProxy:
    """Minimal ``print``-compatible proxy with plain-text fallback."""

    def __init__(self, *, stderr: bool) -> None:
        self._stderr = stderr

    def print(self, *objects: object) -> None:
        """Render with Rich when available, else plain print."""
        try:
            rich_console = get_rich_console(stderr=self._stderr)
        except EnvironmentError:
            print(*objects, file=sys.stderr if self._stderr else sys.stdout)
            return
        rich_console.print(*objects)


console = _ConsoleProxy(stderr=True)
"""Status, warnings and errors."""

output = _ConsoleProxy(stderr=False)
"""Primary command output."""

"""``ytsig doctor`` — environment diagnostics command.

Reports whether the interpreter and the runtime libraries ytsig needs
are importable.  yt-dlp is critical (it hosts the JavaScript
interpreter); httpx, structlog and pydantic-settings are critical for
extraction; dukpy is an optional second engine and rich only affects
presentation.
"""

from __future__ import annotations

import importlib
import platform
import sys

from ytsig.cli import exit_codes
from ytsig.cli.console import console
from ytsig.version import __version__

Check = tuple[str, str, str]


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _python_version_check() -> Check:
    """Return (label, value, status) for the Python version row."""
    version = platform.python_version()
    ok = sys.version_info[:2] >= (3, 10)
    status = "[green]OK[/green]" if ok else "[red]FAIL (>=3.10 required)[/red]"
    return "Python", version, status


def _module_check(label: str, module: str, *, critical: bool = True) -> Check:
    """Return (label, value, status) for an importable library."""
    try:
        imported = importlib.import_module(module)
    except ImportError:
        status = "[red]FAIL[/red]" if critical else "[yellow]WARN[/yellow]"
        return label, "NOT INSTALLED", status
    version = getattr(imported, "__version__", None) or "unknown"
    return label, str(version), "[green]OK[/green]"


def _ytdlp_version_check() -> Check:
    """Return (label, value, status) for the yt-dlp row."""
    check = _module_check("yt-dlp", "yt_dlp.version")
    if check[1] != "NOT INSTALLED":
        return check
    # yt-dlp installed but version submodule unavailable.
    fallback = _module_check("yt-dlp", "yt_dlp")
    if fallback[1] == "NOT INSTALLED":
        return fallback
    return "yt-dlp", "unknown", "[green]OK[/green]"


def _ytsig_version_check() -> Check:
    return "ytsig", __version__, "[green]OK[/green]"


def _status_plain(status: str) -> str:
    """Convert rich-markup status to plain text."""
    for word in ("FAIL", "WARN", "OK"):
        if word in status:
            return word
    return status


def _print_plain_doctor_table(checks: list[Check]) -> None:
    """Render doctor output without Rich."""
    print("\nytsig doctor", file=sys.stderr)
    print("=" * 56, file=sys.stderr)
    print(f"{'Component':<18} {'Value':<26} {'Status':<8}", file=sys.stderr)
    print("-" * 56, file=sys.stderr)
    for label, value, status in checks:
        print(f"{label:<18} {value:<26} {_status_plain(status):<8}", file=sys.stderr)
    print(file=sys.stderr)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def collect_checks() -> list[Check]:
    return [
        _ytsig_version_check(),
        _python_version_check(),
        _ytdlp_version_check(),
        _module_check("httpx", "httpx"),
        _module_check("structlog", "structlog"),
        _module_check("pydantic-settings", "pydantic_settings"),
        _module_check("dukpy", "dukpy", critical=False),
        _module_check("rich", "rich", critical=False),
    ]


def run_doctor() -> int:
    """Execute all diagnostic checks and render a summary table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when all critical checks pass,
        :data:`exit_codes.GENERAL_ERROR` if a critical check fails.
    """
    checks = collect_checks()
    has_failure = any("FAIL" in status for _, _, status in checks)

    try:
        from rich.table import Table
    except ModuleNotFoundError:
        _print_plain_doctor_table(checks)
        print(
            "Some checks failed." if has_failure else "All checks passed.",
            file=sys.stderr,
        )
        return exit_codes.GENERAL_ERROR if has_failure else exit_codes.SUCCESS

    table = Table(
        title="ytsig doctor",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("Component", style="bold", min_width=12)
    table.add_column("Value", min_width=20)
    table.add_column("Status", justify="center", min_width=8)
    for label, value, status in checks:
        table.add_row(label, value, status)

    console.print()
    console.print(table)
    console.print()

    if has_failure:
        console.print("[bold red]Some checks failed.[/bold red]")
        return exit_codes.GENERAL_ERROR
    console.print("[bold green]All checks passed.[/bold green]")
    return exit_codes.SUCCESS

"""CLI application entry point and command routing for ytsig.

This module is the **sole error boundary** for the entire application.
It catches :class:`~ytsig.exceptions.YtsigError`, ``KeyboardInterrupt``,
and any unexpected ``Exception``, rendering user-friendly messages via Rich
and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here — all work is delegated to the core/service
  and infrastructure layers.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import argparse
import sys

from ytsig.cli import exit_codes
from ytsig.cli.console import console
from ytsig.config import Settings
from ytsig.core.protocols import ScriptEngine
from ytsig.exceptions import YtsigError
from ytsig.version import __version__


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    Supported invocations:
    * ``ytsig <video-id|url>`` — list resolved formats
    * ``ytsig doctor``         — environment diagnostics
    * ``ytsig --version``
    """
    parser = argparse.ArgumentParser(
        prog="ytsig",
        description="Resolve YouTube stream formats, deciphering signed URLs.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "target",
        nargs="?",
        default=None,
        help="Video id or YouTube URL, or 'doctor' to run diagnostics.",
    )
    parser.add_argument(
        "--lenient",
        action="store_true",
        help="Skip formats whose signature cannot be deciphered instead of failing.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="as_json",
        help="Print one JSON object per format instead of a table.",
    )
    parser.add_argument(
        "--engine",
        choices=("yt-dlp", "dukpy"),
        default=None,
        help="JavaScript engine for signed streams (default: YTSIG_ENGINE or yt-dlp).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-request timeout in seconds (default: YTSIG_TIMEOUT_SECONDS or 15).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log progress to stderr (-v info, -vv debug).",
    )
    return parser


def _resolve_settings(args: argparse.Namespace) -> Settings:
    """Overlay CLI flags on environment-derived settings."""
    overrides: dict[str, object] = {}
    if args.timeout is not None:
        overrides["timeout_seconds"] = args.timeout
    if args.engine is not None:
        overrides["engine"] = args.engine
    if args.verbose:
        overrides["log_level"] = "DEBUG" if args.verbose > 1 else "INFO"
    try:
        return Settings(**overrides)
    except ValueError as exc:
        raise YtsigError(
            "Invalid configuration.",
            hint=f"Check the YTSIG_* environment variables and flags:\n{exc}",
        ) from exc


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _make_engine(name: str) -> ScriptEngine:
    """Instantiate the script engine selected by *name*."""
    if name == "dukpy":
        from ytsig.infra.dukpy_engine import DukpyScriptEngine

        return DukpyScriptEngine()
    from ytsig.infra.ytdlp_engine import YtDlpScriptEngine

    return YtDlpScriptEngine()


def _handle_extract(
    target: str,
    settings: Settings,
    *,
    lenient: bool = False,
    as_json: bool = False,
) -> int:
    """Resolve and print the formats for *target*.

    Flow:
    1. Normalise the target into a video id.
    2. Instantiate infra adapters + the extraction service.
    3. Fetch, decipher and assemble formats.
    4. Render as a table or JSON lines.
    """
    from ytsig.cli.formats_table import (
        render_failures,
        render_formats_json,
        render_formats_table,
    )
    from ytsig.core.extraction_service import ExtractionService, normalize_video_id
    from ytsig.infra.http_fetcher import HttpxPageFetcher

    video_id = normalize_video_id(target)

    with HttpxPageFetcher(settings) as fetcher:
        service = ExtractionService(fetcher, _make_engine(settings.engine), settings=settings)
        if not as_json:
            console.print(f"[bold]Resolving formats…[/bold]  {video_id}")
        collection = service.get_formats(video_id, fail_fast=not lenient)

    if as_json:
        render_formats_json(collection.formats)
    else:
        render_formats_table(video_id, collection.formats)
    render_failures(collection.failures)

    if collection.failures:
        return exit_codes.PARTIAL_SUCCESS
    return exit_codes.SUCCESS


def _handle_doctor() -> int:
    """Dispatch the ``doctor`` diagnostics command."""
    from ytsig.cli.doctor import run_doctor

    return run_doctor()


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the ytsig CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.target is None:
        parser.print_help()
        return exit_codes.SUCCESS

    target: str = args.target

    if target.lower() == "doctor":
        return _handle_doctor()

    settings = _resolve_settings(args)

    from ytsig.infra.logging_setup import configure_logging

    configure_logging(settings.log_level, settings.log_format)

    return _handle_extract(
        target,
        settings,
        lenient=args.lenient,
        as_json=args.as_json,
    )


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except YtsigError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {exc.hint}")
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)

"""Rendering of resolved formats for the CLI layer.

Two renderers:

* :func:`render_formats_table` — a Rich table on stdout.
* :func:`render_formats_json` — one JSON object per line on stdout.

All display-related logic lives here — no extraction, no deciphering.
"""

from __future__ import annotations

import dataclasses
import json
import sys
from collections.abc import Sequence
from typing import Any, TextIO

from ytsig.cli.console import console, output
from ytsig.core.models import DescriptorFailure, Format
from ytsig.exceptions import EnvironmentError


def _import_rich_table() -> type[Any]:
    """Import rich table lazily for format rendering."""
    try:
        from rich.table import Table
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Table


# ---------------------------------------------------------------------------
# Presentation helpers (pure transforms — no I/O themselves)
# ---------------------------------------------------------------------------

def _format_filesize(filesize: int | None) -> str:
    """Convert bytes to a human-readable MB string, or ``"—"``."""
    if filesize is None:
        return "—"
    mb = filesize / (1024 * 1024)
    return f"{mb:.1f} MB"


def _format_resolution(fmt: Format) -> str:
    """Render ``1920x1080``, the quality label, or ``"audio"``."""
    if fmt.width is not None and fmt.height is not None:
        return f"{fmt.width}x{fmt.height}"
    if fmt.sample_rate is not None:
        return f"audio {fmt.sample_rate} Hz"
    return fmt.quality_label or "—"


def _format_bitrate(bitrate: float | None) -> str:
    if bitrate is None:
        return "—"
    return f"{bitrate:.0f} kbps"


def _short_mime(mime_type: str | None) -> str:
    """Strip codec parameters: ``video/mp4; codecs=...`` → ``video/mp4``."""
    if not mime_type:
        return "—"
    return mime_type.split(";", 1)[0]


# ---------------------------------------------------------------------------
# Renderers
# ---------------------------------------------------------------------------

def render_formats_table(video_id: str, formats: Sequence[Format]) -> None:
    """Print a Rich table summarising *formats*."""
    table_class = _import_rich_table()

    table = table_class(
        title=f"Formats for {video_id}",
        show_header=True,
        header_style="bold magenta",
        border_style="dim",
    )
    table.add_column("itag", justify="right", style="dim", width=5)
    table.add_column("Quality", justify="left", min_width=8)
    table.add_column("Resolution", justify="left", min_width=10)
    table.add_column("Ext", justify="left", min_width=4)
    table.add_column("MIME", justify="left", min_width=10)
    table.add_column("Bitrate", justify="right", min_width=9)
    table.add_column("Size", justify="right", min_width=9)

    for fmt in formats:
        table.add_row(
            fmt.itag or "—",
            fmt.quality_label or "—",
            _format_resolution(fmt),
            fmt.file_extension or "—",
            _short_mime(fmt.mime_type),
            _format_bitrate(fmt.bitrate),
            _format_filesize(fmt.filesize),
        )

    output.print(table)


def render_formats_json(formats: Sequence[Format], stream: TextIO | None = None) -> None:
    """Write each format as a JSON object on its own line."""
    target = stream if stream is not None else sys.stdout
    for fmt in formats:
        target.write(json.dumps(dataclasses.asdict(fmt), ensure_ascii=False))
        target.write("\n")
    target.flush()


def render_failures(failures: Sequence[DescriptorFailure]) -> None:
    """Report descriptors that were skipped in lenient mode."""
    if not failures:
        return
    console.print(
        f"[yellow]Warning:[/yellow] {len(failures)} format(s) could not be deciphered:"
    )
    for failure in failures:
        console.print(f"  itag {failure.itag or '?'}: {failure.reason}")

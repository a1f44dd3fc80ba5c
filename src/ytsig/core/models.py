"""Domain models for ytsig.

All models are **frozen** dataclasses — immutable value objects with no
behaviour beyond data access.  They carry zero I/O and zero
dependencies on external packages.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Resolved stream format
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Format:
    """A single playable stream resolved from the player response.

    Every field except :attr:`url` is optional because the payload is
    inconsistent across muxed and adaptive streams.
    """

    url: str
    """Playable URL, with the deciphered signature attached when needed."""

    itag: str | None = None
    """Backend format identifier (e.g. ``"137"``)."""

    filesize: int | None = None
    """Content length in bytes, or ``None`` if unknown."""

    quality: str | None = None
    """Quality code (``tiny``, ``medium``, ``hd720``, ``hd1080``…)."""

    quality_label: str | None = None
    """Human label (``1080p60``); falls back to :attr:`quality`."""

    sample_rate: int | None = None
    """Audio sample rate in Hz."""

    bitrate: float | None = None
    """Bitrate in kilobits per second."""

    width: int | None = None
    height: int | None = None

    file_extension: str | None = None
    """Extension derived from :attr:`mime_type` (``mp4``, ``webm``, ``m4a``)."""

    mime_type: str | None = None
    """Raw MIME type including codec parameters."""


# ---------------------------------------------------------------------------
# Transform cache key
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class PlayerKey:
    """Identifies one compiled signature transform.

    The fingerprint stands in for a real player version: two ciphertexts
    produced by the same player deployment share their segment layout.
    """

    script_url: str
    fingerprint: str


# ---------------------------------------------------------------------------
# Assembly result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class DescriptorFailure:
    """A descriptor that could not be deciphered in lenient mode."""

    itag: str | None
    reason: str


@dataclass(frozen=True, slots=True)
class FormatCollection:
    """Immutable, ordered collection of :class:`Format` entries.

    ``failures`` is only ever populated when assembly runs in lenient
    mode; fail-fast assembly raises instead.
    """

    formats: tuple[Format, ...]
    failures: tuple[DescriptorFailure, ...] = ()

    def __len__(self) -> int:
        return len(self.formats)

    def __bool__(self) -> bool:
        return len(self.formats) > 0

    def __iter__(self) -> Iterator[Format]:
        return iter(self.formats)

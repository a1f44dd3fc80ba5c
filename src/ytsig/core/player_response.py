"""Embedded ``ytInitialPlayerResponse`` extraction.

The watch page inlines the player response as a JavaScript assignment.
It is located with a boundary-anchored pattern first (the lazy match
otherwise stops at the first ``};`` inside a string), then without the
boundary, and decoded with :mod:`json`.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any

from ytsig.exceptions import PayloadUnparsableError

_PLAYER_RESPONSE_RE = r"ytInitialPlayerResponse\s*=\s*(\{.+?\})\s*;"
_BOUNDARY_RE = r"(?:var\s+meta|</script|\n)"

_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(_PLAYER_RESPONSE_RE + r"\s*" + _BOUNDARY_RE),
    re.compile(_PLAYER_RESPONSE_RE),
)


def extract_player_response(webpage: str) -> dict[str, Any]:
    """Locate and decode the player response embedded in *webpage*.

    Raises
    ------
    PayloadUnparsableError
        When no candidate decodes into a JSON object.
    """
    for pattern in _PATTERNS:
        match = pattern.search(webpage)
        if match is None:
            continue
        try:
            decoded: Any = json.loads(match.group(1))
        except ValueError:
            continue
        if isinstance(decoded, dict):
            return decoded

    raise PayloadUnparsableError(
        "Could not find the player response in the watch page.",
        hint="The video may be unavailable, age-gated, or behind a consent page.",
    )


def streaming_descriptors(player_response: Mapping[str, Any]) -> list[dict[str, Any]]:
    """Return ``formats`` followed by ``adaptiveFormats``.

    Raises
    ------
    PayloadUnparsableError
        When ``streamingData`` or either descriptor list is missing.
    """
    streaming_data = player_response.get("streamingData")
    if not isinstance(streaming_data, Mapping):
        status = _playability_reason(player_response)
        raise PayloadUnparsableError(
            "Player response carries no streaming data.",
            hint=status,
        )

    formats = streaming_data.get("formats")
    adaptive = streaming_data.get("adaptiveFormats")
    if not isinstance(formats, list) or not isinstance(adaptive, list):
        raise PayloadUnparsableError(
            "Player response streaming data is missing its format lists.",
        )

    # Each element is expected to be a dict; skip malformed entries.
    return [entry for entry in (*formats, *adaptive) if isinstance(entry, dict)]


def _playability_reason(player_response: Mapping[str, Any]) -> str | None:
    """Pull the human-readable refusal reason, if the page gave one."""
    status = player_response.get("playabilityStatus")
    if not isinstance(status, Mapping):
        return None
    reason = status.get("reason")
    return str(reason) if reason else None

"""Format assembly — raw stream descriptors to playable :class:`Format` records.

Pipeline per descriptor (early exits in this order):

1. **Reject** live (``targetDurationSec``), DRM (``drmFamilies``) and
   on-the-fly (``FORMAT_STREAM_TYPE_OTF``) streams.
2. **Direct URL** — a well-formed ``url`` is used unchanged.
3. **Cipher blob** — otherwise ``signatureCipher`` is unpacked into
   ``url`` / ``s`` / ``sp``; incomplete blobs are dropped.
4. **Player script** — resolved lazily, once per :meth:`assemble` call;
   unresolvable means the descriptor is dropped.
5. **Decipher** — the transform comes from the cache keyed by
   ``(player URL, fingerprint)`` and the plaintext signature is appended
   under ``sp``.
6. **Derive** the remaining fields.

Descriptor order is preserved; dropped descriptors are simply omitted.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any
from urllib.parse import urlencode, urlsplit, urlunsplit

import structlog

from ytsig.core.mime import file_extension
from ytsig.core.models import DescriptorFailure, Format, FormatCollection, PlayerKey
from ytsig.core.player_url import DEFAULT_BASE_URL, extract_player_url
from ytsig.core.protocols import Transform
from ytsig.core.query_string import first_value, parse_query_string
from ytsig.core.signature_cache import SignatureCache, fingerprint
from ytsig.exceptions import PlayerInfoUnobtainableError, YtsigError

log = structlog.get_logger(__name__)

OTF_STREAM_TYPE = "FORMAT_STREAM_TYPE_OTF"
DEFAULT_SIGNATURE_PARAM = "signature"


# ---------------------------------------------------------------------------
# Pure field helpers
# ---------------------------------------------------------------------------

def is_rejected(descriptor: Mapping[str, Any]) -> bool:
    """Return ``True`` for live, DRM-protected or on-the-fly streams."""
    return (
        descriptor.get("targetDurationSec") is not None
        or descriptor.get("drmFamilies") is not None
        or descriptor.get("type") == OTF_STREAM_TYPE
    )


def coerce_int(value: object) -> int | None:
    """Accept ``1080`` and ``"1080"`` alike; anything else is ``None``."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def coerce_kbps(value: object) -> float | None:
    """Convert a bits-per-second figure to kilobits per second."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) / 1000
    if isinstance(value, str):
        try:
            return float(value.strip()) / 1000
        except ValueError:
            return None
    return None


def direct_url(descriptor: Mapping[str, Any]) -> str | None:
    """Return the descriptor's ``url`` when it is an absolute http(s) URL."""
    raw = descriptor.get("url")
    if not isinstance(raw, str) or not raw.strip():
        return None
    parts = urlsplit(raw.strip())
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return None
    return raw


def append_query_param(url: str, name: str, value: str) -> str:
    """Append ``name=value`` to *url*'s query, keeping existing parameters."""
    parts = urlsplit(url)
    extra = urlencode({name: value})
    query = f"{parts.query}&{extra}" if parts.query else extra
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def _optional_str(value: object) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (str, int)):
        return str(value)
    return None


def build_format(descriptor: Mapping[str, Any], url: str) -> Format:
    """Derive a :class:`Format` from *descriptor* with its resolved *url*."""
    mime_type = descriptor.get("mimeType")
    if not isinstance(mime_type, str):
        mime_type = None

    raw_bitrate = descriptor.get("averageBitrate")
    if raw_bitrate is None:
        raw_bitrate = descriptor.get("bitrate")

    quality = _optional_str(descriptor.get("quality"))
    return Format(
        url=url,
        itag=_optional_str(descriptor.get("itag")),
        filesize=coerce_int(descriptor.get("contentLength")),
        quality=quality,
        quality_label=_optional_str(descriptor.get("qualityLabel")) or quality,
        sample_rate=coerce_int(descriptor.get("audioSampleRate")),
        bitrate=coerce_kbps(raw_bitrate),
        width=coerce_int(descriptor.get("width")),
        height=coerce_int(descriptor.get("height")),
        file_extension=file_extension(mime_type) if mime_type else None,
        mime_type=mime_type,
    )


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

class FormatAssembler:
    """Resolves raw descriptors into playable formats.

    Parameters
    ----------
    build_transform:
        Called with a player-script URL on a cache miss; typically
        :meth:`~ytsig.core.decipher_service.TransformBuilder.build`.
    cache:
        Shared transform cache.  Its lifetime, not the assembler's,
        decides how long compiled transforms are reused.
    base_url:
        Origin for site-relative player URLs.
    """

    def __init__(
        self,
        build_transform: Callable[[str], Transform],
        cache: SignatureCache,
        *,
        base_url: str = DEFAULT_BASE_URL,
    ) -> None:
        self._build_transform = build_transform
        self._cache = cache
        self._base_url = base_url

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def assemble(
        self,
        descriptors: Sequence[Mapping[str, Any]],
        webpage: str,
        *,
        fail_fast: bool = True,
    ) -> FormatCollection:
        """Resolve *descriptors* against the player referenced by *webpage*.

        With ``fail_fast=True`` the first deciphering error aborts the
        whole call.  With ``fail_fast=False`` failing descriptors are
        reported in :attr:`FormatCollection.failures` and the rest are
        returned.

        Raises
        ------
        PlayerInfoUnobtainableError
            When no descriptor resolves and some were dropped for want of
            a stream URL or player script.
        TransformLocationError, TransformInvocationError, FetchError
            Only in fail-fast mode.
        """
        formats: list[Format] = []
        failures: list[DescriptorFailure] = []
        failed_keys: dict[PlayerKey, YtsigError] = {}
        player_url: str | None = None
        player_url_resolved = False
        unresolvable = 0

        for descriptor in descriptors:
            itag = _optional_str(descriptor.get("itag"))
            if is_rejected(descriptor):
                log.debug("descriptor_rejected", itag=itag)
                continue

            url = direct_url(descriptor)
            if url is None:
                cipher = descriptor.get("signatureCipher")
                if not isinstance(cipher, str):
                    unresolvable += 1
                    continue
                parsed = parse_query_string(cipher)
                base = first_value(parsed, "url")
                ciphertext = first_value(parsed, "s")
                if not base or not ciphertext:
                    log.debug("descriptor_cipher_incomplete", itag=itag)
                    unresolvable += 1
                    continue

                if not player_url_resolved:
                    player_url = extract_player_url(webpage, self._base_url)
                    player_url_resolved = True
                    log.debug("player_url_resolved", player_url=player_url)
                if player_url is None:
                    unresolvable += 1
                    continue

                key = PlayerKey(script_url=player_url, fingerprint=fingerprint(ciphertext))
                try:
                    previous = failed_keys.get(key)
                    if previous is not None:
                        raise previous
                    signature = self._decipher(key, ciphertext)
                except YtsigError as exc:
                    if fail_fast:
                        raise
                    failed_keys[key] = exc
                    failures.append(DescriptorFailure(itag=itag, reason=str(exc)))
                    log.warning("descriptor_decipher_failed", itag=itag, error=str(exc))
                    continue

                param = first_value(parsed, "sp") or DEFAULT_SIGNATURE_PARAM
                url = append_query_param(base, param, signature)

            formats.append(build_format(descriptor, url))

        if not formats and not failures and unresolvable:
            raise PlayerInfoUnobtainableError(
                f"None of {unresolvable} stream descriptors could be resolved.",
                hint="Neither direct stream URLs nor the player script were found.",
            )

        return FormatCollection(formats=tuple(formats), failures=tuple(failures))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _decipher(self, key: PlayerKey, ciphertext: str) -> str:
        transform = self._cache.get_or_build(
            key.script_url,
            key.fingerprint,
            lambda: self._build_transform(key.script_url),
        )
        return transform(ciphertext)

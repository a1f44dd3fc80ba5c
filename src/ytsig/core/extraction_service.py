"""Core extraction service — video id to resolved formats.

This is the central service class consumed by the CLI layer.  It
depends on a :class:`~ytsig.core.protocols.PageFetcher` and a
:class:`~ytsig.core.protocols.ScriptEngine` injected at construction
time (dependency inversion), keeping the core free of any
external-system imports.

The service owns the transform cache: it is created empty with the
service (unless injected) and lives as long as the service does, so
repeated extractions against the same player deployment never rebuild
the transform.

Guarantees
----------
* Pure orchestration — no direct I/O.
* Only :class:`~ytsig.exceptions.YtsigError` subclasses escape.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from urllib.parse import parse_qs, urlsplit

import structlog

from ytsig.config import Settings
from ytsig.core.cipher_rules import DEFAULT_RULES, CipherRule
from ytsig.core.decipher_service import TransformBuilder
from ytsig.core.format_assembler import FormatAssembler
from ytsig.core.models import FormatCollection
from ytsig.core.player_response import extract_player_response, streaming_descriptors
from ytsig.core.protocols import PageFetcher, ScriptEngine
from ytsig.core.signature_cache import SignatureCache
from ytsig.exceptions import FetchError, InvalidIdentifierError, YtsigError

log = structlog.get_logger(__name__)

_VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")
_PATH_ID_RE = re.compile(r"^/(?:shorts|embed|live|v)/([A-Za-z0-9_-]{11})")


def normalize_video_id(target: str) -> str:
    """Return the bare video id for an id or a watch/short/embed URL.

    Raises
    ------
    InvalidIdentifierError
        If no well-formed 11-character id can be found.
    """
    stripped = target.strip()
    if not stripped:
        raise InvalidIdentifierError("Video identifier must not be empty.")
    if _VIDEO_ID_RE.match(stripped):
        return stripped

    if stripped.startswith(("http://", "https://")):
        parts = urlsplit(stripped)
        host = (parts.hostname or "").lower()
        candidate: str | None = None
        if host.endswith("youtu.be"):
            candidate = parts.path.lstrip("/").split("/", 1)[0]
        elif host.endswith("youtube.com") or host.endswith("youtube-nocookie.com"):
            ids = parse_qs(parts.query).get("v")
            if ids:
                candidate = ids[0]
            else:
                path_match = _PATH_ID_RE.match(parts.path)
                candidate = path_match.group(1) if path_match else None
        if candidate and _VIDEO_ID_RE.match(candidate):
            return candidate

    raise InvalidIdentifierError(
        f"Invalid video identifier: {stripped}",
        hint="Pass an 11-character video id or a youtube.com / youtu.be URL.",
    )


class ExtractionService:
    """Resolves a video into playable :class:`~ytsig.core.models.Format` records.

    Parameters
    ----------
    fetcher:
        Any object satisfying the :class:`PageFetcher` protocol.
    engine:
        Any object satisfying the :class:`ScriptEngine` protocol.
    cache:
        Transform cache to share; a fresh one sized from *settings* is
        created when omitted.
    settings:
        Base URL and cache bound; defaults to :class:`Settings`.
    rules:
        Ordered cipher locator table.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        engine: ScriptEngine,
        *,
        cache: SignatureCache | None = None,
        settings: Settings | None = None,
        rules: Sequence[CipherRule] = DEFAULT_RULES,
    ) -> None:
        self._settings: Settings = settings or Settings()
        self._fetcher: PageFetcher = fetcher
        self._cache: SignatureCache = (
            cache if cache is not None else SignatureCache(self._settings.cache_max_entries)
        )
        self._builder = TransformBuilder(fetcher, engine, rules=rules)
        self._assembler = FormatAssembler(
            self._builder.build,
            self._cache,
            base_url=self._settings.base_url,
        )

    @property
    def cache(self) -> SignatureCache:
        return self._cache

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def watch_url(self, video_id: str) -> str:
        """Build the watch-page URL for *video_id*.

        Raises
        ------
        InvalidIdentifierError
            If *video_id* is not a well-formed 11-character id.
        """
        if not _VIDEO_ID_RE.match(video_id):
            raise InvalidIdentifierError(
                f"Invalid video identifier: {video_id!r}",
                hint="Video ids are 11 characters of letters, digits, '-' and '_'.",
            )
        return f"{self._settings.base_url.rstrip('/')}/watch?v={video_id}"

    def get_formats(self, video_id: str, *, fail_fast: bool = True) -> FormatCollection:
        """Fetch the watch page for *video_id* and resolve its formats.

        Raises
        ------
        InvalidIdentifierError
            If *video_id* is malformed.
        FetchError
            If the page cannot be retrieved.
        PayloadUnparsableError
            If the embedded player response is missing or malformed.
        PlayerInfoUnobtainableError
            If no descriptor can be resolved.
        TransformLocationError, TransformInvocationError, ExecutionEngineUnavailableError
            On deciphering failures in fail-fast mode.
        """
        url = self.watch_url(video_id)
        webpage = self._fetch_page(url)
        player_response = extract_player_response(webpage)
        descriptors = streaming_descriptors(player_response)
        log.info("descriptors_found", video_id=video_id, count=len(descriptors))

        collection = self._assembler.assemble(descriptors, webpage, fail_fast=fail_fast)
        log.info(
            "formats_resolved",
            video_id=video_id,
            formats=len(collection.formats),
            failures=len(collection.failures),
            cached_transforms=len(self._cache),
        )
        return collection

    # ------------------------------------------------------------------
    # Provider delegation (safe boundary)
    # ------------------------------------------------------------------

    def _fetch_page(self, url: str) -> str:
        """Call the fetcher and ensure only our exceptions escape."""
        try:
            raw = self._fetcher.fetch(url)
        except YtsigError:
            # Already one of ours — let it propagate unchanged.
            raise
        except Exception as exc:
            raise FetchError(f"Unexpected fetcher error: {exc}") from exc
        return raw.decode("utf-8", errors="replace")

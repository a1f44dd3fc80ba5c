"""httpx backed implementation of :class:`~ytsig.core.protocols.PageFetcher`.

This module is the **only** place in the codebase that talks HTTP.
All httpx exceptions are caught here and re-raised as
:class:`~ytsig.exceptions.FetchError`.  No retries: transient failures
surface directly to the caller.
"""

from __future__ import annotations

from types import TracebackType
from typing import Any

import structlog

from ytsig.config import Settings
from ytsig.exceptions import EnvironmentError, FetchError

log = structlog.get_logger(__name__)


def _import_httpx() -> Any:
    """Import httpx lazily so ``--help`` works without it."""
    try:
        import httpx
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "httpx is not installed. Install with: pip install httpx",
        ) from exc
    return httpx


class HttpxPageFetcher:
    """Concrete :class:`PageFetcher` backed by a synchronous ``httpx.Client``.

    Usage::

        with HttpxPageFetcher(settings) as fetcher:
            body = fetcher.fetch("https://www.youtube.com/watch?v=...")

    The client is created on first use and reused for the page and every
    player-script request.
    """

    def __init__(self, settings: Settings | None = None, *, client: Any = None) -> None:
        self._settings: Settings = settings or Settings()
        self._client: Any = client
        self._owns_client = client is None

    def _build_client(self) -> Any:
        httpx = _import_httpx()
        return httpx.Client(
            headers={
                "User-Agent": self._settings.user_agent,
                "Accept-Language": "en-US,en;q=0.9",
            },
            timeout=self._settings.timeout_seconds,
            follow_redirects=True,
        )

    # ------------------------------------------------------------------
    # Protocol method
    # ------------------------------------------------------------------

    def fetch(self, url: str) -> bytes:
        """GET *url* and return the body.

        Raises
        ------
        FetchError
            For transport errors and non-2xx responses.
        """
        httpx = _import_httpx()
        if self._client is None:
            self._client = self._build_client()

        log.debug("http_fetch", url=url)
        try:
            response = self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            log.warning("http_status_error", url=url, status=status)
            raise FetchError(
                f"HTTP {status} while fetching {url}",
                hint="The video may be unavailable or the request was blocked.",
            ) from exc
        except httpx.HTTPError as exc:
            log.warning("http_request_failed", url=url, error=str(exc))
            raise FetchError(
                f"Request failed for {url}: {exc}",
                hint="Check your network connection or raise YTSIG_TIMEOUT_SECONDS.",
            ) from exc
        return response.content

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        if self._client is not None and self._owns_client:
            self._client.close()
        self._client = None

    def __enter__(self) -> HttpxPageFetcher:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

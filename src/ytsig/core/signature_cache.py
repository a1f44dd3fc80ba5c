"""Transform cache keyed by player script and signature fingerprint.

Compiling a transform means fetching a large script and evaluating it,
so the result is kept for the cache's lifetime and shared by every
descriptor that lands on the same :class:`~ytsig.core.models.PlayerKey`.

Concurrency
-----------
Builds are single-flight per key: a map of in-flight
:class:`~concurrent.futures.Future` objects is guarded by one mutex,
the build itself runs outside the lock, and concurrent callers for the
same key wait on the in-flight future.  A failed build is propagated to
every waiter and nothing is stored, so a later call can try again.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from collections.abc import Callable
from concurrent.futures import Future

import structlog

from ytsig.core.models import PlayerKey
from ytsig.core.protocols import Transform

log = structlog.get_logger(__name__)


def fingerprint(signature: str) -> str:
    """Return the ``.``-joined segment lengths of *signature*.

    >>> fingerprint("abc.de.f")
    '3.2.1'
    """
    return ".".join(str(len(segment)) for segment in signature.split("."))


class SignatureCache:
    """Thread-safe, single-flight store of compiled transforms.

    Parameters
    ----------
    max_entries:
        ``None`` (default) keeps every transform for the cache's
        lifetime.  A positive bound evicts the least recently used key
        once exceeded.
    """

    def __init__(self, max_entries: int | None = None) -> None:
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._max_entries = max_entries
        self._entries: OrderedDict[PlayerKey, Transform] = OrderedDict()
        self._pending: dict[PlayerKey, Future[Transform]] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get_or_build(
        self,
        script_url: str,
        fingerprint: str,
        builder: Callable[[], Transform],
    ) -> Transform:
        """Return the transform for ``(script_url, fingerprint)``.

        *builder* runs only on a miss, and at most once per key even
        under concurrent demand.  Exceptions raised by *builder* reach
        every caller waiting on that build.
        """
        key = PlayerKey(script_url=script_url, fingerprint=fingerprint)

        with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                self._entries.move_to_end(key)
                return cached
            pending = self._pending.get(key)
            owner = pending is None
            if pending is None:
                pending = Future()
                self._pending[key] = pending

        if not owner:
            log.debug("signature_cache_wait", script_url=script_url, fingerprint=fingerprint)
            return pending.result()

        log.debug("signature_cache_build", script_url=script_url, fingerprint=fingerprint)
        try:
            transform = builder()
        except BaseException as exc:
            with self._lock:
                del self._pending[key]
            pending.set_exception(exc)
            raise

        with self._lock:
            self._entries[key] = transform
            del self._pending[key]
            self._evict_locked()
        pending.set_result(transform)
        return transform

    def clear(self) -> None:
        """Drop every stored transform.  In-flight builds are unaffected."""
        with self._lock:
            self._entries.clear()

    @property
    def max_entries(self) -> int | None:
        return self._max_entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _evict_locked(self) -> None:
        if self._max_entries is None:
            return
        while len(self._entries) > self._max_entries:
            evicted, _ = self._entries.popitem(last=False)
            log.debug(
                "signature_cache_evict",
                script_url=evicted.script_url,
                fingerprint=evicted.fingerprint,
            )

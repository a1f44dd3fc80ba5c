"""Core decipher service — builds signature transforms from player scripts.

This is the ``builder`` handed to
:meth:`~ytsig.core.signature_cache.SignatureCache.get_or_build`:

1. fetch the player script through the injected
   :class:`~ytsig.core.protocols.PageFetcher`,
2. name the transform with the ordered rule table,
3. rewrite the script into a sandbox unit,
4. compile it with the injected
   :class:`~ytsig.core.protocols.ScriptEngine`.

Guarantees
----------
* No direct I/O — fetching and evaluation go through protocols.
* Only :class:`~ytsig.exceptions.YtsigError` subclasses escape.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from ytsig.core.cipher_rules import DEFAULT_RULES, CipherRule, locate_transform_name
from ytsig.core.protocols import PageFetcher, ScriptEngine, Transform
from ytsig.core.sandbox import build_sandbox
from ytsig.exceptions import FetchError, TransformLocationError, YtsigError

log = structlog.get_logger(__name__)


class TransformBuilder:
    """Turns a player-script URL into a compiled signature transform.

    Parameters
    ----------
    fetcher:
        Any object satisfying the :class:`PageFetcher` protocol.
    engine:
        Any object satisfying the :class:`ScriptEngine` protocol.
    rules:
        Ordered locator table; defaults to the built-in rules.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        engine: ScriptEngine,
        *,
        rules: Sequence[CipherRule] = DEFAULT_RULES,
    ) -> None:
        self._fetcher: PageFetcher = fetcher
        self._engine: ScriptEngine = engine
        self._rules: tuple[CipherRule, ...] = tuple(rules)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build(self, script_url: str) -> Transform:
        """Fetch, locate, sandbox and compile the transform at *script_url*.

        Raises
        ------
        FetchError
            When the player script cannot be retrieved.
        TransformLocationError
            When no rule matches or the engine finds no callable.
        ExecutionEngineUnavailableError
            When the engine cannot start.
        """
        script = self._fetch_script(script_url)
        function_name = locate_transform_name(script, self._rules)
        unit = build_sandbox(script, function_name)
        log.info(
            "transform_compile",
            script_url=script_url,
            function=function_name,
            engine=self._engine.name,
        )

        try:
            return self._engine.compile(unit)
        except YtsigError:
            # Already one of ours — propagate unchanged.
            raise
        except Exception as exc:
            raise TransformLocationError(
                f"Script engine failed to expose {function_name!r}: {exc}",
            ) from exc

    # ------------------------------------------------------------------
    # Provider delegation (safe boundary)
    # ------------------------------------------------------------------

    def _fetch_script(self, script_url: str) -> str:
        try:
            raw = self._fetcher.fetch(script_url)
        except YtsigError:
            raise
        except Exception as exc:
            raise FetchError(f"Unexpected error fetching player script: {exc}") from exc
        return raw.decode("utf-8", errors="replace")

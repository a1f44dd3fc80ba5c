"""yt-dlp backed implementation of :class:`~ytsig.core.protocols.ScriptEngine`.

This module is the **only** place in the codebase that imports
``yt_dlp``.  The sandboxed player source is loaded into
``yt_dlp.jsinterp.JSInterpreter``, a pure-Python JavaScript subset
interpreter: nothing is handed to a browser or an external runtime,
and the interpreter has no network or DOM bindings at all.

The interpreter resolves functions and helper objects by name from the
source text rather than executing the whole closure, so the transform
is looked up by its located name.  A unit whose rewrites did not bind
the entry name is rejected up front, the same way an engine that runs
the closure would find nothing under that name.  The player's global string table
(``'use strict';var XX="...".split(";")``), when present, is evaluated
first and supplied as the outermost scope.

All yt-dlp exceptions are caught here and re-raised as typed
:class:`~ytsig.exceptions.YtsigError` subclasses.
"""

from __future__ import annotations

import re
import threading
from typing import Any

import structlog

from ytsig.core.protocols import Transform
from ytsig.core.sandbox import SandboxUnit
from ytsig.exceptions import (
    ExecutionEngineUnavailableError,
    TransformInvocationError,
    TransformLocationError,
    append_player_update_suggestion,
)

log = structlog.get_logger(__name__)

_GLOBAL_VAR_RE = re.compile(
    r"""(?x)
    (?P<q1>["'])use\s+strict(?P=q1);\s*
    var\s+(?P<name>[a-zA-Z0-9_$]+)\s*=\s*
    (?P<value>
        (?P<q2>["'])(?:(?!(?P=q2)).|\\.)+(?P=q2)
        \.split\((?P<q3>["'])(?:(?!(?P=q3)).)+(?P=q3)\)
        |\[\s*(?:(?P<q4>["'])(?:(?!(?P=q4)).|\\.)*(?P=q4)\s*,?\s*)+\]
    )[;,]
    """
)


def _import_jsinterp() -> tuple[Any, Any]:
    """Import yt-dlp's interpreter lazily, mapping absence to our error."""
    try:
        import yt_dlp.jsinterp
        import yt_dlp.utils
    except ModuleNotFoundError as exc:
        raise ExecutionEngineUnavailableError(
            "yt-dlp is not installed. Install with: pip install yt-dlp",
        ) from exc
    return yt_dlp.jsinterp, yt_dlp.utils


class YtDlpScriptEngine:
    """Concrete :class:`ScriptEngine` backed by ``yt_dlp.jsinterp``.

    This class satisfies the :class:`~ytsig.core.protocols.ScriptEngine`
    protocol structurally — no explicit inheritance required.
    """

    name = "yt-dlp"

    def compile(self, unit: SandboxUnit) -> Transform:
        """Load *unit* into an interpreter and extract its transform.

        Raises
        ------
        ExecutionEngineUnavailableError
            When yt-dlp is missing or the interpreter cannot be created.
        TransformLocationError
            When the sandbox does not bind its entry name, or the
            transform (or its global table) cannot be extracted.
        """
        if not unit.exposes_entry:
            log.warning(
                "sandbox_entry_unbound",
                function=unit.function_name,
                entry=unit.entry_name,
                applied=list(unit.applied),
            )
            raise TransformLocationError(
                f"The sandbox does not bind {unit.entry_name!r} to {unit.function_name!r}.",
                hint=append_player_update_suggestion(
                    "The player closure could not be rewritten "
                    f"(applied: {', '.join(unit.applied) or 'none'})."
                ),
            )
        jsinterp, utils = _import_jsinterp()
        try:
            interpreter = jsinterp.JSInterpreter(unit.source)
        except Exception as exc:
            raise ExecutionEngineUnavailableError(
                f"Could not start the yt-dlp JavaScript interpreter: {exc}",
            ) from exc

        try:
            global_stack = self._global_stack(interpreter, unit.source)
            function = interpreter.extract_function(unit.function_name, *global_stack)
        except utils.ExtractorError as exc:
            log.warning("jsinterp_extract_failed", function=unit.function_name, error=str(exc))
            raise TransformLocationError(
                f"Could not extract {unit.function_name!r} from the sandbox: {exc}",
            ) from exc

        log.debug("jsinterp_compiled", function=unit.function_name, globals=len(global_stack))
        return _InterpretedTransform(function, unit.function_name)

    @staticmethod
    def _global_stack(interpreter: Any, source: str) -> tuple[dict[str, Any], ...]:
        """Evaluate the player's global string table, if it has one."""
        match = _GLOBAL_VAR_RE.search(source)
        if match is None:
            return ()
        value = interpreter.interpret_expression(match.group("value"), {}, 100)
        return ({match.group("name"): value},)


class _InterpretedTransform:
    """Callable wrapper around an extracted yt-dlp function."""

    def __init__(self, function: Any, function_name: str) -> None:
        self._function = function
        self._function_name = function_name
        self._lock = threading.Lock()

    def __call__(self, signature: str) -> str:
        with self._lock:
            try:
                result = self._function([signature])
            except Exception as exc:
                raise TransformInvocationError(
                    f"Signature transform {self._function_name!r} raised: {exc}",
                ) from exc
        if not isinstance(result, str):
            raise TransformInvocationError(
                f"Signature transform returned {type(result).__name__}, expected a string.",
            )
        return result

"""dukpy backed implementation of :class:`~ytsig.core.protocols.ScriptEngine`.

This module is the **only** place in the codebase that imports
``dukpy``.  The sandboxed player source runs in an embedded Duktape
context, which has no DOM and no network; the stubs injected by
:func:`~ytsig.core.sandbox.build_sandbox` stand in for the browser
globals the closure touches.  After evaluation the transform is read
back from :attr:`~ytsig.core.sandbox.SandboxUnit.entry_name`.

dukpy is optional (``pip install ytsig[dukpy]``).  Its absence surfaces
as :class:`~ytsig.exceptions.ExecutionEngineUnavailableError` the first
time an engine compiles a unit.
"""

from __future__ import annotations

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


def _import_dukpy() -> Any:
    """Import dukpy lazily, mapping absence to our error."""
    try:
        import dukpy
    except ModuleNotFoundError as exc:
        raise ExecutionEngineUnavailableError(
            "dukpy is not installed.",
            hint="Install with: pip install 'ytsig[dukpy]', or use the yt-dlp engine.",
        ) from exc
    return dukpy


class DukpyScriptEngine:
    """Concrete :class:`ScriptEngine` that evaluates the sandbox in Duktape."""

    name = "dukpy"

    def compile(self, unit: SandboxUnit) -> Transform:
        """Evaluate *unit* and return the function bound to its entry name.

        Raises
        ------
        ExecutionEngineUnavailableError
            When dukpy is missing or a Duktape context cannot be created.
        TransformLocationError
            When evaluation fails or leaves no function under the entry name.
        """
        dukpy = _import_dukpy()
        try:
            session = dukpy.JSInterpreter()
        except Exception as exc:
            raise ExecutionEngineUnavailableError(
                f"Could not start a Duktape context: {exc}",
            ) from exc

        try:
            session.evaljs(unit.source)
            kind = session.evaljs(f"typeof {unit.entry_name}")
        except dukpy.JSRuntimeError as exc:
            log.warning("dukpy_eval_failed", function=unit.function_name, error=str(exc))
            raise TransformLocationError(
                f"Evaluating the sandbox for {unit.function_name!r} failed: {exc}",
                hint=append_player_update_suggestion("The rewritten player did not run."),
            ) from exc

        if kind != "function":
            log.warning(
                "sandbox_entry_unbound",
                function=unit.function_name,
                entry=unit.entry_name,
                kind=kind,
                applied=list(unit.applied),
            )
            raise TransformLocationError(
                f"The sandbox left {unit.entry_name!r} as {kind}, not a function.",
                hint=append_player_update_suggestion(
                    "The player closure could not be rewritten "
                    f"(applied: {', '.join(unit.applied) or 'none'})."
                ),
            )

        log.debug("dukpy_compiled", function=unit.function_name, entry=unit.entry_name)
        return _DukpyTransform(session, unit.entry_name, dukpy.JSRuntimeError)


class _DukpyTransform:
    """Callable that invokes the entry function inside one Duktape context.

    A Duktape context is single-threaded, so calls are serialized.
    """

    def __init__(self, session: Any, entry_name: str, runtime_error: type[Exception]) -> None:
        self._session = session
        self._call = f"{entry_name}(dukpy['signature'])"
        self._entry_name = entry_name
        self._runtime_error = runtime_error
        self._lock = threading.Lock()

    def __call__(self, signature: str) -> str:
        with self._lock:
            try:
                result = self._session.evaljs(self._call, signature=signature)
            except self._runtime_error as exc:
                raise TransformInvocationError(
                    f"Signature transform {self._entry_name!r} raised: {exc}",
                ) from exc
        if not isinstance(result, str):
            raise TransformInvocationError(
                f"Signature transform returned {type(result).__name__}, expected a string.",
            )
        return result

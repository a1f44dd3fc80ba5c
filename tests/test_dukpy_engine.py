"""Tests for the dukpy script engine adapter (infra/dukpy_engine.py).

Most tests stand a fake ``dukpy`` module in ``sys.modules``; the
``TestRealDuktape`` class runs the synthetic player in a real Duktape
context and is skipped when dukpy is not installed.
"""

from __future__ import annotations

import sys
from unittest.mock import MagicMock

import pytest

from support import PLAYER_JS, decipher_like_player
from ytsig.core.sandbox import SANDBOX_ENTRY_NAME, SandboxUnit, build_sandbox
from ytsig.exceptions import (
    ExecutionEngineUnavailableError,
    TransformInvocationError,
    TransformLocationError,
)
from ytsig.infra.dukpy_engine import DukpyScriptEngine

UNBOUND_SCRIPT = PLAYER_JS.replace("var _yt_player={};", "").replace(
    "})(_yt_player);", "})();"
)


class _JSRuntimeError(Exception):
    pass


def _install_fake_dukpy(monkeypatch: pytest.MonkeyPatch, session: MagicMock) -> MagicMock:
    module = MagicMock()
    module.JSRuntimeError = _JSRuntimeError
    module.JSInterpreter.return_value = session
    monkeypatch.setitem(sys.modules, "dukpy", module)
    return module


def _session(*results: object) -> MagicMock:
    session = MagicMock()
    session.evaljs.side_effect = list(results)
    return session


# ---------------------------------------------------------------------------
# Compile
# ---------------------------------------------------------------------------

class TestCompile:
    def test_evaluates_source_then_reads_entry(self, monkeypatch: pytest.MonkeyPatch) -> None:
        session = _session(None, "function")
        _install_fake_dukpy(monkeypatch, session)
        unit = build_sandbox(PLAYER_JS, "Nq")

        DukpyScriptEngine().compile(unit)

        first, second = session.evaljs.call_args_list
        assert first.args == (unit.source,)
        assert second.args == (f"typeof {SANDBOX_ENTRY_NAME}",)

    def test_transform_calls_entry_with_signature(self, monkeypatch: pytest.MonkeyPatch) -> None:
        session = _session(None, "function", "EGFHDCBA")
        _install_fake_dukpy(monkeypatch, session)

        transform = DukpyScriptEngine().compile(build_sandbox(PLAYER_JS, "Nq"))

        assert transform("ABCDEFGHIJ") == "EGFHDCBA"
        last = session.evaljs.call_args
        assert last.args == (f"{SANDBOX_ENTRY_NAME}(dukpy['signature'])",)
        assert last.kwargs == {"signature": "ABCDEFGHIJ"}

    @pytest.mark.parametrize("kind", ["undefined", "object", "string"])
    def test_entry_is_not_a_function(self, monkeypatch: pytest.MonkeyPatch, kind: str) -> None:
        _install_fake_dukpy(monkeypatch, _session(None, kind))

        with pytest.raises(TransformLocationError, match=kind) as exc_info:
            DukpyScriptEngine().compile(build_sandbox(UNBOUND_SCRIPT, "Nq"))
        assert "strip_window_alias" in (exc_info.value.hint or "")

    def test_evaluation_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        session = MagicMock()
        session.evaljs.side_effect = _JSRuntimeError("SyntaxError: parse error")
        _install_fake_dukpy(monkeypatch, session)

        with pytest.raises(TransformLocationError, match="parse error"):
            DukpyScriptEngine().compile(build_sandbox(PLAYER_JS, "Nq"))

    def test_context_start_failure(self, monkeypatch: pytest.MonkeyPatch) -> None:
        module = _install_fake_dukpy(monkeypatch, MagicMock())
        module.JSInterpreter.side_effect = MemoryError("heap")

        with pytest.raises(ExecutionEngineUnavailableError, match="heap"):
            DukpyScriptEngine().compile(build_sandbox(PLAYER_JS, "Nq"))

    def test_engine_name(self) -> None:
        assert DukpyScriptEngine.name == "dukpy"


# ---------------------------------------------------------------------------
# Invocation
# ---------------------------------------------------------------------------

class TestInvocation:
    def test_runtime_error_is_wrapped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        session = _session(None, "function", _JSRuntimeError("TypeError: undefined"))
        _install_fake_dukpy(monkeypatch, session)
        transform = DukpyScriptEngine().compile(build_sandbox(PLAYER_JS, "Nq"))

        with pytest.raises(TransformInvocationError, match="TypeError: undefined"):
            transform("ABC")

    @pytest.mark.parametrize("result", [None, 42, ["a"]])
    def test_non_string_result(self, monkeypatch: pytest.MonkeyPatch, result: object) -> None:
        _install_fake_dukpy(monkeypatch, _session(None, "function", result))
        transform = DukpyScriptEngine().compile(build_sandbox(PLAYER_JS, "Nq"))

        with pytest.raises(TransformInvocationError, match="expected a string"):
            transform("ABC")


# ---------------------------------------------------------------------------
# Missing dependency
# ---------------------------------------------------------------------------

class TestMissingDukpy:
    def test_compile_raises_engine_unavailable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setitem(sys.modules, "dukpy", None)

        with pytest.raises(ExecutionEngineUnavailableError, match="dukpy") as exc_info:
            DukpyScriptEngine().compile(build_sandbox(PLAYER_JS, "Nq"))
        assert "ytsig[dukpy]" in (exc_info.value.hint or "")


# ---------------------------------------------------------------------------
# Real Duktape
# ---------------------------------------------------------------------------

class TestRealDuktape:
    @pytest.fixture(autouse=True)
    def _require_dukpy(self) -> None:
        pytest.importorskip("dukpy")

    def test_transform_matches_player(self) -> None:
        transform = DukpyScriptEngine().compile(build_sandbox(PLAYER_JS, "Nq"))
        assert transform("ABCDEFGHIJ") == "EGFHDCBA"
        assert transform("ABCDEFGHIJ.KLM") == decipher_like_player("ABCDEFGHIJ.KLM")

    def test_unbound_entry(self) -> None:
        with pytest.raises(TransformLocationError, match="undefined"):
            DukpyScriptEngine().compile(build_sandbox(UNBOUND_SCRIPT, "Nq"))

    def test_throwing_entry(self) -> None:
        unit = SandboxUnit(
            source=f"var {SANDBOX_ENTRY_NAME} = function(s){{ throw new Error('boom'); }};",
            entry_name=SANDBOX_ENTRY_NAME,
            function_name="Nq",
            script="",
            applied=("expose_function", "bind_closure"),
        )
        transform = DukpyScriptEngine().compile(unit)
        with pytest.raises(TransformInvocationError, match="boom"):
            transform("ABC")

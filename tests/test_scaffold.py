"""Smoke tests — verify package wiring.

These tests prove that:
* The CLI entry point is importable and callable.
* The exception hierarchy is correctly structured.
* Version is accessible.
* Exit codes are defined.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest

from ytsig import __version__
from ytsig.cli import exit_codes
from ytsig.cli.app import cli, main
from ytsig.exceptions import (
    EnvironmentError,
    ExecutionEngineUnavailableError,
    FetchError,
    InvalidIdentifierError,
    PayloadUnparsableError,
    PlayerInfoUnobtainableError,
    TransformInvocationError,
    TransformLocationError,
    YtsigError,
    append_player_update_suggestion,
)


# ---------------------------------------------------------------------------
# Version
# ---------------------------------------------------------------------------

class TestVersion:
    def test_version_is_string(self) -> None:
        assert isinstance(__version__, str)

    def test_version_is_semver_like(self) -> None:
        parts = __version__.split(".")
        assert len(parts) == 3
        assert all(part.isdigit() for part in parts)


# ---------------------------------------------------------------------------
# Exception hierarchy
# ---------------------------------------------------------------------------

class TestExceptions:
    @pytest.mark.parametrize(
        "exc_class",
        [
            InvalidIdentifierError,
            FetchError,
            PayloadUnparsableError,
            PlayerInfoUnobtainableError,
            TransformLocationError,
            TransformInvocationError,
            EnvironmentError,
            ExecutionEngineUnavailableError,
        ],
    )
    def test_all_exceptions_inherit_from_base(
        self, exc_class: type[YtsigError]
    ) -> None:
        assert issubclass(exc_class, YtsigError)

    def test_engine_unavailable_is_environment_error(self) -> None:
        assert issubclass(ExecutionEngineUnavailableError, EnvironmentError)

    def test_base_inherits_from_exception(self) -> None:
        assert issubclass(YtsigError, Exception)

    def test_hint_is_stored(self) -> None:
        err = YtsigError("boom", hint="try this")
        assert str(err) == "boom"
        assert err.hint == "try this"

    def test_hint_defaults_to_none(self) -> None:
        err = YtsigError("boom")
        assert err.hint is None


class TestPlayerUpdateSuggestion:
    def test_appends_upgrade_command(self) -> None:
        hint = append_player_update_suggestion("No rule matched.")
        assert hint.startswith("No rule matched.\n")
        assert "pip install --upgrade yt-dlp ytsig" in hint

    def test_appended_only_once(self) -> None:
        once = append_player_update_suggestion("x")
        assert append_player_update_suggestion(once) == once


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

class TestExitCodes:
    def test_success_is_zero(self) -> None:
        assert exit_codes.SUCCESS == 0

    def test_general_error_is_one(self) -> None:
        assert exit_codes.GENERAL_ERROR == 1

    def test_keyboard_interrupt_is_130(self) -> None:
        assert exit_codes.KEYBOARD_INTERRUPT == 130

    def test_unexpected_error_is_two(self) -> None:
        assert exit_codes.UNEXPECTED_ERROR == 2

    def test_partial_success_is_distinct(self) -> None:
        assert exit_codes.PARTIAL_SUCCESS not in (
            exit_codes.SUCCESS,
            exit_codes.GENERAL_ERROR,
            exit_codes.UNEXPECTED_ERROR,
        )


# ---------------------------------------------------------------------------
# CLI routing
# ---------------------------------------------------------------------------

class TestCLIRouting:
    def test_no_args_returns_success(self, capsys: pytest.CaptureFixture[str]) -> None:
        """No arguments should print help and exit 0."""
        code = main([])
        assert code == exit_codes.SUCCESS
        assert "usage: ytsig" in capsys.readouterr().out

    def test_version_flag(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0

    @patch("ytsig.cli.doctor.run_doctor", return_value=exit_codes.SUCCESS)
    def test_doctor_returns_success(self, _mock_doc: object) -> None:
        code = main(["doctor"])
        assert code == exit_codes.SUCCESS

    def test_target_routes_to_extract(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A target argument should route to _handle_extract (mocked)."""
        from ytsig.cli import app as app_module

        seen: dict[str, object] = {}

        def fake_extract(target, settings, *, lenient, as_json):
            seen.update(target=target, settings=settings, lenient=lenient, as_json=as_json)
            return exit_codes.SUCCESS

        monkeypatch.setattr(app_module, "_handle_extract", fake_extract)
        monkeypatch.setattr(
            "ytsig.infra.logging_setup.configure_logging", lambda *args, **kwargs: None,
        )
        code = main(["dQw4w9WgXcQ", "--lenient", "--json", "--timeout", "4"])

        assert code == exit_codes.SUCCESS
        assert seen["target"] == "dQw4w9WgXcQ"
        assert seen["lenient"] is True
        assert seen["as_json"] is True
        assert seen["settings"].timeout_seconds == 4.0  # type: ignore[attr-defined]

    def test_invalid_configuration_is_ytsig_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("YTSIG_TIMEOUT_SECONDS", "soon")
        with pytest.raises(YtsigError, match="Invalid configuration"):
            main(["dQw4w9WgXcQ"])


# ---------------------------------------------------------------------------
# Error boundary
# ---------------------------------------------------------------------------

class TestErrorBoundary:
    def _run(self, monkeypatch: pytest.MonkeyPatch, exc: BaseException) -> int:
        from ytsig.cli import app as app_module

        def boom(argv=None):
            raise exc

        monkeypatch.setattr(app_module, "main", boom)
        with pytest.raises(SystemExit) as exc_info:
            cli()
        return exc_info.value.code  # type: ignore[return-value]

    def test_ytsig_error(self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
        code = self._run(monkeypatch, FetchError("HTTP 429", hint="slow down"))
        assert code == exit_codes.GENERAL_ERROR
        err = capsys.readouterr().err
        assert "HTTP 429" in err
        assert "slow down" in err

    def test_keyboard_interrupt(self, monkeypatch: pytest.MonkeyPatch) -> None:
        assert self._run(monkeypatch, KeyboardInterrupt()) == exit_codes.KEYBOARD_INTERRUPT

    def test_unexpected_error(
        self,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        code = self._run(monkeypatch, ZeroDivisionError("oops"))
        assert code == exit_codes.UNEXPECTED_ERROR
        assert "ZeroDivisionError" in capsys.readouterr().err

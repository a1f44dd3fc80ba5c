"""Custom exception hierarchy for ytsig.

All exceptions that cross layer boundaries must inherit from
:class:`YtsigError`.  Raw third-party exceptions (httpx, yt-dlp)
must NEVER propagate beyond the infrastructure layer — they must be
caught and re-raised as a typed subclass defined here.

Hierarchy
---------
YtsigError
├── InvalidIdentifierError
├── FetchError
├── PayloadUnparsableError
├── PlayerInfoUnobtainableError
├── TransformLocationError
├── TransformInvocationError
└── EnvironmentError
    └── ExecutionEngineUnavailableError
"""

from __future__ import annotations


class YtsigError(Exception):
    """Base exception for all ytsig errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Input validation ------------------------------------------------------

class InvalidIdentifierError(YtsigError):
    """Raised when a video identifier cannot be turned into a watch URL."""


# --- Page retrieval / payload ----------------------------------------------

class FetchError(YtsigError):
    """Raised when the page or player script cannot be retrieved."""


class PayloadUnparsableError(YtsigError):
    """Raised when the embedded player response is missing or malformed."""


class PlayerInfoUnobtainableError(YtsigError):
    """Raised when neither a stream URL nor the player script can be resolved."""


# --- Signature transform ---------------------------------------------------

class TransformLocationError(YtsigError):
    """Raised when the signature transform cannot be found in the player script."""


class TransformInvocationError(YtsigError):
    """Raised when the sandboxed transform fails or returns garbage."""


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(YtsigError):
    """Raised when a required runtime dependency is not available."""


class ExecutionEngineUnavailableError(EnvironmentError):
    """Raised when the JavaScript execution context cannot be created."""


def append_player_update_suggestion(hint: str) -> str:
    """Append guidance about changed player scripts to a hint text.

    The suggestion is appended only once and preserves the original
    hint content verbatim.
    """
    marker = "The player script layout may have changed:"
    if marker in hint:
        return hint
    return "\n".join(
        (
            hint,
            marker,
            "    pip install --upgrade yt-dlp ytsig",
        )
    )

"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols — never on httpx or
yt-dlp directly — preserving the dependency inversion principle.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ytsig.core.sandbox import SandboxUnit

Transform = Callable[[str], str]
"""A compiled signature transform: ciphertext in, plaintext out."""


class PageFetcher(Protocol):
    """Contract for the HTTP transport.

    Any object that implements :meth:`fetch` with the correct signature
    satisfies this protocol structurally (no explicit inheritance
    required).
    """

    def fetch(self, url: str) -> bytes:
        """Retrieve *url* and return the raw response body.

        Raises
        ------
        FetchError
            On any transport failure or non-success status.
        """
        ...  # pragma: no cover


class ScriptEngine(Protocol):
    """Contract for JavaScript execution backends.

    An engine turns a :class:`~ytsig.core.sandbox.SandboxUnit` into a
    plain Python callable.  The unit carries both the rewritten sandbox
    source and the untouched player script, so each engine can pick the
    representation it is able to run.
    """

    name: str

    def compile(self, unit: SandboxUnit) -> Transform:
        """Evaluate *unit* and return the exposed transform.

        Raises
        ------
        ExecutionEngineUnavailableError
            When the execution context cannot be created.
        TransformLocationError
            When evaluation does not yield a callable.

        The returned callable raises
        :class:`~ytsig.exceptions.TransformInvocationError` when the
        script fails at call time.
        """
        ...  # pragma: no cover

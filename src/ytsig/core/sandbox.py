"""Sandbox construction for the player script.

The player script is a single closure invoked with the ``_yt_player``
namespace object::

    var _yt_player={};(function(g){var window=this; ... })(_yt_player);

Four independent text rewrites turn it into a unit that runs without a
browser and hands back the signature transform:

1. ``return <name>;`` before the closing ``})(_yt_player);``
2. drop ``var window=this`` aliasing
3. stub ``document`` / ``XMLHttpRequest`` / ``navigator`` / ``window``
   right after the namespace object is created
4. bind the closure's result to :data:`SANDBOX_ENTRY_NAME`

Each rewrite is applied at most once.  A rewrite whose anchor is missing
is skipped and left out of :attr:`SandboxUnit.applied`.  Without rewrites
1 and 4 the unit never binds the entry name, so
:attr:`SandboxUnit.exposes_entry` is false and every engine refuses it
with :class:`~ytsig.exceptions.TransformLocationError`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

import structlog

log = structlog.get_logger(__name__)

SANDBOX_ENTRY_NAME = "_ytsig_transform"
"""Top-level binding that holds the transform after evaluation."""

BROWSER_STUBS = (
    "var document = null;"
    "var XMLHttpRequest = { prototype: { fetch: null } };"
    "var navigator = { mediaCapabilities: null };"
    'var window = { location: { hostname: "" } };'
)

REQUIRED_REWRITES = ("expose_function", "bind_closure")
"""Rewrites without which the entry name is never bound to the transform."""

_CLOSURE_END_RE = re.compile(r"\}\s*\)\s*\(\s*_yt_player\s*\);$")
_WINDOW_ALIAS_RE = re.compile(r"var\s+window\s*=\s*this")
_NAMESPACE_RE = re.compile(r"var\s+_yt_player\s*=\s*\{\s*\};")
_CLOSURE_START_RE = re.compile(r"(var\s+_yt_player\s*=\s*\{\s*\};[^(]*?)(\(function\s*\()")


@dataclass(frozen=True, slots=True)
class SandboxUnit:
    """A player script prepared for evaluation by a script engine."""

    source: str
    """Rewritten script exposing :attr:`entry_name` at top level."""

    entry_name: str
    """Global name bound to the transform once :attr:`source` has run."""

    function_name: str
    """Minified name of the transform inside the original script."""

    script: str
    """The untouched player script, for engines that interpret it directly."""

    applied: tuple[str, ...] = ()
    """Names of the rewrites whose anchors were found."""

    @property
    def exposes_entry(self) -> bool:
        """True when the source returns the transform and binds :attr:`entry_name`."""
        if any(name not in self.applied for name in REQUIRED_REWRITES):
            return False
        binding = re.compile(rf"\bvar\s+{re.escape(self.entry_name)}\s*=")
        return binding.search(self.source) is not None


# ---------------------------------------------------------------------------
# Individual rewrites
# ---------------------------------------------------------------------------

def expose_function(source: str, function_name: str) -> tuple[str, bool]:
    """Return *function_name* from the wrapping closure."""
    rewritten, count = _CLOSURE_END_RE.subn(
        lambda m: f"return {function_name};{m.group(0)}", source, count=1,
    )
    return rewritten, count > 0


def strip_window_alias(source: str) -> tuple[str, bool]:
    """Remove ``var window = this`` so the stub ``window`` stays visible."""
    rewritten, count = _WINDOW_ALIAS_RE.subn("", source, count=1)
    return rewritten, count > 0


def inject_browser_stubs(source: str) -> tuple[str, bool]:
    """Declare minimal browser globals after the namespace object."""
    rewritten, count = _NAMESPACE_RE.subn(
        lambda m: m.group(0) + BROWSER_STUBS, source, count=1,
    )
    return rewritten, count > 0


def bind_closure(source: str, entry_name: str = SANDBOX_ENTRY_NAME) -> tuple[str, bool]:
    """Assign the self-invoking closure's result to *entry_name*."""
    rewritten, count = _CLOSURE_START_RE.subn(
        lambda m: f"{m.group(1)}var {entry_name} = {m.group(2)}", source, count=1,
    )
    return rewritten, count > 0


# ---------------------------------------------------------------------------
# Composite builder
# ---------------------------------------------------------------------------

def build_sandbox(script: str, function_name: str) -> SandboxUnit:
    """Apply all rewrites to *script* and package the result."""
    source = script
    applied: list[str] = []

    source, ok = expose_function(source, function_name)
    if ok:
        applied.append("expose_function")
    source, ok = strip_window_alias(source)
    if ok:
        applied.append("strip_window_alias")
    source, ok = inject_browser_stubs(source)
    if ok:
        applied.append("inject_browser_stubs")
    source, ok = bind_closure(source)
    if ok:
        applied.append("bind_closure")

    if any(name not in applied for name in REQUIRED_REWRITES):
        log.warning(
            "sandbox_anchor_missing",
            function=function_name,
            applied=applied,
        )

    return SandboxUnit(
        source=source,
        entry_name=SANDBOX_ENTRY_NAME,
        function_name=function_name,
        script=script,
        applied=tuple(applied),
    )

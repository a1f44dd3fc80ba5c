"""Ordered heuristic rules that name the signature transform function.

The player script is minified and its shape drifts between
deployments, so the transform is found by trying a fixed, ordered
table of regular expressions.  The **first** rule that matches anywhere
in the script wins; later rules are never consulted.  Order encodes
observed precedence between script variants — append new shapes where
they belong rather than reordering existing ones.

Every pattern captures exactly one group: the function name.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from ytsig.exceptions import TransformLocationError, append_player_update_suggestion

log = structlog.get_logger(__name__)

_NAME = r"([a-zA-Z0-9$]+)"
_NAME_2PLUS = r"([a-zA-Z0-9$]{2,})"


@dataclass(frozen=True, slots=True)
class CipherRule:
    """One ``(pattern, extractor)`` entry of the locator table."""

    name: str
    """Short label used in logs and tests."""

    pattern: re.Pattern[str]
    """Compiled expression with exactly one capturing group."""

    def search(self, script: str) -> str | None:
        """Return the captured function name, or ``None`` when absent."""
        match = self.pattern.search(script)
        if match is None:
            return None
        return match.group(1)


def _rule(name: str, pattern: str) -> CipherRule:
    compiled = re.compile(pattern)
    if compiled.groups != 1:
        raise ValueError(f"Cipher rule {name!r} must capture exactly one group")
    return CipherRule(name=name, pattern=compiled)


DEFAULT_RULES: tuple[CipherRule, ...] = (
    _rule(
        "encode_uri_set_cs",
        r"\b[cs]\s*&&\s*[adf]\.set\([^,]+\s*,\s*encodeURIComponent\s*\(\s*" + _NAME + r"\(",
    ),
    _rule(
        "encode_uri_set_any",
        r"\b[a-zA-Z0-9]+\s*&&\s*[a-zA-Z0-9]+\.set\([^,]+\s*,\s*encodeURIComponent\s*\(\s*"
        + _NAME
        + r"\(",
    ),
    _rule(
        "m_assign_decode",
        r"\bm=" + _NAME_2PLUS + r"\(decodeURIComponent\(h\.s\)\)",
    ),
    _rule(
        "c_assign_decode",
        r"\bc&&\(c=" + _NAME_2PLUS + r"\(decodeURIComponent\(c\)\)",
    ),
    _rule(
        "split_definition_with_helper",
        r"(?:\b|[^a-zA-Z0-9$])" + _NAME_2PLUS
        + r'\s*=\s*function\(\s*a\s*\)\s*\{\s*a\s*=\s*a\.split\(\s*""\s*\)'
        r"(?:;[a-zA-Z0-9$]{2}\.[a-zA-Z0-9$]{2}\(a,\d+\))?",
    ),
    _rule(
        "split_definition",
        _NAME + r'\s*=\s*function\(\s*a\s*\)\s*\{\s*a\s*=\s*a\.split\(\s*""\s*\)',
    ),
    _rule(
        "signature_argument",
        r"""(?:"signature"|'signature')\s*,\s*""" + _NAME + r"\(",
    ),
    _rule(
        "sig_or_call",
        r"\.sig\|\|" + _NAME + r"\(",
    ),
    _rule(
        "akamaized_set",
        r"yt\.akamaized\.net/\)\s*\|\|\s*.*?\s*[cs]\s*&&\s*[adf]\.set\([^,]+\s*,\s*"
        r"(?:encodeURIComponent\s*\()?\s*" + _NAME + r"\(",
    ),
    _rule(
        "set_call_cs",
        r"\b[cs]\s*&&\s*[adf]\.set\([^,]+\s*,\s*" + _NAME + r"\(",
    ),
    _rule(
        "set_call_any",
        r"\b[a-zA-Z0-9]+\s*&&\s*[a-zA-Z0-9]+\.set\([^,]+\s*,\s*" + _NAME + r"\(",
    ),
    _rule(
        "c_set_call_wrapped",
        r"\bc\s*&&\s*[a-zA-Z0-9]+\.set\([^,]+\s*,\s*\([^)]*\)\s*\(\s*" + _NAME + r"\(",
    ),
)
"""Built-in rule table, highest precedence first."""


def find_transform_name(
    script: str,
    rules: Sequence[CipherRule] = DEFAULT_RULES,
) -> tuple[CipherRule, str] | None:
    """Return the first matching ``(rule, function_name)`` pair, or ``None``."""
    for rule in rules:
        name = rule.search(script)
        if name is not None:
            return rule, name
    return None


def locate_transform_name(
    script: str,
    rules: Sequence[CipherRule] = DEFAULT_RULES,
) -> str:
    """Name the signature transform defined in *script*.

    Raises
    ------
    TransformLocationError
        When no rule in *rules* matches.
    """
    found = find_transform_name(script, rules)
    if found is None:
        log.warning("cipher_rules_exhausted", rules=len(rules), script_length=len(script))
        raise TransformLocationError(
            "Could not locate the signature function in the player script.",
            hint=append_player_update_suggestion(
                f"None of the {len(rules)} known call-site patterns matched.",
            ),
        )
    rule, name = found
    log.debug("cipher_rule_matched", rule=rule.name, function=name)
    return name

"""Query-string multimap parsing for ``signatureCipher`` blobs.

The parser keeps a dual representation: a key seen once maps to its
decoded string, a repeated key maps to an ordered list of decoded
strings.  Lookups go through :func:`first_value`, which accepts both
shapes.
"""

from __future__ import annotations

from collections.abc import Mapping
from urllib.parse import unquote

QueryValue = str | list[str]


def parse_query_string(blob: str) -> dict[str, QueryValue]:
    """Decode ``key=value&key=value`` pairs into a multimap.

    * A leading ``?`` is stripped.
    * Pairs without ``=`` are skipped.
    * Values are percent-decoded; ``+`` is left untouched.
    * Never raises on malformed input.

    >>> parse_query_string("a=1&b=hello%20world")
    {'a': '1', 'b': 'hello world'}
    >>> parse_query_string("s=AAA&s=BBB")
    {'s': ['AAA', 'BBB']}
    """
    if blob.startswith("?"):
        blob = blob[1:]

    result: dict[str, QueryValue] = {}
    for pair in blob.split("&"):
        key, sep, raw_value = pair.partition("=")
        if not sep or not key:
            continue
        value = unquote(raw_value)

        existing = result.get(key)
        if existing is None:
            result[key] = value
        elif isinstance(existing, list):
            existing.append(value)
        else:
            result[key] = [existing, value]
    return result


def first_value(parsed: Mapping[str, QueryValue], key: str) -> str | None:
    """Return the single value for *key*, or the first of many, else ``None``."""
    value = parsed.get(key)
    if isinstance(value, list):
        return value[0] if value else None
    return value

"""Test support: a synthetic player script and payload builders.

Imported by ``conftest.py`` and directly by test modules that need the
raw constants.
"""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import quote

PLAYER_PATH = "/s/player/0a1b2c3d/player_ias.vflset/en_US/base.js"
PLAYER_URL = "https://www.youtube.com" + PLAYER_PATH

# A miniature player: the real thing is ~1 MB, but the shape around the
# signature function is the same.  Nq reverses, drops two characters,
# then swaps positions 0 and 3.
PLAYER_JS = (
    "var _yt_player={};(function(g){var window=this;"
    "var Xy={ab:function(a,b){a.splice(0,b)},"
    "cd:function(a){a.reverse()},"
    "ef:function(a,b){var c=a[0];a[0]=a[b%a.length];a[b%a.length]=c}};"
    'Nq=function(a){a=a.split("");Xy.cd(a,1);Xy.ab(a,2);Xy.ef(a,3);return a.join("")};'
    "g.sig=function(b,c,d){c&&d.set(b,encodeURIComponent(Nq(decodeURIComponent(c))))};"
    "})(_yt_player);\n"
)


def decipher_like_player(signature: str) -> str:
    """Python rendition of ``Nq`` above, for computing expectations."""
    chars = list(reversed(signature))[2:]
    pos = 3 % len(chars)
    chars[0], chars[pos] = chars[pos], chars[0]
    return "".join(chars)


def make_cipher(signature: str, url: str, sp: str | None = "sig") -> str:
    """Build a ``signatureCipher`` blob the way the payload encodes it."""
    parts = [f"s={quote(signature, safe='')}"]
    if sp is not None:
        parts.append(f"sp={sp}")
    parts.append(f"url={quote(url, safe='')}")
    return "&".join(parts)


def make_watch_page(
    player_response: dict[str, Any] | None,
    *,
    player_path: str | None = PLAYER_PATH,
) -> str:
    """Render a minimal watch page embedding *player_response*."""
    chunks = ["<html><body>"]
    if player_response is not None:
        chunks.append(
            "<script>var ytInitialPlayerResponse = "
            + json.dumps(player_response)
            + ';var meta = document.createElement("meta");</script>'
        )
    if player_path is not None:
        chunks.append(
            '<script>ytcfg.set({"PLAYER_JS_URL":"' + player_path.replace("/", "\\/") + '"});</script>'
        )
    chunks.append("</body></html>")
    return "".join(chunks)



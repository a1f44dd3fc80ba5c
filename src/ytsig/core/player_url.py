"""Player-script URL resolution from watch-page markup."""

from __future__ import annotations

import re

DEFAULT_BASE_URL = "https://www.youtube.com/"

_PLAYER_URL_RE = re.compile(r'"(?:PLAYER_JS_URL|jsUrl)"\s*:\s*"([^"]+)"')
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*:")


def extract_player_url(webpage: str, base_url: str = DEFAULT_BASE_URL) -> str | None:
    """Return the absolute URL of the versioned player script, or ``None``.

    The first ``PLAYER_JS_URL`` / ``jsUrl`` value wins.  JSON-escaped
    slashes are unescaped, protocol-relative values get ``https:`` and
    site-relative values are joined onto *base_url*.

    ``None`` means "cannot decrypt" — the caller decides whether that
    matters, since unciphered streams never need the player.
    """
    match = _PLAYER_URL_RE.search(webpage)
    if match is None:
        return None

    player_url = match.group(1).replace("\\/", "/")
    if player_url.startswith("//"):
        return "https:" + player_url
    if _SCHEME_RE.match(player_url):
        return player_url
    return base_url.rstrip("/") + "/" + player_url.lstrip("/")

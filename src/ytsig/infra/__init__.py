"""Infrastructure layer — external system integration.

This layer wraps all interaction with httpx, the JavaScript engines
(yt-dlp's interpreter, dukpy) and the logging backend.  Every raw
third-party exception must be caught here and re-raised as a
:class:`~ytsig.exceptions.YtsigError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from ytsig.infra.dukpy_engine import DukpyScriptEngine
from ytsig.infra.http_fetcher import HttpxPageFetcher
from ytsig.infra.logging_setup import configure_logging
from ytsig.infra.ytdlp_engine import YtDlpScriptEngine

__all__: list[str] = [
    "DukpyScriptEngine",
    "HttpxPageFetcher",
    "YtDlpScriptEngine",
    "configure_logging",
]

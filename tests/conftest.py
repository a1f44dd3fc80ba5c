"""Shared pytest fixtures and configuration for the ytsig test suite.

Guidelines
----------
* No internet access in any test.
* httpx and yt-dlp are replaced at the infra boundary, except in the
  engine tests that exercise yt-dlp's interpreter on a synthetic player.
* Core tests must be pure — no side effects.
"""

from __future__ import annotations

import os
from typing import Any

import pytest

from support import PLAYER_JS, make_cipher


@pytest.fixture(autouse=True)
def _isolate_ytsig_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's ``YTSIG_*`` variables out of every test."""
    for name in list(os.environ):
        if name.upper().startswith("YTSIG_"):
            monkeypatch.delenv(name)


@pytest.fixture
def player_js() -> str:
    return PLAYER_JS


@pytest.fixture
def muxed_descriptor() -> dict[str, Any]:
    return {
        "itag": 18,
        "url": "https://rr1.googlevideo.com/videoplayback?expire=1&itag=18",
        "mimeType": 'video/mp4; codecs="avc1.42001E, mp4a.40.2"',
        "bitrate": 503000,
        "width": 640,
        "height": 360,
        "contentLength": "11234567",
        "quality": "medium",
        "qualityLabel": "360p",
        "audioSampleRate": "44100",
    }


@pytest.fixture
def ciphered_descriptor() -> dict[str, Any]:
    return {
        "itag": 251,
        "signatureCipher": make_cipher(
            "ABCDEFGHIJ.KLM",
            "https://rr1.googlevideo.com/videoplayback?expire=1&itag=251",
        ),
        "mimeType": 'audio/webm; codecs="opus"',
        "averageBitrate": 129000,
        "bitrate": 150000,
        "audioSampleRate": "48000",
        "quality": "tiny",
    }

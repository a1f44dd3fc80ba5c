"""Tests for domain models (core/models.py).

All models are frozen dataclasses — these tests verify immutability,
equality semantics, and collection behaviour.
"""

from __future__ import annotations

import pytest

from ytsig.core.models import DescriptorFailure, Format, FormatCollection, PlayerKey


# ---------------------------------------------------------------------------
# Fixtures — reusable model instances
# ---------------------------------------------------------------------------

def _make_format(**overrides: object) -> Format:
    """Factory with sensible defaults for concise tests."""
    defaults: dict[str, object] = {
        "url": "https://rr1.googlevideo.com/videoplayback?itag=137",
        "itag": "137",
        "height": 1080,
        "width": 1920,
        "mime_type": 'video/mp4; codecs="avc1.640028"',
        "file_extension": "mp4",
    }
    defaults.update(overrides)
    return Format(**defaults)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Format
# ---------------------------------------------------------------------------

class TestFormat:
    def test_only_url_is_required(self) -> None:
        f = Format(url="https://example.com/v")
        assert f.itag is None
        assert f.filesize is None
        assert f.bitrate is None
        assert f.file_extension is None

    def test_frozen(self) -> None:
        f = _make_format()
        with pytest.raises(AttributeError):
            f.url = "other"  # type: ignore[misc]

    def test_equality(self) -> None:
        assert _make_format() == _make_format()
        assert _make_format(itag="22") != _make_format()

    def test_hashable(self) -> None:
        assert len({_make_format(), _make_format()}) == 1


# ---------------------------------------------------------------------------
# PlayerKey / DescriptorFailure
# ---------------------------------------------------------------------------

class TestPlayerKey:
    def test_value_semantics(self) -> None:
        a = PlayerKey("https://x/base.js", "10.3")
        b = PlayerKey(script_url="https://x/base.js", fingerprint="10.3")
        assert a == b
        assert hash(a) == hash(b)

    def test_fingerprint_distinguishes(self) -> None:
        assert PlayerKey("https://x/base.js", "10.3") != PlayerKey("https://x/base.js", "11")


class TestDescriptorFailure:
    def test_fields(self) -> None:
        failure = DescriptorFailure(itag="251", reason="no rule matched")
        assert failure.itag == "251"
        assert failure.reason == "no rule matched"


# ---------------------------------------------------------------------------
# FormatCollection
# ---------------------------------------------------------------------------

class TestFormatCollection:
    def test_len_and_iter(self) -> None:
        formats = (_make_format(itag="18"), _make_format(itag="137"))
        collection = FormatCollection(formats=formats)
        assert len(collection) == 2
        assert [f.itag for f in collection] == ["18", "137"]

    def test_empty_is_falsy(self) -> None:
        assert not FormatCollection(formats=())
        assert FormatCollection(formats=(_make_format(),))

    def test_failures_default_empty(self) -> None:
        assert FormatCollection(formats=()).failures == ()

    def test_failures_do_not_count_as_formats(self) -> None:
        collection = FormatCollection(
            formats=(),
            failures=(DescriptorFailure(itag="251", reason="x"),),
        )
        assert len(collection) == 0
        assert not collection

    def test_frozen(self) -> None:
        collection = FormatCollection(formats=())
        with pytest.raises(AttributeError):
            collection.formats = ()  # type: ignore[misc]

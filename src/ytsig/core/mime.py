"""MIME type to file extension lookup."""

from __future__ import annotations

_FULL_TYPE_EXTENSIONS: dict[str, str] = {
    "audio/mp4": "m4a",
    "audio/mpeg": "mp3",
}

_SUBTYPE_EXTENSIONS: dict[str, str] = {
    "3gpp": "3gp",
    "smptett+xml": "tt",
    "ttaf+xml": "dfxp",
    "ttml+xml": "ttml",
    "x-flv": "flv",
    "x-mp4-fragmented": "mp4",
    "x-ms-sami": "sami",
    "x-ms-wmv": "wmv",
    "mpegurl": "m3u8",
    "x-mpegurl": "m3u8",
    "vnd.apple.mpegurl": "m3u8",
    "dash+xml": "mpd",
    "f4m+xml": "f4m",
    "hds+xml": "f4m",
    "vnd.ms-sstr+xml": "ism",
    "quicktime": "mov",
    "mp2t": "ts",
    "x-wav": "wav",
}


def file_extension(mime_type: str) -> str | None:
    """Map ``video/mp4; codecs="avc1"`` style MIME types to an extension.

    Full-type overrides win, then the subtype table, then the raw
    subtype itself.  Returns ``None`` only for an empty type.
    """
    essence = mime_type.split(";", 1)[0].strip().lower()
    if not essence:
        return None
    override = _FULL_TYPE_EXTENSIONS.get(essence)
    if override is not None:
        return override
    subtype = essence.rsplit("/", 1)[-1]
    if not subtype:
        return None
    return _SUBTYPE_EXTENSIONS.get(subtype, subtype)

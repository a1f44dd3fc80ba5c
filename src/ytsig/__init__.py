"""ytsig — YouTube stream resolver with signature-cipher reversal.

Resolves a video identifier into playable stream formats, deciphering
signed stream URLs with the transform extracted from the player script.
"""

from ytsig.version import __version__

__all__: list[str] = ["__version__"]

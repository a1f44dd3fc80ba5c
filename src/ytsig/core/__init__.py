"""Core / service layer — pure business logic and orchestration.

Rules
-----
* No ``print()`` calls.
* No direct filesystem or network I/O — only injected protocols.
* No imports from ``cli`` or ``infra``.
"""

from ytsig.core.cipher_rules import DEFAULT_RULES, CipherRule, locate_transform_name
from ytsig.core.decipher_service import TransformBuilder
from ytsig.core.extraction_service import ExtractionService, normalize_video_id
from ytsig.core.format_assembler import FormatAssembler
from ytsig.core.models import DescriptorFailure, Format, FormatCollection, PlayerKey
from ytsig.core.protocols import PageFetcher, ScriptEngine, Transform
from ytsig.core.query_string import parse_query_string
from ytsig.core.sandbox import SandboxUnit, build_sandbox
from ytsig.core.signature_cache import SignatureCache, fingerprint

__all__: list[str] = [
    "DEFAULT_RULES",
    "CipherRule",
    "DescriptorFailure",
    "ExtractionService",
    "Format",
    "FormatAssembler",
    "FormatCollection",
    "PageFetcher",
    "PlayerKey",
    "SandboxUnit",
    "ScriptEngine",
    "SignatureCache",
    "Transform",
    "TransformBuilder",
    "build_sandbox",
    "fingerprint",
    "locate_transform_name",
    "normalize_video_id",
    "parse_query_string",
]

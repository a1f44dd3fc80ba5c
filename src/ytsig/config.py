"""Runtime settings for ytsig.

Settings are a frozen pydantic-settings model with sane defaults.  Every
field can be overridden by a ``YTSIG_*`` environment variable
(``YTSIG_TIMEOUT_SECONDS``, ``YTSIG_LOG_LEVEL``…); keyword arguments
passed to :class:`Settings` win over the environment, which is how the
CLI applies its own flags.

Validation failures raise :class:`pydantic.ValidationError`, a
``ValueError`` subclass.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["console", "json"]
EngineName = Literal["yt-dlp", "dukpy"]

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    """Knobs shared by the infra adapters and the extraction service."""

    model_config = SettingsConfigDict(
        env_prefix="YTSIG_",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    base_url: str = Field(
        default="https://www.youtube.com/",
        description="Canonical site origin used for watch pages and relative player URLs",
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="User-Agent header sent with every request",
    )
    timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        description="Per-request timeout for page and player-script fetches",
    )
    cache_max_entries: Optional[int] = Field(
        default=None,
        ge=1,
        description="Bound for the transform cache; None disables eviction",
    )
    engine: EngineName = Field(
        default="yt-dlp",
        description="JavaScript engine that runs the sandboxed player script",
    )
    log_level: LogLevel = "WARNING"
    log_format: LogFormat = "console"

    @field_validator("cache_max_entries", mode="before")
    @classmethod
    def _unbounded_spellings(cls, value: Any) -> Any:
        # "", "0" and "none" all mean "no bound" when read from the environment.
        if isinstance(value, str) and value.strip().lower() in ("", "0", "none"):
            return None
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value

    @field_validator("engine", "log_format", mode="before")
    @classmethod
    def _lower_name(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

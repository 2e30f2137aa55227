"""
Configuration models for logbatch using Pydantic v2 Settings.

Settings are grouped into process-wide ``core`` options (formatting,
transport timeout, diagnostics) and named ``profiles`` that describe a
delivery target (endpoint, hostname inclusion, batch mode). The active
profile is chosen by ``Settings.profile``.

Environment examples::

    LOGBATCH_PROFILE=staging
    LOGBATCH_CORE__TIMEOUT_SECONDS=2.5
    LOGBATCH_PROFILES='{"default": {"endpoint_url": "https://logs.example.com/inputs/abc"}}'
    LOGBATCH_PROFILES__DEFAULT__BATCH_MODE_ENABLED=true
"""

from __future__ import annotations

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LATEST_CONFIG_SCHEMA_VERSION = "1.0"

DEFAULT_LEVEL = "INFO"
# %L renders milliseconds, see encoder.format_timestamp
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S.%L%z"
DEFAULT_PROFILE = "default"


class CoreSettings(BaseModel):
    """Process-wide formatting, transport and diagnostics settings."""

    default_level: str = Field(
        default=DEFAULT_LEVEL,
        description="Level assigned to records logged without an explicit level",
    )
    date_format: str = Field(
        default=DEFAULT_DATE_FORMAT,
        description="strftime pattern for the datetime field; %L is milliseconds",
    )
    display_timezone: str | None = Field(
        default=None,
        description="IANA zone used to render timestamps; record offset when unset",
    )
    timeout_seconds: float = Field(
        default=5.0,
        gt=0.0,
        description="HTTP client timeout for a single delivery",
    )
    enable_metrics: bool = Field(
        default=False,
        description="Enable Prometheus-compatible delivery metrics",
    )
    internal_logging_enabled: bool = Field(
        default=True,
        description="Emit DEBUG/WARN diagnostics for delivery failures and drops",
    )

    @field_validator("date_format")
    @classmethod
    def _ensure_date_format_non_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("date_format must not be empty")
        return value

    @field_validator("display_timezone")
    @classmethod
    def _ensure_known_timezone(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value


class ProfileSettings(BaseModel):
    """A named delivery target."""

    endpoint_url: str = Field(default="", description="Log ingestion endpoint URL")
    include_hostname: bool = Field(
        default=False, description="Add the host field to every encoded record"
    )
    hostname: str | None = Field(default=None, description="Value of the host field")
    batch_mode_enabled: bool = Field(
        default=False,
        description="Route single_log calls into a batch instead of sending",
    )

    @field_validator("endpoint_url", mode="before")
    @classmethod
    def _strip_endpoint(cls, value: str | None) -> str:
        if value is None:
            return ""
        return str(value).strip()


class Settings(BaseSettings):
    """Top-level configuration model with versioning, core settings and profiles."""

    schema_version: str = Field(default=LATEST_CONFIG_SCHEMA_VERSION)

    profile: str = Field(default=DEFAULT_PROFILE, description="Active profile name")
    core: CoreSettings = Field(default_factory=CoreSettings)
    profiles: dict[str, ProfileSettings] = Field(default_factory=dict)

    model_config = SettingsConfigDict(
        env_prefix="LOGBATCH_",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("profiles", mode="before")
    @classmethod
    def _normalize_profile_names(cls, value: object) -> object:
        if isinstance(value, dict):
            return {str(k).lower(): v for k, v in value.items()}
        return value

    def to_json(self) -> str:
        import json

        return json.dumps(self.model_dump(by_alias=True, exclude_none=True))

    def to_dict(self) -> dict[str, object]:
        from typing import cast

        return cast(
            dict[str, object],
            self.model_dump(by_alias=True, exclude_none=True),
        )

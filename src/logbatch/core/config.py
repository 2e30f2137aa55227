"""
Configuration providers and resolve-once configuration.

A provider maps a profile name to ``ProfileSettings``. ``resolve_config``
combines one profile with the core settings into an immutable
``ResolvedConfig`` that is handed explicitly to the encoder and dispatcher.
``ConfigResolver`` performs that resolution lazily, exactly once.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Mapping, Protocol, runtime_checkable

from . import diagnostics
from .settings import (
    DEFAULT_DATE_FORMAT,
    DEFAULT_LEVEL,
    DEFAULT_PROFILE,
    CoreSettings,
    ProfileSettings,
    Settings,
)


@runtime_checkable
class ConfigProvider(Protocol):
    """Resolves named delivery profiles."""

    def get_profile(self, name: str) -> ProfileSettings | None:  # pragma: no cover
        ...


class SettingsConfigProvider:
    """Provider backed by a ``Settings`` instance (environment by default)."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings if settings is not None else Settings()

    @property
    def settings(self) -> Settings:
        return self._settings

    def get_profile(self, name: str) -> ProfileSettings | None:
        return self._settings.profiles.get(name.lower())


class StaticConfigProvider:
    """In-memory provider, mainly for tests and embedded use."""

    def __init__(
        self, profiles: Mapping[str, ProfileSettings | Mapping[str, object]]
    ) -> None:
        self._profiles: dict[str, ProfileSettings] = {}
        for name, value in profiles.items():
            if isinstance(value, ProfileSettings):
                self._profiles[name.lower()] = value
            else:
                self._profiles[name.lower()] = ProfileSettings.model_validate(value)

    def get_profile(self, name: str) -> ProfileSettings | None:
        return self._profiles.get(name.lower())


@dataclass(frozen=True)
class ResolvedConfig:
    """Immutable configuration snapshot used by encoder and dispatcher."""

    profile: str = DEFAULT_PROFILE
    endpoint_url: str = ""
    include_hostname: bool = False
    hostname: str = ""
    batch_mode_enabled: bool = False
    default_level: str = DEFAULT_LEVEL
    date_format: str = DEFAULT_DATE_FORMAT
    display_timezone: str | None = None
    timeout_seconds: float = 5.0
    enable_metrics: bool = False

    @property
    def host_field(self) -> str | None:
        """Hostname to encode, or None when the host field is omitted."""
        if self.include_hostname and self.hostname:
            return self.hostname
        return None


def resolve_config(
    provider: ConfigProvider,
    profile: str = DEFAULT_PROFILE,
    core: CoreSettings | None = None,
) -> ResolvedConfig:
    """Build a ``ResolvedConfig`` for *profile*.

    A missing profile is not an error here: defaults are used (empty
    endpoint) and the failure surfaces later, contained, at send time.
    """
    core = core if core is not None else CoreSettings()
    found = provider.get_profile(profile)
    if found is None:
        diagnostics.warn(
            "config",
            "configuration profile missing",
            profile=profile,
        )
        found = ProfileSettings()
    elif not found.endpoint_url:
        diagnostics.warn(
            "config",
            "profile has no endpoint_url",
            profile=profile,
        )
    return ResolvedConfig(
        profile=profile,
        endpoint_url=found.endpoint_url,
        include_hostname=found.include_hostname,
        hostname=found.hostname or "",
        batch_mode_enabled=found.batch_mode_enabled,
        default_level=core.default_level,
        date_format=core.date_format,
        display_timezone=core.display_timezone,
        timeout_seconds=core.timeout_seconds,
        enable_metrics=core.enable_metrics,
    )


class ConfigResolver:
    """Lazily resolves configuration once and caches it for its lifetime."""

    def __init__(
        self,
        provider: ConfigProvider | None = None,
        *,
        profile: str | None = None,
        settings: Settings | None = None,
    ) -> None:
        if settings is None and isinstance(provider, SettingsConfigProvider):
            settings = provider.settings
        self._settings = settings
        self._provider = provider
        self._profile = profile
        self._resolved: ResolvedConfig | None = None
        self._lock = threading.Lock()

    @property
    def is_resolved(self) -> bool:
        return self._resolved is not None

    def get(self) -> ResolvedConfig:
        if self._resolved is not None:
            return self._resolved
        with self._lock:
            if self._resolved is None:
                settings = self._settings if self._settings is not None else Settings()
                provider = self._provider or SettingsConfigProvider(settings)
                profile = self._profile or settings.profile
                self._resolved = resolve_config(provider, profile, settings.core)
            return self._resolved

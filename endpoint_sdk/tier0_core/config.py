"""
endpoint_sdk.tier0_core.config
────────────────────────────────
Typed discovery configuration with env layering. Reads from .env →
environment variables. All fields are typed via Pydantic; a malformed
override address or an unknown platform fails at startup, never during a
discovery run.

Minimal stack: pydantic-settings + python-dotenv
"""
from __future__ import annotations

import re
from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from endpoint_sdk.tier0_core.http import DEFAULT_HEALTH_PATH, check_base_url

PLATFORMS = frozenset({"android", "ios", "web"})
ENVIRONMENTS = frozenset({"development", "staging", "production", "test"})


def _split_csv(raw: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in raw.split(",") if item.strip())


# Bare host names or IPv4 literals only.
_HOST_RE = re.compile(r"^(?!-)[A-Za-z0-9-]{1,63}(?<!-)(\.(?!-)[A-Za-z0-9-]{1,63}(?<!-))*\.?$")


class DiscoverySettings(BaseSettings):
    """
    Discovery configuration. Env vars are prefixed with DISCOVERY_ except
    the shared APP_ENV.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # ── Application ───────────────────────────────────────────────────────────
    environment: str = Field(default="development", alias="APP_ENV")

    # ── Explicit addresses ────────────────────────────────────────────────────
    api_url: str | None = Field(default=None, alias="DISCOVERY_API_URL")
    production_url: str | None = Field(default=None, alias="DISCOVERY_PRODUCTION_URL")

    # ── Platform ──────────────────────────────────────────────────────────────
    platform: str = Field(default="web", alias="DISCOVERY_PLATFORM")
    is_device: bool = Field(default=False, alias="DISCOVERY_IS_DEVICE")

    # ── Candidate shape ───────────────────────────────────────────────────────
    backend_port: int = Field(default=5000, ge=1, le=65535, alias="DISCOVERY_BACKEND_PORT")
    api_path: str = Field(default="/api/v1", alias="DISCOVERY_API_PATH")
    health_path: str = Field(default=DEFAULT_HEALTH_PATH, alias="DISCOVERY_HEALTH_PATH")
    preferred_hosts: str = Field(default="", alias="DISCOVERY_PREFERRED_HOSTS")
    hostname_guesses: str = Field(
        default="backend.local,devserver.local", alias="DISCOVERY_HOSTNAMES"
    )
    max_candidates: int = Field(default=100, ge=1, alias="DISCOVERY_MAX_CANDIDATES")

    # ── Timing ────────────────────────────────────────────────────────────────
    probe_timeout: float | None = Field(default=None, gt=0, alias="DISCOVERY_PROBE_TIMEOUT")
    overall_timeout: float = Field(default=20.0, gt=0, alias="DISCOVERY_OVERALL_TIMEOUT")
    batch_size: int = Field(default=32, ge=1, alias="DISCOVERY_BATCH_SIZE")

    # ── Cache ─────────────────────────────────────────────────────────────────
    probe_ttl: float = Field(default=60.0, gt=0, alias="DISCOVERY_PROBE_TTL")
    fallback_ttl: float = Field(default=10.0, gt=0, alias="DISCOVERY_FALLBACK_TTL")
    state_file: str | None = Field(default=None, alias="DISCOVERY_STATE_FILE")

    @field_validator("environment")
    @classmethod
    def validate_env(cls, v: str) -> str:
        if v.lower() not in ENVIRONMENTS:
            raise ValueError(f"environment must be one of {sorted(ENVIRONMENTS)}, got {v!r}")
        return v.lower()

    @field_validator("platform")
    @classmethod
    def validate_platform(cls, v: str) -> str:
        if v.lower() not in PLATFORMS:
            raise ValueError(f"platform must be one of {sorted(PLATFORMS)}, got {v!r}")
        return v.lower()

    @field_validator("api_url", "production_url")
    @classmethod
    def validate_address(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        check_base_url(v)
        return v.strip()

    @field_validator("preferred_hosts", "hostname_guesses")
    @classmethod
    def validate_hosts(cls, v: str) -> str:
        bad = [host for host in _split_csv(v) if not _HOST_RE.match(host)]
        if bad:
            raise ValueError(
                f"expected bare host names (no port or path), got {bad!r}"
            )
        return v

    @field_validator("api_path", "health_path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        v = v.strip()
        if v and not v.startswith("/"):
            v = "/" + v
        return v.rstrip("/") if v != "/" else ""

    @model_validator(mode="after")
    def require_production_url(self) -> "DiscoverySettings":
        if self.environment == "production" and not self.production_url:
            raise ValueError("DISCOVERY_PRODUCTION_URL is required when APP_ENV=production")
        return self

    @property
    def override_url(self) -> str | None:
        """The address that disables probing entirely, if any."""
        if self.is_production:
            return self.production_url
        return self.api_url

    @property
    def preferred_host_list(self) -> tuple[str, ...]:
        return _split_csv(self.preferred_hosts)

    @property
    def hostname_guess_list(self) -> tuple[str, ...]:
        return _split_csv(self.hostname_guesses)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> DiscoverySettings:
    """
    Return the singleton discovery settings. Cached after first call.
    Call _reset_settings() in tests to pick up new env vars.
    """
    return DiscoverySettings()


def _reset_settings() -> None:
    """For tests: clear the settings cache."""
    get_settings.cache_clear()


__all__ = ["DiscoverySettings", "get_settings", "PLATFORMS", "ENVIRONMENTS"]

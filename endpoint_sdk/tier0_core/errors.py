"""
endpoint_sdk.tier0_core.errors
───────────────────────────────
Error taxonomy for endpoint discovery. Only configuration errors ever reach
the host application: probe failures collapse to "unreachable" and
discovery exhaustion is answered by the fallback policy.
"""
from __future__ import annotations

from typing import Any


# ── Base error ────────────────────────────────────────────────────────────────

class EndpointError(Exception):
    """
    Base class for all endpoint_sdk errors. Every error has:
    - code: stable machine-readable string (snake_case)
    - user_message: safe to surface to end users
    - detail: internal context, never shown to users
    """

    code: str = "endpoint_error"

    def __init__(
        self,
        code: str | None = None,
        user_message: str = "An unexpected error occurred.",
        detail: str | None = None,
        **metadata: Any,
    ) -> None:
        self.code = code or self.__class__.code
        self.user_message = user_message
        self.detail = detail or user_message
        self.metadata = metadata
        super().__init__(self.detail)

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.user_message,
            }
        }


# ── Typed error classes ───────────────────────────────────────────────────────

class ConfigurationError(EndpointError):
    """Misconfiguration detected at startup (e.g. a malformed override URL)."""
    code = "configuration_error"

    def __init__(
        self,
        code: str | None = None,
        user_message: str = "Endpoint discovery is misconfigured.",
        setting: str | None = None,
        **metadata: Any,
    ) -> None:
        self.setting = setting
        super().__init__(code, user_message, **metadata)

    def to_dict(self) -> dict:
        d = super().to_dict()
        if self.setting:
            d["error"]["setting"] = self.setting
        return d


__all__ = ["EndpointError", "ConfigurationError"]

"""
endpoint_sdk.tier0_core.endpoints
──────────────────────────────────
The Candidate value type: one API base address (scheme + host + port + base
path) that discovery may try. Equality is on the normalised URL, which is
what candidate de-duplication relies on.
"""
from __future__ import annotations

from dataclasses import dataclass

from endpoint_sdk.tier0_core.errors import ConfigurationError
from endpoint_sdk.tier0_core.http import DEFAULT_HEALTH_PATH, check_base_url, health_url


@dataclass(frozen=True)
class Candidate:
    url: str

    @classmethod
    def parse(cls, address: str, *, setting: str | None = None) -> "Candidate":
        """
        Build a Candidate from a user-supplied address.
        Raises ConfigurationError if the address is not an absolute http(s) URL.
        """
        try:
            check_base_url(address)
        except ValueError as exc:
            raise ConfigurationError(
                user_message=f"Invalid endpoint address: {address!r}",
                detail=str(exc),
                setting=setting,
            ) from exc
        return cls(url=address.strip().rstrip("/"))

    @classmethod
    def for_host(
        cls, host: str, port: int, api_path: str = "", *, scheme: str = "http"
    ) -> "Candidate":
        return cls(url=f"{scheme}://{host}:{port}{api_path}")

    def health_url(self, health_path: str = DEFAULT_HEALTH_PATH) -> str:
        return health_url(self.url, health_path)

    def __str__(self) -> str:
        return self.url


__all__ = ["Candidate"]

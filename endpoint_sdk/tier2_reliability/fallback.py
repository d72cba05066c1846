"""
endpoint_sdk.tier2_reliability.fallback
─────────────────────────────────────────
Last-resort address when no candidate answers. Application code always gets
*some* address back; ordinary request-level error handling deals with the
case where even this one is unreachable.
"""
from __future__ import annotations

from endpoint_sdk.tier0_core.endpoints import Candidate
from endpoint_sdk.tier1_runtime.runtime import PlatformProfile


class FallbackPolicy:
    """
    Pure and total: the same profile always yields the same address, and
    fallback() never raises.

    Usage::

        policy = FallbackPolicy.for_profile(ANDROID_EMULATOR, port=5000, api_path="/api/v1")
        policy.fallback()   # Candidate(url="http://10.0.2.2:5000/api/v1")
    """

    def __init__(self, candidate: Candidate) -> None:
        self._candidate = candidate

    @classmethod
    def for_profile(
        cls, profile: PlatformProfile, *, port: int, api_path: str = ""
    ) -> "FallbackPolicy":
        return cls(Candidate.for_host(profile.fallback_host, port, api_path))

    def fallback(self) -> Candidate:
        return self._candidate


__all__ = ["FallbackPolicy"]

"""
endpoint_sdk.tier2_reliability.cache
───────────────────────────────────────
Resolution cache: the single owner of the current ResolvedEndpoint.

Entries are only ever replaced whole. TTL depends on where the entry came
from: a probe-confirmed address is trusted for probe_ttl, a fallback guess
only for the shorter fallback_ttl so rediscovery is retried sooner, and a
manual override never expires.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from endpoint_sdk.tier0_core.logging import get_logger
from endpoint_sdk.tier1_runtime.clock import Clock, get_clock
from endpoint_sdk.tier2_reliability.storage import EndpointStore

logger = get_logger(__name__)


class EndpointSource(str, Enum):
    OVERRIDE = "override"
    CACHE = "cache"
    PROBE = "probe"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ResolvedEndpoint:
    address: str
    resolved_at: datetime
    source: EndpointSource

    def as_dict(self) -> dict[str, str]:
        return {
            "address": self.address,
            "resolved_at": self.resolved_at.isoformat(),
            "source": self.source.value,
        }


class ResolutionCache:
    """
    In-process cache holding at most one ResolvedEndpoint.

    Args:
        probe_ttl:    Seconds a probe-confirmed address is trusted.
        fallback_ttl: Seconds a fallback address is kept before rediscovery.
        clock:        Time source for TTL checks.
        store:        Optional persistence for the last probe-confirmed address.
    """

    def __init__(
        self,
        probe_ttl: float = 60.0,
        fallback_ttl: float = 10.0,
        *,
        clock: Clock | None = None,
        store: EndpointStore | None = None,
    ) -> None:
        self._probe_ttl = probe_ttl
        self._fallback_ttl = fallback_ttl
        self._clock = clock or get_clock()
        self._store = store
        self._entry: ResolvedEndpoint | None = None
        self._generation = 0

    @property
    def generation(self) -> int:
        """Bumped by every invalidate(); lets a writer detect it was overtaken."""
        return self._generation

    def ttl_for(self, source: EndpointSource) -> float | None:
        """Seconds an entry from *source* stays valid; None means no expiry."""
        if source is EndpointSource.OVERRIDE:
            return None
        if source is EndpointSource.FALLBACK:
            return self._fallback_ttl
        return self._probe_ttl

    def get(self) -> ResolvedEndpoint | None:
        entry = self._entry
        if entry is None:
            return None
        ttl = self.ttl_for(entry.source)
        if ttl is not None and self._clock.seconds_since(entry.resolved_at) > ttl:
            return None
        return entry

    def peek(self) -> ResolvedEndpoint | None:
        """Return the stored entry even if it has expired."""
        return self._entry

    def set(self, endpoint: ResolvedEndpoint) -> None:
        self._entry = endpoint
        if self._store is not None and endpoint.source is EndpointSource.PROBE:
            try:
                self._store.save(endpoint.address, endpoint.resolved_at)
            except OSError as exc:
                logger.warning("storage.save_failed", address=endpoint.address, error=str(exc))

    def invalidate(self) -> None:
        had_entry = self._entry is not None
        self._entry = None
        self._generation += 1
        logger.info("cache.invalidated", had_entry=had_entry, generation=self._generation)

    def last_known_address(self) -> str | None:
        """
        Best guess at a previously working address, used as the first
        candidate of the next run. Fallback entries are not a guess worth
        re-probing first; they are swept like everything else.
        """
        entry = self._entry
        if entry is not None and entry.source is EndpointSource.PROBE:
            return entry.address
        if self._store is not None:
            return self._store.load()
        return None


__all__ = ["EndpointSource", "ResolvedEndpoint", "ResolutionCache"]

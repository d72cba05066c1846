"""
endpoint_sdk.service
──────────────────────
Public surface consumed by the rest of the application.

A constructed EndpointDiscoveryService owns its cache and coordinator; inject
the instance into whatever issues API calls instead of reaching for global
state.

Usage::

    from endpoint_sdk import build_service

    discovery = build_service()
    base_url = await discovery.get_base_address()
    ...
    discovery.invalidate()   # e.g. on a network change notification
"""
from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError

from endpoint_sdk.tier0_core.config import DiscoverySettings, get_settings
from endpoint_sdk.tier0_core.errors import ConfigurationError
from endpoint_sdk.tier0_core.logging import get_logger
from endpoint_sdk.tier1_runtime.clock import Clock, get_clock
from endpoint_sdk.tier1_runtime.runtime import select_profile
from endpoint_sdk.tier2_reliability.cache import EndpointSource, ResolutionCache, ResolvedEndpoint
from endpoint_sdk.tier2_reliability.fallback import FallbackPolicy
from endpoint_sdk.tier2_reliability.health import HttpProbe, Prober
from endpoint_sdk.tier2_reliability.storage import EndpointStore, FileEndpointStore
from endpoint_sdk.tier3_platform.candidates import CandidateGenerator
from endpoint_sdk.tier3_platform.discovery import DiscoveryCoordinator

logger = get_logger(__name__)


class EndpointDiscoveryService:
    def __init__(
        self,
        coordinator: DiscoveryCoordinator,
        cache: ResolutionCache,
        generator: CandidateGenerator,
        *,
        clock: Clock | None = None,
    ) -> None:
        self._coordinator = coordinator
        self._cache = cache
        self._generator = generator
        self._clock = clock or get_clock()

    @property
    def coordinator(self) -> DiscoveryCoordinator:
        return self._coordinator

    async def get_base_address(self) -> str:
        """Return a base address, from cache or by running discovery. Never fails."""
        return (await self.discover()).address

    async def discover(self) -> ResolvedEndpoint:
        return await self._coordinator.discover()

    def invalidate(self) -> None:
        """Forget the current resolution; the next call rediscovers."""
        self._cache.invalidate()

    async def rediscover(self) -> str:
        self.invalidate()
        return await self.get_base_address()

    def set_override(self, address: str) -> None:
        """
        Pin every future resolution to *address* (debug/manual use).
        Raises ConfigurationError if the address is malformed.
        """
        candidate = self._generator.set_override(address)
        # Keeps a run still in flight from replacing the pinned entry.
        self._cache.invalidate()
        self._cache.set(
            ResolvedEndpoint(candidate.url, self._clock.now(), EndpointSource.OVERRIDE)
        )
        logger.info("discovery.override_set", address=candidate.url)

    def clear_override(self) -> None:
        self._generator.clear_override()
        current = self._cache.peek()
        if current is not None and current.source is EndpointSource.OVERRIDE:
            self._cache.invalidate()

    def get_cached_address(self) -> str | None:
        """Current valid cached address, without triggering discovery."""
        entry = self._cache.get()
        return entry.address if entry is not None else None


def build_service(
    settings: DiscoverySettings | None = None,
    *,
    prober: Prober | None = None,
    clock: Clock | None = None,
    store: EndpointStore | None = None,
) -> EndpointDiscoveryService:
    """
    Wire a service from settings (environment by default).

    Raises ConfigurationError for any invalid setting, before any network
    activity happens.
    """
    if settings is None:
        try:
            settings = get_settings()
        except PydanticValidationError as exc:
            raise ConfigurationError(
                user_message="Invalid endpoint discovery configuration.",
                detail=str(exc),
                setting=", ".join(str(e["loc"][0]) for e in exc.errors() if e.get("loc")) or None,
            ) from exc

    clock = clock or get_clock()
    profile = select_profile(settings.platform, settings.is_device)
    if store is None and settings.state_file:
        store = FileEndpointStore(settings.state_file)

    cache = ResolutionCache(
        probe_ttl=settings.probe_ttl,
        fallback_ttl=settings.fallback_ttl,
        clock=clock,
        store=store,
    )
    generator = CandidateGenerator(
        profile,
        port=settings.backend_port,
        api_path=settings.api_path,
        override=settings.override_url,
        preferred_hosts=settings.preferred_host_list,
        hostname_guesses=settings.hostname_guess_list,
        last_known=cache.last_known_address,
        max_candidates=settings.max_candidates,
    )
    coordinator = DiscoveryCoordinator(
        generator,
        prober or HttpProbe(settings.health_path, clock=clock),
        cache,
        FallbackPolicy.for_profile(profile, port=settings.backend_port, api_path=settings.api_path),
        probe_timeout=settings.probe_timeout or profile.probe_timeout,
        overall_timeout=settings.overall_timeout,
        batch_size=settings.batch_size,
        clock=clock,
    )
    logger.debug(
        "discovery.configured",
        profile=profile.name,
        override=settings.override_url is not None,
        persisted=store is not None,
    )
    return EndpointDiscoveryService(coordinator, cache, generator, clock=clock)


__all__ = ["EndpointDiscoveryService", "build_service"]

"""
endpoint_sdk.tier3_platform.discovery
───────────────────────────────────────
Discovery coordinator. Resolves the backend base address by probing every
candidate concurrently and taking the first one that answers.

States: IDLE → RUNNING → RESOLVED | FALLBACK → IDLE.

  - At most one run is in flight; concurrent callers await the same run.
  - Candidates are released in priority-ordered batches of batch_size. Within
    a batch the first reachable probe wins and its siblings are cancelled by
    the enclosing TaskGroup.
  - overall_timeout bounds the whole run no matter how many candidates
    remain; expiry (or exhausting every batch) yields the fallback address.
"""
from __future__ import annotations

import asyncio
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum

from endpoint_sdk.tier0_core.endpoints import Candidate
from endpoint_sdk.tier0_core.logging import bind_context, clear_context, get_logger
from endpoint_sdk.tier0_core.metrics import (
    discovery_duration,
    discovery_runs_total,
    probes_in_flight,
    probes_total,
    record,
)
from endpoint_sdk.tier1_runtime.clock import Clock, get_clock
from endpoint_sdk.tier2_reliability.cache import EndpointSource, ResolutionCache, ResolvedEndpoint
from endpoint_sdk.tier2_reliability.fallback import FallbackPolicy
from endpoint_sdk.tier2_reliability.health import ProbeResult, Prober
from endpoint_sdk.tier3_platform.candidates import CandidateGenerator

logger = get_logger(__name__)


class DiscoveryState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    RESOLVED = "resolved"
    FALLBACK = "fallback"


class _WinnerFound(Exception):
    """Raised inside the probe TaskGroup to cancel the losing probes."""


@dataclass
class DiscoveryRun:
    """Transient state of one coordinator invocation."""
    candidates: list[Candidate]
    run_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    batches_dispatched: int = 0
    probes_issued: int = 0
    winner: ProbeResult | None = None

    def batches(self, size: int) -> list[list[Candidate]]:
        return [self.candidates[i : i + size] for i in range(0, len(self.candidates), size)]

    def claim(self, result: ProbeResult) -> bool:
        """Record *result* as the winner unless one already exists."""
        if self.winner is not None:
            return False
        self.winner = result
        return True


class DiscoveryCoordinator:
    """
    Args:
        generator:       Candidate source (also owns the override).
        prober:          Reachability check; HttpProbe in production.
        cache:           Resolution cache consulted before any run.
        fallback:        Last-resort address policy.
        probe_timeout:   Seconds allowed for a single probe.
        overall_timeout: Seconds allowed for the whole run.
        batch_size:      Maximum number of simultaneous probes.
    """

    def __init__(
        self,
        generator: CandidateGenerator,
        prober: Prober,
        cache: ResolutionCache,
        fallback: FallbackPolicy,
        *,
        probe_timeout: float = 5.0,
        overall_timeout: float = 20.0,
        batch_size: int = 32,
        clock: Clock | None = None,
    ) -> None:
        self._generator = generator
        self._prober = prober
        self._cache = cache
        self._fallback = fallback
        self._probe_timeout = probe_timeout
        self._overall_timeout = overall_timeout
        self._batch_size = max(1, batch_size)
        self._clock = clock or get_clock()
        self._state = DiscoveryState.IDLE
        self._last_outcome: DiscoveryState | None = None
        self._inflight: asyncio.Task[ResolvedEndpoint] | None = None
        self._inflight_generation = 0
        self.runs_started = 0

    @property
    def state(self) -> DiscoveryState:
        return self._state

    @property
    def last_outcome(self) -> DiscoveryState | None:
        """RESOLVED or FALLBACK for the most recent completed run."""
        return self._last_outcome

    async def discover(self) -> ResolvedEndpoint:
        override = self._generator.override
        if override is not None:
            return self._use_override(override)

        cached = self._cache.get()
        if cached is not None:
            logger.debug("discovery.cache_hit", address=cached.address, source=cached.source.value)
            return ResolvedEndpoint(cached.address, cached.resolved_at, EndpointSource.CACHE)

        generation = self._cache.generation
        if self._inflight is None or self._inflight_generation != generation:
            # A run started before the last invalidate() keeps serving the
            # callers already waiting on it, but new callers get a fresh run.
            self._inflight = asyncio.create_task(self._run(generation))
            self._inflight_generation = generation
            self._inflight.add_done_callback(self._run_finished)
        # Shield so one caller's cancellation does not abort the shared run.
        return await asyncio.shield(self._inflight)

    def _use_override(self, override: Candidate) -> ResolvedEndpoint:
        current = self._cache.peek()
        if (
            current is not None
            and current.source is EndpointSource.OVERRIDE
            and current.address == override.url
        ):
            return current
        endpoint = ResolvedEndpoint(override.url, self._clock.now(), EndpointSource.OVERRIDE)
        self._cache.set(endpoint)
        logger.info("discovery.override", address=override.url)
        return endpoint

    def _run_finished(self, task: asyncio.Task[ResolvedEndpoint]) -> None:
        if self._inflight is task:
            self._inflight = None

    def _is_current(self) -> bool:
        return self._inflight is None or self._inflight is asyncio.current_task()

    async def _run(self, generation: int) -> ResolvedEndpoint:
        run = DiscoveryRun(candidates=self._generator.generate())
        self.runs_started += 1
        self._state = DiscoveryState.RUNNING
        bind_context(discovery_run=run.run_id)
        start = time.monotonic()
        logger.info(
            "discovery.started",
            candidates=len(run.candidates),
            priority=[c.url for c in run.candidates[:5]],
        )
        try:
            try:
                async with asyncio.timeout(self._overall_timeout):
                    winner = await self._probe_batches(run)
            except TimeoutError:
                logger.warning(
                    "discovery.timeout",
                    overall_timeout=self._overall_timeout,
                    probes_issued=run.probes_issued,
                )
                winner = run.winner

            if winner is not None:
                endpoint = ResolvedEndpoint(
                    winner.candidate.url, self._clock.now(), EndpointSource.PROBE
                )
                outcome = DiscoveryState.RESOLVED
                logger.info(
                    "discovery.resolved",
                    address=endpoint.address,
                    latency_ms=winner.latency_ms,
                    batches=run.batches_dispatched,
                )
            else:
                endpoint = ResolvedEndpoint(
                    self._fallback.fallback().url, self._clock.now(), EndpointSource.FALLBACK
                )
                outcome = DiscoveryState.FALLBACK
                logger.warning(
                    "discovery.fallback",
                    address=endpoint.address,
                    probes_issued=run.probes_issued,
                )

            if self._cache.generation == generation:
                self._cache.set(endpoint)
                self._last_outcome = outcome
            else:
                logger.info("discovery.result_discarded", address=endpoint.address)
            record(
                lambda: discovery_runs_total(outcome=outcome.value).inc(),
                "discovery_runs_total",
            )
            record(
                lambda: discovery_duration().observe(time.monotonic() - start),
                "discovery_duration",
            )
            return endpoint
        finally:
            if self._is_current():
                self._state = DiscoveryState.IDLE
            clear_context("discovery_run")

    async def _probe_batches(self, run: DiscoveryRun) -> ProbeResult | None:
        for batch in run.batches(self._batch_size):
            run.batches_dispatched += 1
            try:
                async with asyncio.TaskGroup() as tg:
                    for candidate in batch:
                        tg.create_task(self._probe_one(run, candidate))
            except* _WinnerFound:
                pass
            if run.winner is not None:
                return run.winner
        return None

    async def _probe_one(self, run: DiscoveryRun, candidate: Candidate) -> None:
        run.probes_issued += 1
        record(lambda: probes_in_flight().inc(), "probes_in_flight")
        try:
            result = await self._prober.probe(candidate, self._probe_timeout)
        except Exception as exc:
            # Probers are meant to collapse every failure themselves.
            logger.warning(
                "probe.unreachable",
                url=candidate.url,
                reason="prober_error",
                error=str(exc),
                error_type=type(exc).__name__,
            )
            record(lambda: probes_total(outcome="error").inc(), "probes_total")
            return
        finally:
            record(lambda: probes_in_flight().dec(), "probes_in_flight")

        outcome = "reachable" if result.reachable else "unreachable"
        record(lambda: probes_total(outcome=outcome).inc(), "probes_total")
        if result.reachable and run.claim(result):
            raise _WinnerFound(candidate.url)


__all__ = ["DiscoveryState", "DiscoveryRun", "DiscoveryCoordinator"]

"""
endpoint_sdk.tier2_reliability.health
────────────────────────────────────────
Reachability probe. One bounded-time GET against a candidate's health
endpoint, reported as reachable/unreachable plus latency. Transport errors,
timeouts and malformed bodies are deliberately indistinguishable to callers.

Usage:
    probe = HttpProbe()
    result = await probe.probe(Candidate.parse("http://10.0.2.2:5000/api/v1"), timeout=5.0)
    if result.reachable:
        ...
"""
from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, runtime_checkable

import httpx

from endpoint_sdk.tier0_core.endpoints import Candidate
from endpoint_sdk.tier0_core.http import DEFAULT_HEALTH_PATH, PROBE_HEADERS, parse_health_body
from endpoint_sdk.tier0_core.logging import get_logger
from endpoint_sdk.tier1_runtime.clock import Clock, get_clock

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProbeResult:
    candidate: Candidate
    reachable: bool
    observed_at: datetime
    latency_ms: float | None = None


@runtime_checkable
class Prober(Protocol):
    async def probe(self, candidate: Candidate, timeout: float) -> ProbeResult: ...


class HttpProbe:
    """
    Health-check prober backed by httpx.

    Args:
        health_path: Path appended to the candidate's origin (default /health).
        transport:   Optional httpx transport; tests pass an httpx.MockTransport.
        clock:       Time source for ProbeResult.observed_at.
    """

    def __init__(
        self,
        health_path: str = DEFAULT_HEALTH_PATH,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._health_path = health_path
        self._transport = transport
        self._clock = clock or get_clock()

    async def probe(self, candidate: Candidate, timeout: float) -> ProbeResult:
        url = candidate.health_url(self._health_path)
        start = time.monotonic()
        reachable = False
        try:
            async with asyncio.timeout(timeout):
                async with httpx.AsyncClient(
                    transport=self._transport,
                    timeout=timeout,
                    headers=PROBE_HEADERS,
                ) as client:
                    response = await client.get(url)
                    payload = parse_health_body(response)
            reachable = payload is not None
            if reachable:
                logger.debug(
                    "probe.reachable", url=url, status=response.status_code, ok=payload.get("ok")
                )
            else:
                logger.debug("probe.unreachable", url=url, status=response.status_code)
        except TimeoutError:
            logger.debug("probe.unreachable", url=url, reason="timeout", timeout=timeout)
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as exc:
            logger.debug("probe.unreachable", url=url, reason=type(exc).__name__, error=str(exc))

        return ProbeResult(
            candidate=candidate,
            reachable=reachable,
            observed_at=self._clock.now(),
            latency_ms=round((time.monotonic() - start) * 1000, 2),
        )


__all__ = ["ProbeResult", "Prober", "HttpProbe"]

"""
endpoint_sdk test configuration.

No test touches the real network: probes go through httpx.MockTransport or
the scripted FakeProber below.
"""
from __future__ import annotations

import asyncio
import os
from datetime import datetime, timezone

import pytest

# ── Test-safe environment ──────────────────────────────────────────────────
# Must be set before any endpoint_sdk module is imported.

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DISCOVERY_LOG_LEVEL", "WARNING")
os.environ.setdefault("DISCOVERY_LOG_FORMAT", "console")

_DISCOVERY_ENV = (
    "DISCOVERY_API_URL",
    "DISCOVERY_PRODUCTION_URL",
    "DISCOVERY_PLATFORM",
    "DISCOVERY_IS_DEVICE",
    "DISCOVERY_STATE_FILE",
    "DISCOVERY_PREFERRED_HOSTS",
    "DISCOVERY_HOSTNAMES",
)


# ── Fakes ──────────────────────────────────────────────────────────────────

class FakeProber:
    """
    Scripted prober. ``script`` maps a candidate URL to (delay_seconds,
    reachable); a delay of None never answers. Unscripted URLs fail at once.
    """

    def __init__(self, script: dict[str, tuple[float | None, bool]] | None = None) -> None:
        self.script = dict(script or {})
        self.calls: list[str] = []
        self.cancelled: list[str] = []

    async def probe(self, candidate, timeout):
        from endpoint_sdk.tier1_runtime.clock import get_clock
        from endpoint_sdk.tier2_reliability.health import ProbeResult

        self.calls.append(candidate.url)
        delay, reachable = self.script.get(candidate.url, (0.0, False))
        try:
            if delay is None:
                await asyncio.Event().wait()
            else:
                await asyncio.sleep(min(delay, timeout))
        except asyncio.CancelledError:
            self.cancelled.append(candidate.url)
            raise
        if delay is not None and delay > timeout:
            reachable = False
        return ProbeResult(
            candidate=candidate,
            reachable=reachable,
            observed_at=get_clock().now(),
            latency_ms=(delay or 0.0) * 1000,
        )


# ── Fixtures ───────────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Each test starts from default settings with no override in the env."""
    from endpoint_sdk.tier0_core.config import _reset_settings

    for key in _DISCOVERY_ENV:
        monkeypatch.delenv(key, raising=False)
    _reset_settings()
    yield
    _reset_settings()


@pytest.fixture
def fake_prober():
    """Factory: fake_prober({url: (delay, reachable)})."""
    return FakeProber


@pytest.fixture
def manual_clock():
    from endpoint_sdk.tier1_runtime.clock import ManualClock
    return ManualClock(datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc))

"""
endpoint_sdk.tier0_core.metrics
─────────────────────────────────
Counters, gauges, and histograms with standard naming and labels, plus the
discovery metrics themselves. Everything registers on the default
prometheus-client registry; exporting it is left to the host application.

Minimal stack: prometheus-client
"""
from __future__ import annotations

import os
from typing import Callable

from prometheus_client import Counter, Gauge, Histogram

from endpoint_sdk.tier0_core.logging import get_logger

logger = get_logger(__name__)

# Standard labels applied to every metric
_DEFAULT_LABELS = ["service", "env"]
_SERVICE = os.getenv("APP_NAME", "endpoint-sdk")
_ENV = os.getenv("APP_ENV", "development")
_DEFAULT_LABEL_VALUES = dict(zip(_DEFAULT_LABELS, [_SERVICE, _ENV]))


def counter(name: str, description: str, labels: list[str] | None = None) -> Callable:
    """
    Create a counter with standard labels.

    Usage:
        probes_total = counter("endpoint_probes_total", "Probes issued", ["outcome"])
        probes_total(outcome="reachable").inc()
    """
    all_labels = _DEFAULT_LABELS + (labels or [])
    c = Counter(name, description, all_labels)

    def _counter(**extra_labels: str) -> Counter:
        # prometheus-client refuses a mix of positional and keyword label values.
        return c.labels(**_DEFAULT_LABEL_VALUES, **extra_labels)

    return _counter


def gauge(name: str, description: str, labels: list[str] | None = None) -> Callable:
    """
    Create a gauge with standard labels.

    Usage:
        in_flight = gauge("endpoint_probes_in_flight", "Probes awaiting a response")
        in_flight().inc()
    """
    all_labels = _DEFAULT_LABELS + (labels or [])
    g = Gauge(name, description, all_labels)

    def _gauge(**extra_labels: str) -> Gauge:
        return g.labels(**_DEFAULT_LABEL_VALUES, **extra_labels)

    return _gauge


def histogram(
    name: str,
    description: str,
    labels: list[str] | None = None,
    buckets: tuple = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0),
) -> Callable:
    """Create a histogram with standard labels."""
    all_labels = _DEFAULT_LABELS + (labels or [])
    h = Histogram(name, description, all_labels, buckets=buckets)

    def _histogram(**extra_labels: str) -> Histogram:
        return h.labels(**_DEFAULT_LABEL_VALUES, **extra_labels)

    return _histogram


def record(update: Callable[[], object], metric: str) -> None:
    """
    Apply one metric update. A rejected update (bad label set, wrong value)
    is logged and dropped so it never reaches the caller.
    """
    try:
        update()
    except (ValueError, TypeError) as exc:
        logger.warning("metrics.update_failed", metric=metric, error=str(exc))


# ── Discovery metrics ─────────────────────────────────────────────────────────
# Registered once at import; prometheus-client rejects duplicate names.

probes_total = counter(
    "endpoint_probes_total", "Health probes issued against candidates", ["outcome"]
)
probes_in_flight = gauge(
    "endpoint_probes_in_flight", "Health probes awaiting a response"
)
discovery_runs_total = counter(
    "endpoint_discovery_runs_total", "Completed discovery runs", ["outcome"]
)
discovery_duration = histogram(
    "endpoint_discovery_duration_seconds", "Wall time of one discovery run"
)


__all__ = [
    "counter",
    "gauge",
    "histogram",
    "record",
    "probes_total",
    "probes_in_flight",
    "discovery_runs_total",
    "discovery_duration",
]

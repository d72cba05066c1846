"""
endpoint_sdk.tier0_core.logging
────────────────────────────────
Structured logs for discovery runs, probes, and cache transitions.

Events go straight from structlog to stdout; nothing is routed through the
stdlib logging tree, so the host application's handlers stay untouched.
Every event emitted while a run is active carries its ``discovery_run`` id.

Minimal stack: structlog (stdout JSON or console)
Configure via: DISCOVERY_LOG_LEVEL, DISCOVERY_LOG_FORMAT=json|console
"""
from __future__ import annotations

import logging
import os
from typing import Any
from urllib.parse import urlsplit, urlunsplit

import structlog


# ── Processors ────────────────────────────────────────────────────────────────

_REDACT_KEYS = frozenset({
    "password", "passwd", "secret", "token", "api_key", "apikey",
    "authorization", "auth", "credential", "access_token",
})

# Event keys that carry candidate or override addresses.
_URL_KEYS = ("address", "url", "override")

_REDACTED = "[REDACTED]"


def _redact_processor(
    logger: Any, method: str, event_dict: dict
) -> dict:
    """Strip sensitive fields from log records before output."""
    for key in list(event_dict.keys()):
        if key.lower() in _REDACT_KEYS:
            event_dict[key] = _REDACTED
    return event_dict


def _strip_url_credentials(
    logger: Any, method: str, event_dict: dict
) -> dict:
    """Override URLs occasionally embed user:password@; keep only the host part."""
    for key in _URL_KEYS:
        value = event_dict.get(key)
        if not isinstance(value, str) or "@" not in value:
            continue
        parts = urlsplit(value)
        if parts.username is None:
            continue
        host = parts.netloc.rpartition("@")[2]
        event_dict[key] = urlunsplit(parts._replace(netloc=f"{_REDACTED}@{host}"))
    return event_dict


# ── Configuration ─────────────────────────────────────────────────────────────

_configured = False


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    """
    (Re)configure structlog. Arguments fall back to DISCOVERY_LOG_LEVEL and
    DISCOVERY_LOG_FORMAT; get_logger() calls this lazily on first use.
    """
    global _configured
    log_level = (level or os.getenv("DISCOVERY_LOG_LEVEL", "INFO")).upper()
    log_format = (fmt or os.getenv("DISCOVERY_LOG_FORMAT", "json")).lower()

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _redact_processor,
        _strip_url_credentials,
    ]
    if log_format == "console":
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level, logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )
    _configured = True


# ── Public API ────────────────────────────────────────────────────────────────

def get_logger(name: str | None = None) -> Any:
    """
    Return a structured logger tagged with the given module name.

    Usage:
        log = get_logger(__name__)
        log.info("discovery.resolved", address="http://10.0.2.2:5000/api/v1")
    """
    if not _configured:
        configure_logging()
    return structlog.get_logger().bind(logger=name or __name__)


def bind_context(**kwargs: Any) -> None:
    """
    Bind key-value pairs to the current async context, e.g. a run id, so
    every probe logged during that run carries it.
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context(*keys: str) -> None:
    """Unbind the given keys, or everything when called without arguments."""
    if keys:
        structlog.contextvars.unbind_contextvars(*keys)
    else:
        structlog.contextvars.clear_contextvars()


__all__ = ["configure_logging", "get_logger", "bind_context", "clear_context"]

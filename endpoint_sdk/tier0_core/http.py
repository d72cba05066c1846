"""
endpoint_sdk.tier0_core.http
─────────────────────────────
HTTP primitives shared by the probe and the candidate model: base URL
validation, the health URL derived from a candidate, the probe request
headers, and the "reachable" response contract.

Wire contract: GET {scheme}://{host}:{port}/health → any 2xx with a JSON body.
"""
from __future__ import annotations

import json
from typing import Any
from urllib.parse import SplitResult, urlsplit

import httpx

from endpoint_sdk._version import __version__

DEFAULT_HEALTH_PATH = "/health"

_ALLOWED_SCHEMES = frozenset({"http", "https"})


# ── Status codes ───────────────────────────────────────────────────────────

class HTTP:
    """The handful of status codes discovery cares about."""

    OK = 200
    MULTIPLE_CHOICES = 300


def is_success(status_code: int) -> bool:
    return HTTP.OK <= status_code < HTTP.MULTIPLE_CHOICES


# ── Request headers ────────────────────────────────────────────────────────

PROBE_HEADERS: dict[str, str] = {
    "Accept": "application/json",
    "Cache-Control": "no-cache",
    "User-Agent": f"endpoint-sdk/{__version__}",
}


# ── URL helpers ────────────────────────────────────────────────────────────

def check_base_url(address: str) -> SplitResult:
    """
    Validate an API base address and return its parsed form.

    Raises ValueError when the scheme is not http(s), the host is missing,
    or the port is out of range.
    """
    if not isinstance(address, str) or not address.strip():
        raise ValueError("address must be a non-empty string")
    parts = urlsplit(address.strip())
    if parts.scheme.lower() not in _ALLOWED_SCHEMES:
        raise ValueError(f"address must use http or https, got {address!r}")
    if not parts.hostname:
        raise ValueError(f"address has no host: {address!r}")
    try:
        parts.port
    except ValueError as exc:
        raise ValueError(f"address has an invalid port: {address!r}") from exc
    if parts.query or parts.fragment:
        raise ValueError(f"address must not carry a query or fragment: {address!r}")
    return parts


def origin_of(address: str) -> str:
    """Return scheme://host[:port] for a base address, dropping its path."""
    parts = urlsplit(address)
    return f"{parts.scheme}://{parts.netloc}"


def health_url(address: str, health_path: str = DEFAULT_HEALTH_PATH) -> str:
    """The health endpoint lives at the server root, not under the API path."""
    return f"{origin_of(address)}/{health_path.lstrip('/')}"


# ── Response contract ──────────────────────────────────────────────────────

def parse_health_body(response: httpx.Response) -> dict[str, Any] | None:
    """
    Return the decoded health payload, or None when the response does not
    satisfy the probe contract (non-2xx status or a body that is not JSON).
    """
    if not is_success(response.status_code):
        return None
    try:
        payload = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    if isinstance(payload, dict):
        return payload
    return {"ok": payload}


__all__ = [
    "DEFAULT_HEALTH_PATH",
    "HTTP",
    "PROBE_HEADERS",
    "check_base_url",
    "health_url",
    "is_success",
    "origin_of",
    "parse_health_body",
]

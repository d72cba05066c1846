"""
endpoint_sdk.tier2_reliability.storage
────────────────────────────────────────
Optional persistence of the last address that answered a probe, so the next
cold start can try it first. A stored address is only ever a hint: it is
re-probed like any other candidate before anything trusts it.

Backends:
  - MemoryEndpointStore (tests, or no persistence)
  - FileEndpointStore   (DISCOVERY_STATE_FILE=/path/to/endpoint.json)
"""
from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Protocol, runtime_checkable

from endpoint_sdk.tier0_core.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class EndpointStore(Protocol):
    def load(self) -> str | None: ...

    def save(self, address: str, resolved_at: datetime) -> None: ...

    def clear(self) -> None: ...


class MemoryEndpointStore:
    """Process-local store; forgets everything on restart."""

    def __init__(self, address: str | None = None) -> None:
        self._address = address
        self.saved_at: datetime | None = None

    def load(self) -> str | None:
        return self._address

    def save(self, address: str, resolved_at: datetime) -> None:
        self._address = address
        self.saved_at = resolved_at

    def clear(self) -> None:
        self._address = None
        self.saved_at = None


class FileEndpointStore:
    """
    JSON file holding {"address": ..., "resolved_at": ...}.
    A missing or unreadable file reads as "no hint", never as an error.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> str | None:
        if not self._path.exists():
            return None
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("storage.load_failed", path=str(self._path), error=str(exc))
            return None
        address = data.get("address") if isinstance(data, dict) else None
        return address if isinstance(address, str) and address else None

    def save(self, address: str, resolved_at: datetime) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(
            json.dumps({"address": address, "resolved_at": resolved_at.isoformat()}),
            encoding="utf-8",
        )
        tmp.replace(self._path)

    def clear(self) -> None:
        if self._path.exists():
            self._path.unlink()


__all__ = ["EndpointStore", "MemoryEndpointStore", "FileEndpointStore"]

"""
endpoint_sdk.tier3_platform.candidates
────────────────────────────────────────
Candidate generation. Produces the ordered, de-duplicated list of base
addresses a discovery run will probe:

  1. explicit override (when present, the only candidate)
  2. last known-good address (re-validated first, most likely still right)
  3. preferred hosts (developer machine hints)
  4. platform loopback addresses
  5. common private-subnet hosts (bounded sweep)
  6. hostname guesses (mDNS/Bonjour style names)

The list is capped at max_candidates to bound worst-case probing cost.
"""
from __future__ import annotations

from typing import Callable, Iterable

from endpoint_sdk.tier0_core.endpoints import Candidate
from endpoint_sdk.tier0_core.errors import ConfigurationError
from endpoint_sdk.tier0_core.logging import get_logger
from endpoint_sdk.tier1_runtime.runtime import PlatformProfile

logger = get_logger(__name__)

DEFAULT_MAX_CANDIDATES = 100


class CandidateGenerator:
    def __init__(
        self,
        profile: PlatformProfile,
        *,
        port: int,
        api_path: str = "",
        override: str | None = None,
        preferred_hosts: Iterable[str] = (),
        hostname_guesses: Iterable[str] = (),
        last_known: Callable[[], str | None] | None = None,
        max_candidates: int = DEFAULT_MAX_CANDIDATES,
    ) -> None:
        if max_candidates < 1:
            raise ConfigurationError(
                user_message="max_candidates must be at least 1", setting="max_candidates"
            )
        self._profile = profile
        self._port = port
        self._api_path = api_path
        self._preferred_hosts = tuple(preferred_hosts)
        self._hostname_guesses = tuple(hostname_guesses)
        self._last_known = last_known
        self._max = max_candidates
        self._override: Candidate | None = None
        if override:
            self.set_override(override)

    @property
    def profile(self) -> PlatformProfile:
        return self._profile

    @property
    def override(self) -> Candidate | None:
        return self._override

    def set_override(self, address: str) -> Candidate:
        """Pin discovery to *address*. Raises ConfigurationError if malformed."""
        self._override = Candidate.parse(address, setting="override")
        return self._override

    def clear_override(self) -> None:
        self._override = None

    def generate(self) -> list[Candidate]:
        if self._override is not None:
            return [self._override]

        ordered: list[Candidate] = []
        hint = self._hint()
        if hint is not None:
            ordered.append(hint)
        ordered.extend(self._for_hosts(self._preferred_hosts))
        ordered.extend(self._for_hosts(self._profile.loopback_hosts))
        ordered.extend(self._for_hosts(self._profile.sweep_hosts()))
        if self._profile.hostname_guesses:
            ordered.extend(self._for_hosts(self._hostname_guesses))

        return _dedupe(ordered)[: self._max]

    def _for_hosts(self, hosts: Iterable[str]) -> list[Candidate]:
        return [Candidate.for_host(host, self._port, self._api_path) for host in hosts]

    def _hint(self) -> Candidate | None:
        if self._last_known is None:
            return None
        address = self._last_known()
        if not address:
            return None
        try:
            return Candidate.parse(address)
        except ConfigurationError:
            # A stale or corrupted hint is not a setup mistake.
            logger.warning("candidates.hint_skipped", address=address)
            return None


def _dedupe(candidates: Iterable[Candidate]) -> list[Candidate]:
    """Remove repeats, keeping the first (highest priority) occurrence."""
    seen: set[Candidate] = set()
    out: list[Candidate] = []
    for candidate in candidates:
        if candidate in seen:
            continue
        seen.add(candidate)
        out.append(candidate)
    return out


__all__ = ["CandidateGenerator", "DEFAULT_MAX_CANDIDATES"]

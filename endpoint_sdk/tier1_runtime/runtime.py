"""
endpoint_sdk.tier1_runtime.runtime
────────────────────────────────────
Platform profiles. Everything that differs between an Android emulator, an
iOS simulator, a physical phone and a browser build lives in one immutable
struct chosen once at startup; the discovery algorithm itself never branches
on the platform.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Literal

Platform = Literal["android", "ios", "web"]

# Home/office ranges, most common first.
COMMON_SUBNETS: tuple[str, ...] = (
    "192.168.1",
    "192.168.0",
    "192.168.100",
    "10.0.0",
    "10.0.1",
    "172.16.0",
)

# Host numbers routers and DHCP pools hand out most often. Not a /24 sweep.
COMMON_HOST_SUFFIXES: tuple[int, ...] = (1, 2, 3, 4, 5, 10, 14, 20, 25, 30, 50, 100, 150, 200)


@dataclass(frozen=True)
class PlatformProfile:
    """Per-platform heuristics consumed by the candidate generator and probe."""
    name: str
    loopback_hosts: tuple[str, ...]
    fallback_host: str
    probe_timeout: float = 5.0
    sweep: bool = False
    subnets: tuple[str, ...] = COMMON_SUBNETS
    host_suffixes: tuple[int, ...] = COMMON_HOST_SUFFIXES
    hostname_guesses: bool = False

    def sweep_hosts(self) -> list[str]:
        """Subnet × host suffix addresses, in subnet priority order."""
        if not self.sweep:
            return []
        return [f"{subnet}.{host}" for subnet in self.subnets for host in self.host_suffixes]


# 10.0.2.2 is the Android emulator's alias for the host machine's loopback.
ANDROID_EMULATOR = PlatformProfile(
    name="android-emulator",
    loopback_hosts=("10.0.2.2", "localhost", "127.0.0.1"),
    fallback_host="10.0.2.2",
)
ANDROID_DEVICE = replace(ANDROID_EMULATOR, name="android-device", sweep=True)

# iOS networking comes up slower on a cold simulator, hence the longer allowance.
IOS_SIMULATOR = PlatformProfile(
    name="ios-simulator",
    loopback_hosts=("localhost", "127.0.0.1"),
    fallback_host="127.0.0.1",
    probe_timeout=10.0,
    sweep=True,
)
IOS_DEVICE = replace(IOS_SIMULATOR, name="ios-device", hostname_guesses=True)

WEB = PlatformProfile(
    name="web",
    loopback_hosts=("localhost", "127.0.0.1"),
    fallback_host="localhost",
)

_PROFILES: dict[tuple[str, bool], PlatformProfile] = {
    ("android", False): ANDROID_EMULATOR,
    ("android", True): ANDROID_DEVICE,
    ("ios", False): IOS_SIMULATOR,
    ("ios", True): IOS_DEVICE,
    ("web", False): WEB,
    ("web", True): WEB,
}


def select_profile(platform: str, is_device: bool = False) -> PlatformProfile:
    """
    Return the profile for *platform*. Raises ValueError for an unknown
    platform; settings validation normally catches that first.
    """
    try:
        return _PROFILES[(platform.lower(), bool(is_device))]
    except KeyError:
        raise ValueError(f"Unknown platform: {platform!r}. Supported: android, ios, web") from None


__all__ = [
    "Platform",
    "PlatformProfile",
    "COMMON_SUBNETS",
    "COMMON_HOST_SUFFIXES",
    "ANDROID_EMULATOR",
    "ANDROID_DEVICE",
    "IOS_SIMULATOR",
    "IOS_DEVICE",
    "WEB",
    "select_profile",
]

"""
endpoint_sdk
────────────
Backend endpoint discovery for development clients whose API server address
is not known in advance. Stable top-level exports; import from here, not from
sub-modules directly.
"""
from endpoint_sdk._version import __version__
from endpoint_sdk.tier0_core.config import DiscoverySettings, get_settings
from endpoint_sdk.tier0_core.endpoints import Candidate
from endpoint_sdk.tier0_core.errors import ConfigurationError, EndpointError
from endpoint_sdk.tier0_core.logging import configure_logging, get_logger
from endpoint_sdk.tier1_runtime.clock import Clock, ManualClock
from endpoint_sdk.tier1_runtime.runtime import PlatformProfile, select_profile
from endpoint_sdk.tier2_reliability.cache import EndpointSource, ResolutionCache, ResolvedEndpoint
from endpoint_sdk.tier2_reliability.fallback import FallbackPolicy
from endpoint_sdk.tier2_reliability.health import HttpProbe, Prober, ProbeResult
from endpoint_sdk.tier2_reliability.storage import FileEndpointStore, MemoryEndpointStore
from endpoint_sdk.tier3_platform.candidates import CandidateGenerator
from endpoint_sdk.tier3_platform.discovery import DiscoveryCoordinator, DiscoveryState
from endpoint_sdk.service import EndpointDiscoveryService, build_service

__all__ = [
    "__version__",
    # service
    "EndpointDiscoveryService", "build_service",
    # config
    "DiscoverySettings", "get_settings",
    # errors
    "EndpointError", "ConfigurationError",
    # logging
    "configure_logging",
    "get_logger",
    # clock
    "Clock", "ManualClock",
    # platform
    "PlatformProfile", "select_profile",
    # components
    "Candidate", "CandidateGenerator",
    "HttpProbe", "Prober", "ProbeResult",
    "DiscoveryCoordinator", "DiscoveryState",
    "ResolutionCache", "ResolvedEndpoint", "EndpointSource",
    "FileEndpointStore", "MemoryEndpointStore",
    "FallbackPolicy",
]

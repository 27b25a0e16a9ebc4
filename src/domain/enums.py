"""Domain enumerations and state-transition rules."""

import enum


class ProviderStatus(str, enum.Enum):
    FOUND = "FOUND"
    NOT_FOUND = "NOT_FOUND"  # provider answered, but without a usable route
    FAILED = "FAILED"  # transport error, timeout, malformed body


class RouteSource(str, enum.Enum):
    EXTERNAL = "external"
    INTERNAL_GRAPH = "internal_graph"


class ResolverState(str, enum.Enum):
    TRY_EXTERNAL = "TRY_EXTERNAL"
    RETRY_PLAIN = "RETRY_PLAIN"
    INTERNAL_FALLBACK = "INTERNAL_FALLBACK"
    RESOLVED = "RESOLVED"
    UNREACHABLE = "UNREACHABLE"


# State machine: maps current state -> set of valid next states
RESOLVER_TRANSITIONS: dict[ResolverState, set[ResolverState]] = {
    ResolverState.TRY_EXTERNAL: {
        ResolverState.RESOLVED,
        ResolverState.RETRY_PLAIN,
        ResolverState.INTERNAL_FALLBACK,
    },
    ResolverState.RETRY_PLAIN: {
        ResolverState.RESOLVED,
        ResolverState.INTERNAL_FALLBACK,
    },
    ResolverState.INTERNAL_FALLBACK: {
        ResolverState.RESOLVED,
        ResolverState.UNREACHABLE,
    },
    ResolverState.RESOLVED: set(),
    ResolverState.UNREACHABLE: set(),
}

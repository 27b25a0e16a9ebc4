"""
Domain value objects and error types.

Patterns used
-------------
- Every value here is an immutable dataclass: routes and graph pieces are
  created per request (or once at startup) and never mutated afterwards.
- ``ProviderResult`` carries an explicit found / not-found / failed
  discriminant so the fallback chain never relies on ``None`` or on
  exceptions for the expected "no route" outcome.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from .enums import ProviderStatus, ResolverState, RouteSource


class InvalidRouteRequest(ValueError):
    """Raised when a routing request is malformed (e.g. fewer than 2 anchors)."""


class UnknownNodeError(ValueError):
    """Raised when a shortest-path query names a node absent from the graph."""


class EmptyGraphError(LookupError):
    """Raised when a nearest-node query runs against a graph with no nodes."""


class GraphConstructionError(ValueError):
    """Raised at build time when the seed topology is inconsistent."""


class InvalidStateTransition(Exception):
    """Raised when the resolver moves between states the machine forbids."""


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lon: float

    @classmethod
    def from_pair(cls, pair: Sequence[float]) -> Coordinate:
        """Build from a ``[lat, lon]`` pair, rejecting anything else."""
        if pair is None or len(pair) != 2:
            raise InvalidRouteRequest("Each point must contain exactly lat and lon")
        try:
            lat, lon = float(pair[0]), float(pair[1])
        except (TypeError, ValueError) as exc:
            raise InvalidRouteRequest(f"Invalid coordinate pair: {pair!r}") from exc
        if not (math.isfinite(lat) and math.isfinite(lon)):
            raise InvalidRouteRequest(f"Invalid coordinate pair: {pair!r}")
        return cls(lat, lon)


@dataclass(frozen=True)
class GraphNode:
    id: str
    coordinate: Coordinate


@dataclass(frozen=True)
class Edge:
    target_id: str
    cost: float  # km


@dataclass(frozen=True)
class ShortestPathResult:
    path: tuple[str, ...]
    total_cost: float

    @property
    def reachable(self) -> bool:
        return bool(self.path) and not math.isinf(self.total_cost)


@dataclass(frozen=True)
class RouteResponse:
    """
    A resolved route.

    ``nodes`` are positional labels ("origin", "1", ..., "destination") when
    the route came from the external provider and graph node ids when it
    came from the internal graph; ``source`` tells the two apart.
    """

    nodes: tuple[str, ...]
    coordinates: tuple[Coordinate, ...]
    total_cost: float  # km; inf when no route
    source: Optional[RouteSource] = None

    @property
    def found(self) -> bool:
        return bool(self.coordinates)

    @classmethod
    def not_found(cls) -> RouteResponse:
        return cls(nodes=(), coordinates=(), total_cost=math.inf)


@dataclass(frozen=True)
class ProviderResult:
    status: ProviderStatus
    route: Optional[RouteResponse] = None
    attempts: int = 0
    approximated: bool = False

    @property
    def found(self) -> bool:
        return self.status == ProviderStatus.FOUND and self.route is not None

    @classmethod
    def failed(cls, attempts: int = 0, approximated: bool = False) -> ProviderResult:
        return cls(ProviderStatus.FAILED, None, attempts, approximated)


@dataclass(frozen=True)
class RouteResolution:
    response: RouteResponse
    states: tuple[ResolverState, ...]

"""
Route Resolver  (fallback chain)
================================

1. **TRY_EXTERNAL**       -- ask the external provider (optionally with
   anchor snapping).  A provider that snapped anchors and then retried
   with the originals is recorded as **RETRY_PLAIN** as soon as the retry
   starts, so it shows even when the request deadline cuts it short.
2. **INTERNAL_FALLBACK**  -- on any soft failure, snap origin and
   destination to their nearest internal graph nodes and run Dijkstra.
3. **RESOLVED** / **UNREACHABLE** -- terminal states.

Only origin and destination take part in the internal fallback; interior
waypoints are honoured by the external provider alone.

The whole external attempt (snaps, route, retry) is bounded by
``timeout_seconds``; hitting it counts as a soft failure.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional, Protocol, Sequence

from .dijkstra import shortest_path
from .distance import same_coordinate
from .entities import (
    Coordinate,
    InvalidRouteRequest,
    InvalidStateTransition,
    ProviderResult,
    RouteResolution,
    RouteResponse,
)
from .enums import RESOLVER_TRANSITIONS, ResolverState, RouteSource
from .graph import Graph

logger = logging.getLogger(__name__)


class RouteProvider(Protocol):
    async def route(
        self,
        anchors: Sequence[Coordinate],
        allow_approximation: bool = False,
        *,
        on_retry: Optional[Callable[[], None]] = None,
    ) -> ProviderResult: ...


class _StateTrace:
    """Records visited states, rejecting transitions the machine forbids."""

    def __init__(self) -> None:
        self.states: list[ResolverState] = [ResolverState.TRY_EXTERNAL]

    @property
    def current(self) -> ResolverState:
        return self.states[-1]

    def advance(self, new_state: ResolverState) -> None:
        if new_state not in RESOLVER_TRANSITIONS.get(self.current, set()):
            raise InvalidStateTransition(
                f"Cannot transition from {self.current.value} to {new_state.value}"
            )
        self.states.append(new_state)


class RouteResolver:
    def __init__(
        self,
        provider: RouteProvider,
        graph: Graph,
        *,
        timeout_seconds: Optional[float] = None,
    ):
        self.provider = provider
        self.graph = graph
        self.timeout_seconds = timeout_seconds

    async def resolve(
        self, anchors: Sequence[Coordinate], allow_approximation: bool = False
    ) -> RouteResolution:
        if anchors is None or len(anchors) < 2:
            raise InvalidRouteRequest(
                "At least an origin and a destination are required to compute a route"
            )
        anchors = list(anchors)
        logger.info(
            "Route requested: %d anchors, origin=%s destination=%s, approximation=%s",
            len(anchors), anchors[0], anchors[-1], allow_approximation,
        )

        trace = _StateTrace()

        def _record_retry() -> None:
            if trace.current != ResolverState.RETRY_PLAIN:
                trace.advance(ResolverState.RETRY_PLAIN)

        external = await self._try_external(anchors, allow_approximation, _record_retry)
        if external.attempts > 1:
            _record_retry()

        if external.found:
            route = external.route
            logger.info(
                "External provider returned %.2f km with %d points",
                route.total_cost, len(route.coordinates),
            )
            trace.advance(ResolverState.RESOLVED)
            return RouteResolution(route, tuple(trace.states))

        logger.info(
            "External provider unavailable (%s); falling back to the internal graph",
            external.status.value,
        )
        trace.advance(ResolverState.INTERNAL_FALLBACK)
        response = self.resolve_internal(anchors[0], anchors[-1])
        trace.advance(
            ResolverState.RESOLVED if response.found else ResolverState.UNREACHABLE
        )
        return RouteResolution(response, tuple(trace.states))

    def resolve_internal(self, origin: Coordinate, destination: Coordinate) -> RouteResponse:
        """Nearest-node Dijkstra between *origin* and *destination*."""
        origin_node = self.graph.nearest_node_id(origin)
        destination_node = self.graph.nearest_node_id(destination)
        logger.info("Running Dijkstra from node %s to %s", origin_node, destination_node)

        result = shortest_path(origin_node, destination_node, self.graph.adjacency)
        if not result.reachable:
            logger.warning("No path between %s and %s", origin_node, destination_node)
            return RouteResponse.not_found()

        # raw origin first, then graph nodes; destination only if not already last
        coordinates = [origin]
        coordinates.extend(self.graph.coordinate_of(node_id) for node_id in result.path)
        if not same_coordinate(coordinates[-1], destination):
            coordinates.append(destination)

        logger.info(
            "Dijkstra found %d nodes, %.2f km, %d points",
            len(result.path), result.total_cost, len(coordinates),
        )
        return RouteResponse(
            nodes=result.path,
            coordinates=tuple(coordinates),
            total_cost=result.total_cost,
            source=RouteSource.INTERNAL_GRAPH,
        )

    async def _try_external(
        self,
        anchors: list[Coordinate],
        allow_approximation: bool,
        on_retry: Callable[[], None],
    ) -> ProviderResult:
        try:
            return await asyncio.wait_for(
                self.provider.route(anchors, allow_approximation, on_retry=on_retry),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "External provider exceeded %.1fs; treating as failure", self.timeout_seconds
            )
            return ProviderResult.failed()

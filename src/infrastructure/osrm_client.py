"""
OSRM routing provider
=====================

Talks to an OSRM-compatible HTTP service and normalises its answers into
``RouteResponse`` values.

Endpoints used
--------------
* ``GET {base}/route/v1/{profile}/{lon,lat;lon,lat;...}?overview=full&geometries=geojson``
* ``GET {base}/nearest/v1/{profile}/{lon,lat}?number=1``   (anchor snapping)

OSRM speaks longitude-first and meters; everything leaving this module is
latitude-first and kilometers.

Failure policy
--------------
Transport errors, HTTP errors, non-JSON bodies and responses without a
usable route are *soft* failures: they are logged and reported through
``ProviderResult.status``, never raised.  Only a request with fewer than
two anchors is rejected with ``InvalidRouteRequest``.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Optional, Sequence

import httpx

from src.domain.entities import (
    Coordinate,
    InvalidRouteRequest,
    ProviderResult,
    RouteResponse,
)
from src.domain.enums import ProviderStatus, RouteSource

logger = logging.getLogger(__name__)


def _format_osrm_error(resp: httpx.Response) -> str:
    """Best-effort decode of OSRM JSON error payloads."""
    try:
        data = resp.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and (data.get("code") or data.get("message")):
        return f"OSRM {resp.status_code} {data.get('code', '')}: {data.get('message', '')}"

    body = (resp.text or "").strip().replace("\n", " ")
    if len(body) > 240:
        body = body[:240] + "..."
    return f"OSRM {resp.status_code}: {body}" if body else f"OSRM HTTP {resp.status_code}"


def _format_point(point: Coordinate) -> str:
    return f"{point.lon:f},{point.lat:f}"


def build_node_labels(count: int) -> tuple[str, ...]:
    """Positional labels: origin, point 1 .. point n-2, destination."""
    labels = []
    for index in range(count):
        if index == 0:
            labels.append("origin")
        elif index == count - 1:
            labels.append("destination")
        else:
            labels.append(f"point {index}")
    return tuple(labels)


class OSRMRoutingProvider:
    def __init__(
        self,
        *,
        base_url: str,
        profile: str = "driving",
        timeout_seconds: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.profile = profile
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds),
            headers={"accept": "application/json"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    # ── Public API ────────────────────────────────────────────────────

    async def route(
        self,
        anchors: Sequence[Coordinate],
        allow_approximation: bool = False,
        *,
        on_retry: Optional[Callable[[], None]] = None,
    ) -> ProviderResult:
        """
        Route through *anchors* in order.

        With *allow_approximation* every anchor is first snapped onto the
        road network (anchors whose snap fails are kept as-is).  If the
        snapped attempt yields nothing and snapping changed at least one
        anchor, the original anchors are tried once more; *on_retry* is
        called just before that second attempt.
        """
        if anchors is None or len(anchors) < 2:
            raise InvalidRouteRequest(
                "At least an origin and a destination are required to compute a route"
            )
        original = list(anchors)

        effective = await self.snap_anchors(original) if allow_approximation else original
        approximated = allow_approximation and effective != original

        first = await self.attempt_route(effective, len(original))
        if first.found or not approximated:
            return ProviderResult(first.status, first.route, 1, approximated)

        logger.warning(
            "Route with snapped anchors failed (%s); retrying with the original anchors",
            first.status.value,
        )
        if on_retry is not None:
            on_retry()
        retry = await self.attempt_route(original, len(original))
        return ProviderResult(retry.status, retry.route, 2, approximated)

    async def attempt_route(
        self, anchors: Sequence[Coordinate], label_count: int
    ) -> ProviderResult:
        """Single /route call; never raises on provider trouble."""
        try:
            resp = await self._client.get(
                self.route_url(anchors),
                params={"overview": "full", "geometries": "geojson"},
            )
        except httpx.HTTPError:
            logger.error("OSRM route request failed", exc_info=True)
            return ProviderResult.failed(attempts=1)

        if resp.status_code >= 400:
            logger.warning("OSRM route request rejected: %s", _format_osrm_error(resp))
            status = ProviderStatus.FAILED if resp.status_code >= 500 else ProviderStatus.NOT_FOUND
            return ProviderResult(status, attempts=1)

        try:
            data = resp.json()
        except ValueError:
            logger.warning("OSRM returned a non-JSON body (HTTP %d)", resp.status_code)
            return ProviderResult.failed(attempts=1)

        route = self._parse_route(data, anchors, label_count)
        if route is None:
            return ProviderResult(ProviderStatus.NOT_FOUND, attempts=1)
        return ProviderResult(ProviderStatus.FOUND, route, attempts=1)

    async def snap_anchors(self, anchors: Sequence[Coordinate]) -> list[Coordinate]:
        adjusted: list[Coordinate] = []
        for index, anchor in enumerate(anchors):
            snapped = await self.snap_to_road(anchor)
            if snapped is None:
                adjusted.append(anchor)
                continue
            if snapped != anchor:
                logger.info("Anchor %d snapped from %s to %s", index, anchor, snapped)
            adjusted.append(snapped)
        return adjusted

    async def snap_to_road(self, anchor: Coordinate) -> Optional[Coordinate]:
        """Nearest routable point to *anchor*, or ``None`` if unavailable."""
        try:
            resp = await self._client.get(self.nearest_url(anchor), params={"number": 1})
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.debug("Could not snap %s: %s", anchor, exc)
            return None

        waypoints = data.get("waypoints") if isinstance(data, dict) else None
        if not isinstance(waypoints, list) or not waypoints:
            return None
        waypoint = waypoints[0]
        location = waypoint.get("location") if isinstance(waypoint, dict) else None
        if not isinstance(location, list) or len(location) < 2:
            return None
        try:
            return Coordinate(lat=float(location[1]), lon=float(location[0]))
        except (TypeError, ValueError):
            return None

    # ── URL construction ──────────────────────────────────────────────

    def route_url(self, anchors: Sequence[Coordinate]) -> str:
        segment = ";".join(_format_point(p) for p in anchors)
        return f"{self.base_url}/route/v1/{self.profile}/{segment}"

    def nearest_url(self, anchor: Coordinate) -> str:
        return f"{self.base_url}/nearest/v1/{self.profile}/{_format_point(anchor)}"

    # ── Internals ─────────────────────────────────────────────────────

    @staticmethod
    def _parse_route(
        data: Any, anchors: Sequence[Coordinate], label_count: int
    ) -> Optional[RouteResponse]:
        if not isinstance(data, dict):
            logger.warning("OSRM returned an unexpected body: %r", data)
            return None
        if data.get("code", "Ok") != "Ok":
            logger.warning(
                "OSRM error code=%s message=%s", data.get("code"), data.get("message")
            )
            return None

        routes = data.get("routes")
        if not isinstance(routes, list) or not routes:
            logger.warning("OSRM returned no routes for %s -> %s", anchors[0], anchors[-1])
            return None

        first = routes[0]
        geometry = first.get("geometry") if isinstance(first, dict) else None
        raw_coords = geometry.get("coordinates") if isinstance(geometry, dict) else None
        if not isinstance(raw_coords, list):
            logger.warning("OSRM answered without a valid geometry")
            return None

        try:
            coordinates = tuple(
                Coordinate(lat=float(pair[1]), lon=float(pair[0]))
                for pair in raw_coords
                if isinstance(pair, (list, tuple)) and len(pair) >= 2
            )
            distance_m = float(first["distance"])
        except KeyError:
            logger.warning("OSRM route carried no distance")
            return None
        except (TypeError, ValueError):
            logger.warning("OSRM route contained non-numeric values")
            return None
        if not math.isfinite(distance_m) or distance_m < 0:
            logger.warning("OSRM route distance is unusable: %r", first["distance"])
            return None
        if not coordinates:
            logger.warning("OSRM geometry contained no coordinate pairs")
            return None

        return RouteResponse(
            nodes=build_node_labels(label_count),
            coordinates=coordinates,
            total_cost=distance_m / 1000.0,
            source=RouteSource.EXTERNAL,
        )

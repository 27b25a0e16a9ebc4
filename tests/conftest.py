"""
Shared test fixtures.

OSRM is replaced by an ``httpx.MockTransport`` driven by ``OSRMStub``:
tests queue canned responses (or transport exceptions) per endpoint and
inspect the requests the provider actually made.  No network is used.
"""

from __future__ import annotations

from typing import AsyncGenerator, Union

import httpx
import pytest
import pytest_asyncio

from src.domain.entities import Coordinate
from src.domain.graph import build_seed_graph
from src.infrastructure.osrm_client import OSRMRoutingProvider

OSRM_BASE_URL = "http://osrm.test"

SP = Coordinate(-23.5505, -46.6333)
RJ = Coordinate(-22.9068, -43.1729)
BH = Coordinate(-19.9167, -43.9345)
SSA = Coordinate(-12.9777, -38.5016)


# ── Canned OSRM payloads ──────────────────────────────────────────────


def route_payload(lonlat_pairs: list[list[float]], distance_m: float = 1000.0) -> dict:
    return {
        "code": "Ok",
        "routes": [
            {
                "distance": distance_m,
                "duration": distance_m / 10,
                "geometry": {"type": "LineString", "coordinates": lonlat_pairs},
            }
        ],
    }


def no_route_payload() -> dict:
    return {"code": "Ok", "routes": []}


def nearest_payload(lon: float, lat: float) -> dict:
    return {"code": "Ok", "waypoints": [{"location": [lon, lat], "distance": 12.3}]}


Queued = Union[httpx.Response, Exception]


class OSRMStub:
    """Programmable handler for ``httpx.MockTransport``."""

    def __init__(self) -> None:
        self.route_queue: list[Queued] = []
        self.nearest_queue: list[Queued] = []
        self.requests: list[httpx.Request] = []

    def queue_route(self, item: Union[Queued, dict, list], status_code: int = 200) -> None:
        self.route_queue.append(_as_queued(item, status_code))

    def queue_nearest(self, item: Union[Queued, dict, list], status_code: int = 200) -> None:
        self.nearest_queue.append(_as_queued(item, status_code))

    @property
    def route_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if "/route/" in r.url.path]

    @property
    def nearest_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if "/nearest/" in r.url.path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.route_queue if "/route/" in request.url.path else self.nearest_queue
        if not queue:
            return httpx.Response(503, json={"code": "Unavailable"})
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def _as_queued(item: Union[Queued, dict, list], status_code: int) -> Queued:
    if isinstance(item, (dict, list)):
        return httpx.Response(status_code, json=item)
    return item


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest.fixture
def seed_graph():
    return build_seed_graph()


@pytest.fixture
def osrm_stub() -> OSRMStub:
    return OSRMStub()


@pytest_asyncio.fixture
async def provider(osrm_stub: OSRMStub) -> AsyncGenerator[OSRMRoutingProvider, None]:
    client = httpx.AsyncClient(transport=httpx.MockTransport(osrm_stub))
    prov = OSRMRoutingProvider(base_url=OSRM_BASE_URL + "/", client=client)
    yield prov
    await prov.aclose()

"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from src.domain.entities import RouteResponse


# ── Requests ──────────────────────────────────────────────────────────


class RouteRequest(BaseModel):
    points: list[list[float]] = Field(
        ...,
        description="Ordered [lat, lon] pairs: origin, optional waypoints, destination.",
    )
    allow_approximation: Optional[bool] = Field(
        None,
        description="Snap points onto the road network before routing. "
        "Defaults to the server setting when omitted.",
    )

    @field_validator("points")
    @classmethod
    def _check_pairs(cls, points: list[list[float]]) -> list[list[float]]:
        # anchor count and pair shape are checked by the domain (400)
        for index, pair in enumerate(points):
            if len(pair) != 2:
                continue
            lat, lon = pair
            if not -90 <= lat <= 90:
                raise ValueError(f"Point {index} latitude out of range: {lat}")
            if not -180 <= lon <= 180:
                raise ValueError(f"Point {index} longitude out of range: {lon}")
        return points


# ── Responses ─────────────────────────────────────────────────────────


class CoordinateSchema(BaseModel):
    lat: float
    lon: float


class RouteResponseSchema(BaseModel):
    nodes: list[str]
    coordinates: list[CoordinateSchema]
    total_cost: float = Field(..., description="Route length in km.")
    source: Optional[str] = None

    @classmethod
    def from_domain(cls, route: RouteResponse) -> RouteResponseSchema:
        return cls(
            nodes=list(route.nodes),
            coordinates=[CoordinateSchema(lat=c.lat, lon=c.lon) for c in route.coordinates],
            total_cost=route.total_cost,
            source=route.source.value if route.source else None,
        )


class EdgeSchema(BaseModel):
    target_id: str
    cost_km: float


class GraphNodeSchema(BaseModel):
    id: str
    lat: float
    lon: float
    edges: list[EdgeSchema] = []


class HealthResponse(BaseModel):
    status: str = "ok"


class HelloResponse(BaseModel):
    message: str = "Hello from FastAPI!"


class ErrorResponse(BaseModel):
    detail: str

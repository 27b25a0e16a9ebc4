"""
Routing endpoints
=================

POST /api/v1/routes -- resolve a route through 2+ [lat, lon] points
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from src.api.dependencies import get_route_resolver
from src.api.middleware import limiter
from src.api.schemas import ErrorResponse, RouteRequest, RouteResponseSchema
from src.config import settings
from src.domain.entities import (
    Coordinate,
    EmptyGraphError,
    InvalidRouteRequest,
    UnknownNodeError,
)
from src.domain.resolver import RouteResolver

router = APIRouter(prefix="/routes", tags=["routes"])


@router.post(
    "",
    response_model=RouteResponseSchema,
    summary="Resolve a route",
    description=(
        "Tries the external routing provider first and falls back to the "
        "internal graph (nearest nodes + Dijkstra) when it has no answer."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Malformed points or no graph to route on."},
        404: {"model": ErrorResponse, "description": "No route between the points."},
    },
)
@limiter.limit(settings.rate_limit)
async def resolve_route(
    request: Request,
    body: RouteRequest,
    resolver: RouteResolver = Depends(get_route_resolver),
):
    allow_approximation = (
        body.allow_approximation
        if body.allow_approximation is not None
        else settings.allow_approximation_default
    )
    try:
        anchors = [Coordinate.from_pair(pair) for pair in body.points]
        resolution = await resolver.resolve(anchors, allow_approximation)
    except (InvalidRouteRequest, UnknownNodeError, EmptyGraphError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    if not resolution.response.found:
        raise HTTPException(status_code=404, detail="Route not found")
    return RouteResponseSchema.from_domain(resolution.response)

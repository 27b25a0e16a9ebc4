"""
Admin / observability endpoints
===============================

GET /api/v1/admin/health -- simple health check
GET /api/v1/admin/graph  -- the read-only internal fallback graph
GET /api/hello           -- connectivity check used by the frontend
"""

from fastapi import APIRouter, Depends

from src.api.dependencies import get_graph
from src.api.schemas import EdgeSchema, GraphNodeSchema, HealthResponse, HelloResponse
from src.domain.graph import Graph

router = APIRouter(prefix="/admin", tags=["admin"])
hello_router = APIRouter(tags=["admin"])


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()


@router.get(
    "/graph",
    response_model=list[GraphNodeSchema],
    summary="List internal graph nodes and their edges",
)
async def get_graph_nodes(graph: Graph = Depends(get_graph)):
    return [
        GraphNodeSchema(
            id=node.id,
            lat=node.coordinate.lat,
            lon=node.coordinate.lon,
            edges=[
                EdgeSchema(target_id=e.target_id, cost_km=round(e.cost, 3))
                for e in graph.adjacency.get(node.id, ())
            ],
        )
        for node in graph.nodes.values()
    ]


@hello_router.get("/hello", response_model=HelloResponse, summary="Hello")
async def hello():
    return HelloResponse()

"""FastAPI dependency injection helpers."""

from fastapi import Request

from src.domain.graph import Graph
from src.domain.resolver import RouteResolver


def get_route_resolver(request: Request) -> RouteResolver:
    """The resolver built once in the application lifespan."""
    return request.app.state.route_resolver


def get_graph(request: Request) -> Graph:
    return request.app.state.graph

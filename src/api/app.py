"""
FastAPI application factory.

* Registers routes for routing and admin.
* Builds the internal graph and the OSRM provider once via lifespan
  events; closes the provider's HTTP client on shutdown.
* Applies CORS and rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.api.middleware import limiter
from src.api.routes import admin, routing
from src.config import settings
from src.domain.graph import build_seed_graph
from src.domain.resolver import RouteResolver
from src.infrastructure.osrm_client import OSRMRoutingProvider

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build shared read-only state on startup; release the HTTP client on shutdown."""
    graph = build_seed_graph()
    provider = OSRMRoutingProvider(
        base_url=settings.osrm_base_url,
        profile=settings.osrm_profile,
        timeout_seconds=settings.osrm_timeout_seconds,
    )
    app.state.graph = graph
    app.state.route_resolver = RouteResolver(
        provider, graph, timeout_seconds=settings.route_timeout_seconds
    )
    logger.info(
        "Route resolver ready (graph nodes=%d, provider=%s)",
        len(graph), provider.base_url,
    )
    yield
    await provider.aclose()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Route Resolution API",
        description=(
            "Resolves a travel route between two or more coordinates.  Uses an "
            "OSRM-compatible routing service when available and falls back to "
            "a built-in graph searched with Dijkstra's algorithm."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Routers
    app.include_router(routing.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")
    app.include_router(admin.hello_router, prefix="/api")

    return app

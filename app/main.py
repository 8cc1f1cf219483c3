"""
FastAPI application entry point for the route planner.

Plans multi-stop routes for transport requests and tracks their
execution segment by segment.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.exceptions import DomainError
from app.db.database import dispose_engine
from app.schemas.base import ErrorResponse
from app.api.v1 import api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Configure logging on startup and release the connection pool on shutdown."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.info(f"{settings.app_name} {settings.app_version} starting")
    yield
    await dispose_engine()


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Map a domain error to its HTTP status with ``{detail, error}``."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} refused: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(detail=exc.message, error=type(exc).__name__).model_dump(),
    )


def create_application() -> FastAPI:
    """Build the app with the v1 routers and the domain error handler."""
    app = FastAPI(
        title=settings.app_name,
        description="""
        ## Route Planner

        Multi-stop route planning and execution tracking for transport requests.

        ### Planning

        - Pickup and delivery are snapped to their nearest warehouses
        - The direct route and up to three single-stop detours are measured
          through the road-network distance service
        - Each successful variant is stored as a numbered option

        ### Execution

        - Confirming an option creates the route and its scheduled segments
        - Segments move through **assign → start → finish**, strictly in order
        - Segment cost grows from a planned estimate to the real figure,
          including warehouse dwell nights
        """,
        version=settings.app_version,
        openapi_url=f"{settings.api_v1_prefix}/openapi.json",
        docs_url=f"{settings.api_v1_prefix}/docs",
        redoc_url=f"{settings.api_v1_prefix}/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(DomainError, domain_error_handler)

    app.include_router(api_router, prefix=settings.api_v1_prefix)

    return app


app = create_application()


@app.get("/health")
async def health_check():
    """Liveness probe with the upstream services this instance talks to."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
        "upstreams": {
            "distance": settings.osrm_base_url,
            "calculations": settings.calculations_service_url,
            "requests": settings.request_service_url,
        },
    }


@app.get("/", include_in_schema=False)
async def root():
    return {
        "app": settings.app_name,
        "docs": f"{settings.api_v1_prefix}/docs",
    }

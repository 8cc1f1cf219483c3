"""
API v1 router aggregation.
"""
from fastapi import APIRouter

from app.api.v1.endpoints import options, routes, segments, vehicles

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(
    options.router,
    prefix="/requests",
    tags=["Route Options"],
)

api_router.include_router(
    routes.router,
    prefix="/routes",
    tags=["Routes"],
)

api_router.include_router(
    segments.router,
    prefix="/segments",
    tags=["Segments"],
)

api_router.include_router(
    vehicles.router,
    prefix="/vehicles",
    tags=["Vehicles"],
)

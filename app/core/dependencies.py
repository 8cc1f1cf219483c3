"""FastAPI dependencies wiring sessions, collaborator clients and services."""
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db.database import get_async_session
from app.services.committer import RouteCommitter
from app.services.costing import RouteCostService
from app.services.distance_oracle import DistanceOracle, OsrmDistanceOracle
from app.services.lifecycle import SegmentLifecycle
from app.services.planner import RoutePlanner
from app.services.request_service import RequestServiceClient
from app.services.routes import RouteQueries
from app.services.variants import CandidateSelector, RouteVariantBuilder
from app.services.vehicles import VehicleRegistry
from app.services.warehouses import TariffSource, WarehouseDirectory

SessionDep = Annotated[AsyncSession, Depends(get_async_session)]


# =============================================================================
# Collaborators (overridden in tests)
# =============================================================================


def get_distance_oracle() -> DistanceOracle:
    return OsrmDistanceOracle()


def get_warehouse_directory() -> WarehouseDirectory:
    return WarehouseDirectory()


def get_tariff_source() -> TariffSource:
    return TariffSource()


def get_request_service() -> RequestServiceClient:
    return RequestServiceClient()


OracleDep = Annotated[DistanceOracle, Depends(get_distance_oracle)]
DirectoryDep = Annotated[WarehouseDirectory, Depends(get_warehouse_directory)]
TariffsDep = Annotated[TariffSource, Depends(get_tariff_source)]
RequestsDep = Annotated[RequestServiceClient, Depends(get_request_service)]


# =============================================================================
# Services
# =============================================================================


def get_vehicle_registry(session: SessionDep) -> VehicleRegistry:
    return VehicleRegistry(session)


def get_route_queries(session: SessionDep, oracle: OracleDep) -> RouteQueries:
    return RouteQueries(session, oracle)


def get_route_planner(
    session: SessionDep,
    oracle: OracleDep,
    directory: DirectoryDep,
    requests: RequestsDep,
) -> RoutePlanner:
    selector = CandidateSelector(
        RouteVariantBuilder(oracle, directory),
        directory,
        candidate_count=get_settings().candidate_intermediate_count,
    )
    return RoutePlanner(session, selector, directory, requests)


def get_route_committer(
    session: SessionDep,
    directory: DirectoryDep,
    requests: RequestsDep,
) -> RouteCommitter:
    return RouteCommitter(session, directory, requests)


def get_cost_service(
    session: SessionDep,
    directory: DirectoryDep,
    tariffs: TariffsDep,
) -> RouteCostService:
    return RouteCostService(session, directory, tariffs)


def get_segment_lifecycle(
    session: SessionDep,
    requests: RequestsDep,
    costs: Annotated[RouteCostService, Depends(get_cost_service)],
) -> SegmentLifecycle:
    return SegmentLifecycle(session, requests, costs)

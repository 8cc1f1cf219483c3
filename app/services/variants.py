"""
Route variant construction and selection.

``RouteVariantBuilder`` measures an ordered waypoint chain leg by leg with
the distance oracle. ``CandidateSelector`` decides which chains to try
(direct, plus single-stop detours through warehouses lying close to the
origin-destination line) and picks the shortest successful one.
"""
import logging
from typing import Optional, Sequence

from app.core.exceptions import IntegrationFailure
from app.schemas.route_option import LegSchema, TentativeRoute
from app.services.distance_oracle import DistanceOracle
from app.services.geo import (
    DESTINATION_POINT_NAME,
    Coordinate,
    RawPoint,
    WarehouseInfo,
    WarehouseStop,
    Waypoint,
    distance_to_segment_km,
    warehouse_chain,
)
from app.services.warehouses import WarehouseDirectory

logger = logging.getLogger(__name__)


class RouteVariantBuilder:
    """
    Turns a waypoint chain into a fully measured ``TentativeRoute``.

    Leg rules:
    - Any oracle failure aborts the whole variant.
    - A zero distance between two distinct warehouses is a degenerate
      oracle answer and aborts the variant.
    - A zero distance between a raw point and a warehouse is emitted as a
      zero-length leg (the address sits on the warehouse), so every chain
      of the same shape yields the same number of legs.
    """

    def __init__(self, oracle: DistanceOracle, directory: WarehouseDirectory):
        self.oracle = oracle
        self.directory = directory

    async def build(
        self,
        waypoints: Sequence[Waypoint],
        warehouses: Optional[dict[int, WarehouseInfo]] = None,
    ) -> TentativeRoute:
        """
        Measure every consecutive pair of ``waypoints``.

        Args:
            waypoints: At least two waypoints, in travel order
            warehouses: Already resolved warehouses; missing ids are looked up

        Returns:
            A successful TentativeRoute, or a failed one carrying the reason
        """
        if len(waypoints) < 2:
            return TentativeRoute.failed("A route needs at least two waypoints")

        resolved = dict(warehouses or {})
        missing = [
            w.warehouse_id for w in waypoints
            if isinstance(w, WarehouseStop) and w.warehouse_id not in resolved
        ]
        if missing:
            resolved.update(await self.directory.get_many(missing))

        legs: list[LegSchema] = []
        geometries: list[str] = []

        for index, (start, end) in enumerate(zip(waypoints, waypoints[1:]), start=1):
            origin = _endpoint(start, resolved)
            destination = _endpoint(end, resolved)
            if origin is None or destination is None:
                unresolved = start if origin is None else end
                return TentativeRoute.failed(
                    f"Warehouse {unresolved.warehouse_id} could not be resolved"
                )

            measurement = await self.oracle.measure(origin[2], destination[2])
            if not measurement.success or measurement.distance_km is None:
                return TentativeRoute.failed(
                    f"Leg {index} ({origin[1]} -> {destination[1]}) could not be measured: "
                    f"{measurement.message or 'no distance'}"
                )
            if measurement.distance_km == 0.0 and _between_distinct_warehouses(start, end):
                return TentativeRoute.failed(
                    f"Leg {index} ({origin[1]} -> {destination[1]}) measured 0 km"
                )

            legs.append(LegSchema(
                sequence_number=index,
                origin_warehouse_id=origin[0],
                origin_name=origin[1],
                origin_latitude=origin[2].latitude,
                origin_longitude=origin[2].longitude,
                destination_warehouse_id=destination[0],
                destination_name=destination[1],
                destination_latitude=destination[2].latitude,
                destination_longitude=destination[2].longitude,
                distance_km=measurement.distance_km,
                duration_hours=measurement.duration_hours or 0.0,
                geometry=measurement.geometry,
            ))
            if measurement.geometry:
                geometries.append(measurement.geometry)

        stops = [w.warehouse_id for w in waypoints if isinstance(w, WarehouseStop)]
        return TentativeRoute(
            success=True,
            warehouse_ids=stops,
            warehouse_names=[_warehouse_name(resolved[i]) for i in stops],
            legs=legs,
            total_distance_km=round(sum(leg.distance_km for leg in legs), 2),
            total_duration_hours=round(sum(leg.duration_hours for leg in legs), 2),
            geometry="|".join(geometries) or None,
        )


def _warehouse_name(info: WarehouseInfo) -> str:
    return info.name or f"Warehouse {info.id}"


def _endpoint(
    waypoint: Waypoint,
    warehouses: dict[int, WarehouseInfo],
) -> Optional[tuple[Optional[int], str, Coordinate]]:
    """(warehouse id, display name, coordinate) of a waypoint."""
    if isinstance(waypoint, RawPoint):
        return None, waypoint.name, waypoint.coordinate
    info = warehouses.get(waypoint.warehouse_id)
    if info is None:
        return None
    return info.id, _warehouse_name(info), info.coordinate


def _between_distinct_warehouses(start: Waypoint, end: Waypoint) -> bool:
    return (
        isinstance(start, WarehouseStop)
        and isinstance(end, WarehouseStop)
        and start.warehouse_id != end.warehouse_id
    )


def rank_candidates(
    warehouses: Sequence[WarehouseInfo],
    origin_id: int,
    destination_id: int,
    k: int,
) -> list[int]:
    """
    Ids of the ``k`` warehouses closest to the origin-destination segment.

    When either endpoint is not among ``warehouses`` there is no segment to
    project on, so the first ``k`` other warehouses are returned as listed.
    """
    others = [w for w in warehouses if w.id not in (origin_id, destination_id)]
    by_id = {w.id: w for w in warehouses}
    origin = by_id.get(origin_id)
    destination = by_id.get(destination_id)

    if origin is None or destination is None:
        return [w.id for w in others[:k]]

    ranked = sorted(
        others,
        key=lambda w: distance_to_segment_km(
            w.coordinate, origin.coordinate, destination.coordinate,
        ),
    )
    return [w.id for w in ranked[:k]]


class CandidateSelector:
    """Generates competing route topologies and picks the shortest."""

    def __init__(
        self,
        builder: RouteVariantBuilder,
        directory: WarehouseDirectory,
        candidate_count: int = 3,
    ):
        self.builder = builder
        self.directory = directory
        self.candidate_count = candidate_count

    async def nearest_to_route(
        self,
        origin_id: int,
        destination_id: int,
        warehouses: Optional[Sequence[WarehouseInfo]] = None,
    ) -> list[int]:
        """Candidate intermediate stops; empty when the listing is unavailable."""
        if warehouses is None:
            try:
                warehouses = await self.directory.list_all()
            except IntegrationFailure as e:
                logger.warning(f"Warehouse listing unavailable, no detours tried: {e}")
                return []
        return rank_candidates(warehouses, origin_id, destination_id, self.candidate_count)

    async def build_variants(
        self,
        origin_id: int,
        destination_id: int,
        *,
        raw_origin: Optional[RawPoint] = None,
        raw_destination: Optional[RawPoint] = None,
        intermediate_ids: Optional[list[int]] = None,
        include_alternatives: bool = True,
        warehouses: Optional[Sequence[WarehouseInfo]] = None,
    ) -> list[TentativeRoute]:
        """
        Build the direct variant plus, when asked, one variant per candidate.

        Explicit ``intermediate_ids`` build exactly that chain. Failed
        candidate variants are dropped; the direct variant is always
        returned first, failed or not.
        """
        resolved = {w.id: w for w in warehouses} if warehouses is not None else None

        def chain(stops: Optional[list[int]]) -> list[Waypoint]:
            waypoints: list[Waypoint] = warehouse_chain(origin_id, destination_id, stops)
            if raw_origin is not None:
                waypoints.insert(0, raw_origin)
            if raw_destination is not None:
                waypoints.append(raw_destination)
            return waypoints

        if intermediate_ids:
            return [await self.builder.build(chain(intermediate_ids), resolved)]

        variants = [await self.builder.build(chain(None), resolved)]
        if not include_alternatives:
            return variants

        candidates = await self.nearest_to_route(origin_id, destination_id, warehouses)
        logger.info(
            f"Trying {len(candidates)} detour(s) for {origin_id} -> {destination_id}: {candidates}"
        )
        for candidate_id in candidates:
            variant = await self.builder.build(chain([candidate_id]), resolved)
            if variant.success:
                variants.append(variant)
            else:
                logger.info(f"Detour via {candidate_id} discarded: {variant.message}")
        return variants

    @staticmethod
    def successful(variants: Sequence[TentativeRoute]) -> list[TentativeRoute]:
        return [v for v in variants if v.success]

    @staticmethod
    def select_best(variants: Sequence[TentativeRoute]) -> Optional[TentativeRoute]:
        """Shortest successful variant; the first generated wins ties."""
        candidates = [v for v in variants if v.success]
        if not candidates:
            return None
        # min() keeps the first of equal keys
        return min(candidates, key=lambda v: v.total_distance_km)


def raw_endpoints(
    origin: Coordinate,
    destination: Coordinate,
) -> tuple[RawPoint, RawPoint]:
    """Raw waypoints for a request's pickup and delivery coordinates."""
    return (
        RawPoint(origin.latitude, origin.longitude),
        RawPoint(destination.latitude, destination.longitude, name=DESTINATION_POINT_NAME),
    )

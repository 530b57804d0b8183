"""
Route point reconciliation.

Turns the pickup or delivery point list of a route form into persisted route
points, and binds each order route status to the point it refers to. A status
refers to its point either by persisted id or, for points created in the same
request, by the client-issued temp id.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence
from tms_orders.core.exceptions import ContentApiError
from tms_orders.core.logging_config import logger
from tms_orders.crud import address_information as address_crud
from tms_orders.crud import order_route_status as route_status_crud
from tms_orders.crud import route_point as route_point_crud
from tms_orders.schemas.order import OrderRouteStatusInput
from tms_orders.schemas.route import RoutePointInput
from tms_orders.services.content_api import ContentApiClient


@dataclass
class SkippedPoint:
    index: int
    point_id: Optional[int]
    temp_id: Optional[str]
    reason: str


@dataclass
class ReconcileResult:
    """Persisted point ids in input order, plus the statuses bound to them."""
    point_ids: List[int] = field(default_factory=list)
    status_ids: List[int] = field(default_factory=list)
    skipped: List[SkippedPoint] = field(default_factory=list)


def find_matching_status(
    point: RoutePointInput,
    statuses: Sequence[OrderRouteStatusInput]
) -> Optional[OrderRouteStatusInput]:
    """Status referring to ``point`` by persisted id, else by temp id."""
    if point.id is not None:
        return next((s for s in statuses if s.route_point.id == point.id), None)
    return next(
        (s for s in statuses if s.route_point.id is None and s.route_point.temp_id == point.temp_id),
        None
    )


class RouteReconciler:
    """Upserts route points with their addresses and statuses, in order."""

    async def reconcile(
        self,
        client: ContentApiClient,
        points: Sequence[RoutePointInput],
        statuses: Sequence[OrderRouteStatusInput],
        organization_id: int,
        actor_id: int
    ) -> ReconcileResult:
        """
        Persist ``points`` one after another.

        Each point's display order is its 1-based position in ``points``.
        A point whose address cannot be saved is skipped and reported in the
        result; later points are still processed. Route point and status
        failures propagate.

        Args:
            client: Content API client
            points: Pickup or delivery points, in stop order
            statuses: Every route status of the order form
            organization_id: Organization scope
            actor_id: User recorded as creator/updater

        Returns:
            ReconcileResult with point ids aligned to input order (minus skips)
        """
        result = ReconcileResult()

        for index, point in enumerate(points):
            address_id = point.address.id if point.address else None

            if point.address is not None and point.address.has_data:
                try:
                    address = await address_crud.upsert_address(client, address=point.address, actor_id=actor_id)
                    address_id = int(address["id"]) if address.get("id") else None
                except ContentApiError as e:
                    logger.warning(
                        f"Skipping route point #{index + 1} (id={point.id}, temp_id={point.temp_id}): "
                        f"address could not be saved: {e.message}"
                    )
                    result.skipped.append(SkippedPoint(index, point.id, point.temp_id, e.message))
                    continue

            saved = await route_point_crud.upsert_route_point(
                client,
                point=point,
                organization_id=organization_id,
                address_id=address_id,
                display_order=index + 1,
                actor_id=actor_id
            )
            point_id = int(saved["id"])
            result.point_ids.append(point_id)

            status = find_matching_status(point, statuses)
            if status is None:
                continue

            saved_status = await route_status_crud.upsert_status(
                client,
                status_id=status.id,
                route_point_id=point_id,
                meta=status.meta,
                organization_id=organization_id,
                actor_id=actor_id
            )
            if saved_status.get("id"):
                result.status_ids.append(int(saved_status["id"]))

        return result


route_reconciler = RouteReconciler()

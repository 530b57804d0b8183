"""
Availability query for auto-dispatch.

A vehicle is a candidate for a new order unless one of its trips on another
order still occupies it during the new order's window. A trip occupies its
vehicle from its pickup date until it is delivered: the first DELIVERED
status closes the interval, otherwise the trip's own delivery date does.

Each candidate also carries its last known position before the window and
its trip count/driver cost over a trailing period, both computed from the
same trip history.
"""

from datetime import datetime
from typing import List, Optional
from sqlalchemy import Float, Integer, and_, func, literal_column, or_, select, union_all
from sqlalchemy.ext.asyncio import AsyncSession
from tms_orders.core.logging_config import logger
from tms_orders.models.enums import OrderStatusType, OrderTripStatusType
from tms_orders.models.order import Order, OrderTrip, OrderTripMessage, OrderTripStatus
from tms_orders.models.route import AddressInformation, RouteDeliveryPoint, RoutePoint
from tms_orders.models.vehicle import Vehicle
from tms_orders.schemas.dispatch import CandidateVehicle, DispatchWindow
from tms_orders.schemas.organization_setting import DispatchPeriod
from tms_orders.utils.dates import end_of_day, minus_period, start_of_day, utc_now

# Trip states that do not hold a vehicle
NON_BLOCKING_TRIP_STATUSES = (
    OrderTripStatusType.NEW.value,
    OrderTripStatusType.PENDING_CONFIRMATION.value,
    OrderTripStatusType.DELIVERED.value,
    OrderTripStatusType.COMPLETED.value,
)

CLOSED_TRIP_STATUSES = (
    OrderTripStatusType.DELIVERED.value,
    OrderTripStatusType.COMPLETED.value,
)


def delivered_at_subquery(name: str = "delivered"):
    """First DELIVERED status timestamp per trip."""
    return (
        select(
            OrderTripStatus.trip_id.label("trip_id"),
            func.min(OrderTripStatus.created_at).label("delivered_at")
        )
        .where(OrderTripStatus.type == OrderTripStatusType.DELIVERED.value)
        .group_by(OrderTripStatus.trip_id)
        .subquery(name)
    )


def live_order():
    """Orders that are not cancelled."""
    return or_(
        Order.last_status_type.is_(None),
        Order.last_status_type != OrderStatusType.CANCELED.value
    )


def published_trips():
    """Published trips of published orders, joined to their order."""
    return (
        select(OrderTrip.vehicle_id)
        .join(Order, Order.id == OrderTrip.order_id)
        .where(
            OrderTrip.published_at.isnot(None),
            Order.published_at.isnot(None),
            OrderTrip.vehicle_id.isnot(None)
        )
    )


class DispatchCandidateFinder:
    """Finds vehicles free for an order window, with location and trailing aggregates."""

    def blocked_vehicle_ids(self, organization_id: int, window: DispatchWindow, order_code: str):
        """Vehicles with an open trip overlapping ``window`` on another live order."""
        delivered = delivered_at_subquery("blocking_delivered")
        occupied_until = func.coalesce(delivered.c.delivered_at, OrderTrip.delivery_date)

        return (
            published_trips()
            .outerjoin(delivered, delivered.c.trip_id == OrderTrip.id)
            .where(
                OrderTrip.organization_id == organization_id,
                live_order(),
                Order.code != order_code,
                OrderTrip.last_status_type.isnot(None),
                OrderTrip.last_status_type.not_in(NON_BLOCKING_TRIP_STATUSES),
                or_(
                    OrderTrip.pickup_date.between(window.start, window.end),
                    and_(OrderTrip.pickup_date < window.start, occupied_until >= window.start)
                )
            )
        )

    def last_location_subquery(self, organization_id: int, before: datetime):
        """
        Last known position per vehicle, from history strictly before ``before``.

        A trip's position is its DELIVERED message coordinates, falling back
        to the address of the last delivery point on the order's route. Routes
        of unpublished or cancelled orders are not used as a fallback.
        """
        delivered = delivered_at_subquery("location_delivered")
        effective_at = func.coalesce(delivered.c.delivered_at, OrderTrip.delivery_date)

        message = (
            select(
                OrderTripMessage.trip_id.label("trip_id"),
                OrderTripMessage.latitude.label("latitude"),
                OrderTripMessage.longitude.label("longitude"),
                func.row_number().over(
                    partition_by=OrderTripMessage.trip_id,
                    order_by=(OrderTripMessage.created_at.desc(), OrderTripMessage.id.desc())
                ).label("rn")
            )
            .where(OrderTripMessage.type == OrderTripStatusType.DELIVERED.value)
            .subquery("delivered_message")
        )

        last_point = (
            select(
                RouteDeliveryPoint.route_id.label("route_id"),
                AddressInformation.latitude.label("latitude"),
                AddressInformation.longitude.label("longitude"),
                func.row_number().over(
                    partition_by=RouteDeliveryPoint.route_id,
                    order_by=(RouteDeliveryPoint.route_point_order.desc(), RouteDeliveryPoint.id.desc())
                ).label("rn")
            )
            .join(RoutePoint, RoutePoint.id == RouteDeliveryPoint.route_point_id)
            .join(AddressInformation, AddressInformation.id == RoutePoint.address_id)
            .subquery("last_delivery_point")
        )

        history = (
            select(
                OrderTrip.vehicle_id.label("vehicle_id"),
                func.coalesce(message.c.latitude, last_point.c.latitude).label("latitude"),
                func.coalesce(message.c.longitude, last_point.c.longitude).label("longitude"),
                func.row_number().over(
                    partition_by=OrderTrip.vehicle_id,
                    order_by=(effective_at.desc(), OrderTrip.id.desc())
                ).label("rn")
            )
            .join(Order, Order.id == OrderTrip.order_id)
            .outerjoin(delivered, delivered.c.trip_id == OrderTrip.id)
            .outerjoin(message, and_(message.c.trip_id == OrderTrip.id, message.c.rn == 1))
            .outerjoin(last_point, and_(
                last_point.c.route_id == Order.route_id,
                last_point.c.rn == 1,
                Order.published_at.isnot(None),
                live_order()
            ))
            .where(
                OrderTrip.organization_id == organization_id,
                OrderTrip.published_at.isnot(None),
                OrderTrip.vehicle_id.isnot(None),
                effective_at < before
            )
            .subquery("trip_history")
        )

        return (
            select(history.c.vehicle_id, history.c.latitude, history.c.longitude)
            .where(history.c.rn == 1)
            .subquery("last_location")
        )

    def trailing_aggregate_subquery(self, organization_id: int, period_start: datetime, period_end: datetime):
        """Driver cost sum and closed trip count per vehicle within the period, live orders only."""
        delivered = delivered_at_subquery("aggregate_delivered")
        effective_at = func.coalesce(delivered.c.delivered_at, OrderTrip.delivery_date)

        return (
            select(
                OrderTrip.vehicle_id.label("vehicle_id"),
                func.sum(OrderTrip.driver_cost).label("total_cost"),
                func.count(OrderTrip.id).label("total_trip")
            )
            .join(Order, Order.id == OrderTrip.order_id)
            .outerjoin(delivered, delivered.c.trip_id == OrderTrip.id)
            .where(
                OrderTrip.organization_id == organization_id,
                OrderTrip.published_at.isnot(None),
                OrderTrip.vehicle_id.isnot(None),
                Order.published_at.isnot(None),
                live_order(),
                or_(
                    delivered.c.delivered_at.isnot(None),
                    OrderTrip.last_status_type.in_(CLOSED_TRIP_STATUSES)
                ),
                effective_at.between(period_start, period_end)
            )
            .group_by(OrderTrip.vehicle_id)
            .subquery("trailing_aggregate")
        )

    def build_query(
        self,
        organization_id: int,
        window: DispatchWindow,
        order_code: str,
        period: DispatchPeriod,
        now: Optional[datetime] = None
    ):
        """
        Build the candidate statement.

        Args:
            organization_id: Organization scope
            window: New order's pickup/delivery window
            order_code: New order's code, so its own trips never block it
            period: Trailing period for the cost/trip aggregate
            now: Reference time of the trailing period (defaults to UTC now)
        """
        now = now or utc_now()
        period_start = start_of_day(minus_period(now, period.value, period.type))
        period_end = end_of_day(now)

        eligible = (
            Vehicle.organization_id == organization_id,
            Vehicle.published_at.isnot(None),
            Vehicle.is_active.is_(True),
            Vehicle.driver_id.isnot(None),
        )

        location = self.last_location_subquery(organization_id, window.start)
        aggregate = self.trailing_aggregate_subquery(organization_id, period_start, period_end)

        dispatched = (
            select(
                Vehicle.id.label("vehicle_id"),
                Vehicle.vehicle_number,
                Vehicle.ton_payload_capacity,
                Vehicle.cubic_meter_capacity,
                Vehicle.pallet_capacity,
                func.coalesce(location.c.latitude, 0).label("latitude"),
                func.coalesce(location.c.longitude, 0).label("longitude"),
                func.coalesce(aggregate.c.total_cost, 0).label("total_cost"),
                func.coalesce(aggregate.c.total_trip, 0).label("total_trip")
            )
            .outerjoin(location, location.c.vehicle_id == Vehicle.id)
            .outerjoin(aggregate, aggregate.c.vehicle_id == Vehicle.id)
            .where(
                *eligible,
                Vehicle.id.in_(published_trips()),
                Vehicle.id.not_in(self.blocked_vehicle_ids(organization_id, window, order_code))
            )
        )

        never_dispatched = (
            select(
                Vehicle.id.label("vehicle_id"),
                Vehicle.vehicle_number,
                Vehicle.ton_payload_capacity,
                Vehicle.cubic_meter_capacity,
                Vehicle.pallet_capacity,
                literal_column("0", Float).label("latitude"),
                literal_column("0", Float).label("longitude"),
                literal_column("0", Float).label("total_cost"),
                literal_column("0", Integer).label("total_trip")
            )
            .where(*eligible, Vehicle.id.not_in(published_trips()))
        )

        candidates = union_all(dispatched, never_dispatched).subquery("candidates")
        return select(candidates).order_by(candidates.c.vehicle_number, candidates.c.vehicle_id)

    async def find_candidates(
        self,
        db: AsyncSession,
        organization_id: int,
        window: DispatchWindow,
        order_code: str,
        period: DispatchPeriod,
        now: Optional[datetime] = None
    ) -> List[CandidateVehicle]:
        """
        Vehicles available for the order window.

        Returns:
            One CandidateVehicle per vehicle, ordered by vehicle number
        """
        stmt = self.build_query(organization_id, window, order_code, period, now=now)
        result = await db.execute(stmt)
        candidates = [CandidateVehicle.model_validate(dict(row._mapping)) for row in result]
        logger.info(
            f"Dispatch candidates for order {order_code}: {len(candidates)} vehicle(s), "
            f"window={window.start}..{window.end}, period={period.value} {period.type}"
        )
        return candidates


candidate_finder = DispatchCandidateFinder()

from typing import Any, Dict, List, Optional
import httpx
from tms_orders.core.config import settings
from tms_orders.core.logging_config import logger
from tms_orders.models.enums import UnitOfMeasureType
from tms_orders.schemas.common import Location
from tms_orders.schemas.dispatch import CandidateVehicle, DispatchOrder, DispatchResult
from tms_orders.utils.dates import format_end_of_day, format_start_of_day

SETTING_NOT_FOUND_MESSAGE = "Auto dispatch setting not found"
NO_MATCHING_VEHICLE_MESSAGE = "No matching vehicle found"
SUBMITTED_MESSAGE = "Auto dispatch request submitted"
SUBMIT_FAILED_MESSAGE = "Auto dispatch service is unavailable"

CAPACITY_FIELDS = {
    UnitOfMeasureType.TON.value: "ton_payload_capacity",
    UnitOfMeasureType.KILOGRAM.value: "ton_payload_capacity",
    UnitOfMeasureType.CUBIC_METER.value: "cubic_meter_capacity",
    UnitOfMeasureType.PALLET.value: "pallet_capacity",
}


def capacity_field(unit_type: Optional[str]) -> str:
    """Vehicle capacity attribute compared against the order's unit."""
    return CAPACITY_FIELDS.get(unit_type, "ton_payload_capacity")


def vehicle_capacity(vehicle: CandidateVehicle, unit_type: Optional[str]) -> float:
    """Capacity in the order's unit; payload is stored in tons, so kilograms scale by 1000."""
    capacity = getattr(vehicle, capacity_field(unit_type)) or 0
    if unit_type == UnitOfMeasureType.KILOGRAM.value:
        return capacity * 1000
    return capacity


def format_location(location: Optional[Location]) -> str:
    if location is None:
        return ""
    return f"{location.lat},{location.lng}"


def build_commodity(order: DispatchOrder, weight: Optional[float] = None) -> Dict[str, Any]:
    """
    Commodity descriptor of the order being dispatched.

    Args:
        order: Order snapshot
        weight: Remaining weight to dispatch, when only part of the order is left
    """
    unit = order.unit
    return {
        "order_id": order.id,
        "order_code": order.code,
        "receiving_time": format_start_of_day(order.order_date) if order.order_date else None,
        "delivery_time": format_end_of_day(order.delivery_date) if order.delivery_date else None,
        "commodity_type": unit.type if unit else None,
        "commodity_name": unit.name if unit else None,
        "commodity_weight": weight if weight is not None else order.weight,
        "receiving_location": format_location(order.pickup_location),
        "delivery_location": format_location(order.delivery_location),
        "customer_id": order.customer_id,
        "route_id": None,
        "area_id": None,
    }


def build_vehicle_list(candidates: List[CandidateVehicle], unit_type: Optional[str]) -> List[Dict[str, Any]]:
    return [
        {
            "license_plate": vehicle.vehicle_number,
            "capacity": vehicle_capacity(vehicle, unit_type),
            "current_location": f"{vehicle.latitude},{vehicle.longitude}" if vehicle.has_location else "",
            "activity_area": [],
            "activity_route": [],
            "assigned_customer": [],
            "trips_in_period": vehicle.total_trip,
        }
        for vehicle in candidates
    ]


class DispatchSubmitter:
    """
    Hands candidate vehicles to the external dispatch recommendation service.

    Submission is best effort: every failure is logged and reported as a
    warning result, never raised.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.url = url or settings.AUTO_DISPATCH_URL
        self.timeout = timeout or settings.AUTO_DISPATCH_TIMEOUT
        self.transport = transport

    async def submit(
        self,
        order: DispatchOrder,
        candidates: List[CandidateVehicle],
        priority_config: Optional[Dict[str, Any]],
        weight: Optional[float] = None
    ) -> DispatchResult:
        """
        Submit an order and its candidate vehicles for recommendation.

        Args:
            order: Order snapshot
            candidates: Vehicles returned by the candidate finder
            priority_config: Organization's raw auto-dispatch configuration
            weight: Remaining weight to dispatch, defaults to the order weight

        Returns:
            DispatchResult; warning colored unless the request was accepted
        """
        if not priority_config:
            logger.info(f"Auto dispatch skipped for order {order.code}: no setting")
            return DispatchResult(message=SETTING_NOT_FOUND_MESSAGE)

        if not candidates:
            logger.info(f"Auto dispatch skipped for order {order.code}: no candidate vehicle")
            return DispatchResult(message=NO_MATCHING_VEHICLE_MESSAGE)

        if not self.url:
            logger.warning("AUTO_DISPATCH_URL is not configured, auto dispatch request not sent")
            return DispatchResult(message=SUBMIT_FAILED_MESSAGE)

        unit_type = order.unit.type if order.unit else None
        payload = {
            "commodity": build_commodity(order, weight),
            "vehicle_list": build_vehicle_list(candidates, unit_type),
            "priority_item": priority_config,
        }

        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
                response = await client.post(self.url, json=payload)
                response.raise_for_status()
            logger.info(f"{self.url}: {response.text}")
        except Exception as e:
            logger.error(f"Auto dispatch request failed for order {order.code}: {type(e).__name__}: {str(e)}")
            return DispatchResult(message=SUBMIT_FAILED_MESSAGE)

        logger.info(f"Auto dispatch submitted for order {order.code} with {len(candidates)} vehicle(s)")
        return DispatchResult(message=SUBMITTED_MESSAGE, color="info")


dispatch_submitter = DispatchSubmitter()

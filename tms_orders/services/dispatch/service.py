from typing import Any, Dict, Optional
from fastapi import HTTPException, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from tms_orders.core.config import settings
from tms_orders.core.exceptions import OrderValidationError
from tms_orders.core.logging_config import logger
from tms_orders.crud import order as order_crud
from tms_orders.crud import organization_setting as setting_crud
from tms_orders.schemas.dispatch import DispatchOrder, DispatchResult, DispatchWindow
from tms_orders.schemas.organization_setting import DispatchPeriod
from tms_orders.services.content_api import ContentApiClient
from tms_orders.services.dispatch.candidate_finder import candidate_finder
from tms_orders.services.dispatch.submitter import SETTING_NOT_FOUND_MESSAGE, dispatch_submitter
from tms_orders.utils.dates import end_of_day, start_of_day


def read_period(priority_config: Dict[str, Any]) -> DispatchPeriod:
    """Trailing period from ``priority_trip_in_period.period``, or the default."""
    default = DispatchPeriod(
        value=settings.AUTO_DISPATCH_DEFAULT_PERIOD_VALUE,
        type=settings.AUTO_DISPATCH_DEFAULT_PERIOD_TYPE
    )
    period = (priority_config.get("priority_trip_in_period") or {}).get("period")
    if not period:
        return default
    try:
        return DispatchPeriod.model_validate(period)
    except ValidationError as e:
        logger.warning(f"Invalid auto dispatch period {period!r}, using default: {e.error_count()} error(s)")
        return default


class AutoDispatchService:
    """
    Recommendation pass for one order: find free vehicles, then submit them.

    Runs after an order is created and on demand. It never assigns
    vehicles itself.
    """

    def __init__(self):
        self.finder = candidate_finder
        self.submitter = dispatch_submitter

    async def auto_dispatch_vehicle(
        self,
        db: AsyncSession,
        client: ContentApiClient,
        organization_id: int,
        order_code: str,
        weight: Optional[float] = None
    ) -> DispatchResult:
        """
        Run auto-dispatch for an order.

        Args:
            db: Database session for the availability query
            client: Content API client
            organization_id: Organization scope
            order_code: Code of the order to dispatch
            weight: Remaining weight to dispatch, defaults to the order weight

        Returns:
            DispatchResult

        Raises:
            HTTPException 404: If the order does not exist
            OrderValidationError: If the order has no order/delivery date
        """
        record = await order_crud.get_dispatch_data(client, organization_id, order_code)
        if not record:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found"
            )

        priority_config = await setting_crud.get_auto_dispatch_setting(client, organization_id)
        if not priority_config:
            logger.info(f"Auto dispatch skipped for order {order_code}: no setting for organization {organization_id}")
            return DispatchResult(message=SETTING_NOT_FOUND_MESSAGE)

        order = DispatchOrder.from_content(order_code, record)
        if not order.order_date or not order.delivery_date:
            raise OrderValidationError("Auto dispatch requires both an order date and a delivery date")

        window = DispatchWindow(start=start_of_day(order.order_date), end=end_of_day(order.delivery_date))
        period = read_period(priority_config)

        candidates = await self.finder.find_candidates(db, organization_id, window, order_code, period)
        return await self.submitter.submit(order, candidates, priority_config, weight=weight)

    async def run_best_effort(
        self,
        db: AsyncSession,
        client: ContentApiClient,
        organization_id: int,
        order_code: str,
        weight: Optional[float] = None
    ) -> DispatchResult:
        """Same as auto_dispatch_vehicle, but any failure becomes a warning result."""
        try:
            return await self.auto_dispatch_vehicle(db, client, organization_id, order_code, weight=weight)
        except Exception as e:
            logger.error(f"Auto dispatch failed for order {order_code}: {type(e).__name__}: {str(e)}")
            return DispatchResult(message="Auto dispatch could not be completed")


auto_dispatch_service = AutoDispatchService()

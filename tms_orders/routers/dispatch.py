from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from tms_orders.database import get_db
from tms_orders.dependencies import get_content_client
from tms_orders.schemas.dispatch import DispatchResult
from tms_orders.services.content_api import ContentApiClient
from tms_orders.services.dispatch import auto_dispatch_service
from tms_orders.core.tenant_context import get_organization_id
from tms_orders.core.logging_config import logger

router = APIRouter()

@router.post("/{order_code}/auto-dispatch", response_model=DispatchResult, response_model_by_alias=True)
async def auto_dispatch(
    order_code: str,
    weight: Optional[float] = Query(None, ge=0),
    db: AsyncSession = Depends(get_db),
    client: ContentApiClient = Depends(get_content_client),
    _organization_id: int = Depends(get_organization_id)
):
    """
    Run auto-dispatch for an existing order on demand.

    Args:
        order_code: Code of the order
        weight: Remaining weight to dispatch (defaults to the order weight)

    Returns:
        Dispatch outcome; a failing recommendation service yields a warning, not an error
    """
    logger.info(f"Auto dispatch requested: order_code={order_code}, organization_id={_organization_id}")
    return await auto_dispatch_service.auto_dispatch_vehicle(
        db=db,
        client=client,
        organization_id=_organization_id,
        order_code=order_code,
        weight=weight
    )

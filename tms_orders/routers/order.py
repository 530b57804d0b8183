from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from tms_orders.database import get_db
from tms_orders.dependencies import get_content_client
from tms_orders.schemas.order import OrderCreate, OrderUpdate, OrderResponse
from tms_orders.services.content_api import ContentApiClient
from tms_orders.services.dispatch import auto_dispatch_service
from tms_orders.services.order import order_service
from tms_orders.core.tenant_context import get_organization_id, get_actor_id
from tms_orders.core.logging_config import logger

router = APIRouter()

@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    order_data: OrderCreate,
    db: AsyncSession = Depends(get_db),
    client: ContentApiClient = Depends(get_content_client),
    _organization_id: int = Depends(get_organization_id),
    _actor_id: int = Depends(get_actor_id)
):
    """
    Create an order together with its customer, route and route statuses.

    A non-draft order is immediately run through auto-dispatch. Dispatch
    problems are reported in ``dispatch`` and never fail the creation.

    Args:
        order_data: Order form
        db: Database session
        client: Content API client for the caller
        _organization_id: Organization context
        _actor_id: Creating user

    Returns:
        Created order id and code, plus the dispatch outcome
    """
    try:
        logger.info(f"Creating order: organization_id={_organization_id}, is_draft={order_data.is_draft}")
        created = await order_service.create_order(
            db=db,
            client=client,
            order_data=order_data,
            organization_id=_organization_id,
            actor_id=_actor_id
        )
    except Exception as e:
        logger.error(f"Error creating order: {type(e).__name__}: {str(e)}")
        raise

    dispatch = None
    if not order_data.is_draft:
        dispatch = await auto_dispatch_service.run_best_effort(
            db=db,
            client=client,
            organization_id=_organization_id,
            order_code=created["code"],
            weight=order_data.weight
        )

    return OrderResponse(id=created["id"], code=created["code"], dispatch=dispatch)


@router.put("/{order_id}", response_model=OrderResponse)
async def update_order(
    order_id: int,
    order_data: OrderUpdate,
    db: AsyncSession = Depends(get_db),
    client: ContentApiClient = Depends(get_content_client),
    _organization_id: int = Depends(get_organization_id),
    _actor_id: int = Depends(get_actor_id)
):
    """
    Update an order.

    ``last_customer`` and ``last_route`` must hold the references the order
    had when it was loaded; they decide whether the customer and route are
    reused, updated or created.
    """
    try:
        logger.info(f"Updating order: id={order_id}, organization_id={_organization_id}")
        updated = await order_service.update_order(
            db=db,
            client=client,
            order_id=order_id,
            order_data=order_data,
            organization_id=_organization_id,
            actor_id=_actor_id
        )
        return OrderResponse(id=updated["id"], code=updated["code"])
    except Exception as e:
        logger.error(f"Error updating order {order_id}: {type(e).__name__}: {str(e)}")
        raise

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from tms_orders.core.exceptions import ContentApiError, OrderValidationError
from tms_orders.core.logging_config import logger
from tms_orders.crud import bank_account as bank_account_crud
from tms_orders.crud import customer as customer_crud
from tms_orders.crud import order as order_crud
from tms_orders.crud import order_item as order_item_crud
from tms_orders.crud import order_participant as participant_crud
from tms_orders.crud import order_route_status as route_status_crud
from tms_orders.crud import order_status as order_status_crud
from tms_orders.crud import organization_setting as setting_crud
from tms_orders.crud import route as route_crud
from tms_orders.models.enums import CustomerType, OrderCodeGenerationType, OrderStatusType, RouteType
from tms_orders.schemas.customer import CustomerInput
from tms_orders.schemas.order import OrderBase, OrderCreate, OrderUpdate
from tms_orders.schemas.organization_setting import OrderCodeSetting
from tms_orders.schemas.route import RouteInput
from tms_orders.services.content_api import ContentApiClient
from tms_orders.services.order_code import OrderCodeGenerator
from tms_orders.services.route_reconciler import route_reconciler


class OrderService:
    """
    Service layer for order create/update.

    An order is saved as a sequence of per-entity writes (customer, route
    points, route, route statuses, order, items, participants, status). The
    content API commits each write on its own, so a failure partway leaves
    the earlier records in place; callers must not treat these operations
    as atomic.
    """

    def __init__(self):
        self.crud = order_crud
        self.reconciler = route_reconciler

    def _code_generator(self, db: AsyncSession, exclude_id: Optional[int] = None) -> OrderCodeGenerator:
        async def exists(organization_id: int, code: str) -> bool:
            return await self.crud.code_exists(db, organization_id, code, exclude_id=exclude_id)

        return OrderCodeGenerator(exists)

    async def _create_casual_customer(
        self,
        client: ContentApiClient,
        customer: CustomerInput,
        organization_id: int,
        actor_id: int
    ) -> Optional[int]:
        account = await bank_account_crud.create_bank_account(
            client, bank_account=customer.bank_account, actor_id=actor_id
        )
        created = await customer_crud.create_customer(
            client,
            customer=customer,
            organization_id=organization_id,
            bank_account_id=account.get("id"),
            actor_id=actor_id
        )
        logger.info(f"Casual customer created: id={created.get('id')}, organization_id={organization_id}")
        return int(created["id"]) if created.get("id") else None

    async def _save_non_fixed_route(
        self,
        client: ContentApiClient,
        route: RouteInput,
        order_data: OrderBase,
        customer_id: int,
        organization_id: int,
        actor_id: int
    ) -> Tuple[Optional[int], List[int]]:
        """
        Reconcile pickup then delivery points and save the route over them.

        Updates the route when it has an id, creates it otherwise.

        Returns:
            Tuple of (route id, route status ids)
        """
        pickup = await self.reconciler.reconcile(
            client, route.pickup_points, order_data.route_statuses, organization_id, actor_id
        )
        delivery = await self.reconciler.reconcile(
            client, route.delivery_points, order_data.route_statuses, organization_id, actor_id
        )
        for skipped in pickup.skipped + delivery.skipped:
            logger.warning(f"Route point not saved: index={skipped.index}, temp_id={skipped.temp_id}, reason={skipped.reason}")

        route_kwargs = dict(
            pickup_point_ids=pickup.point_ids,
            delivery_point_ids=delivery.point_ids,
            organization_id=organization_id,
            customer_id=customer_id,
            actor_id=actor_id
        )
        if route.id:
            saved = await route_crud.update_route(client, route=route, **route_kwargs)
        else:
            saved = await route_crud.create_route(client, route=route, **route_kwargs)

        route_id = int(saved["id"]) if saved.get("id") else route.id
        return route_id, pickup.status_ids + delivery.status_ids

    async def _upsert_fixed_route_statuses(
        self,
        client: ContentApiClient,
        order_data: OrderBase,
        organization_id: int,
        actor_id: int,
        current: Optional[List[Dict[str, Any]]] = None
    ) -> List[int]:
        """
        Save the route statuses of a fixed route.

        With ``current`` (statuses the order already has), a status for the
        same route point updates the existing record.
        """
        status_ids = []
        for status in order_data.route_statuses:
            if status.route_point.id is None:
                raise OrderValidationError("Route statuses of a fixed route must reference saved route points")

            status_id = status.id
            if status_id is None and current:
                existing = next(
                    (c for c in current
                     if str((c.get("routePoint") or {}).get("id")) == str(status.route_point.id)),
                    None
                )
                status_id = int(existing["id"]) if existing else None

            saved = await route_status_crud.upsert_status(
                client,
                status_id=status_id,
                route_point_id=status.route_point.id,
                meta=status.meta,
                organization_id=organization_id,
                actor_id=actor_id
            )
            if saved.get("id"):
                status_ids.append(int(saved["id"]))
        return status_ids

    def _order_fields(self, order_data: OrderBase, actor_id: int) -> Dict[str, Any]:
        return {
            "order_date": order_data.order_date or datetime.now(timezone.utc),
            "delivery_date": order_data.delivery_date,
            "unit": order_data.unit_id,
            "weight": order_data.weight,
            "cbm": order_data.cbm,
            "total_amount": order_data.total_amount,
            "payment_due_date": order_data.payment_due_date,
            "payment_date": order_data.payment_date,
            "notes": order_data.notes,
            "merchandise_types": order_data.merchandise_type_ids,
            "merchandise_note": order_data.merchandise_note,
            "meta": order_data.meta,
            "is_draft": order_data.is_draft,
            "updated_by_user": actor_id,
        }

    async def create_order(
        self,
        db: AsyncSession,
        client: ContentApiClient,
        order_data: OrderCreate,
        organization_id: int,
        actor_id: int
    ) -> Dict[str, Any]:
        """
        Create an order with its customer, route, statuses, items and participants.

        Args:
            db: Database session, used for the order code existence check
            client: Content API client carrying the caller's token
            order_data: Order form
            organization_id: Organization scope
            actor_id: User creating the order

        Returns:
            Created order record (``id`` and ``code``)

        Raises:
            OrderValidationError: If a required customer/route reference is missing
            OrderCodeExhaustedError: If no free order code was found
            ContentApiError: If any write fails (earlier writes are kept)
        """
        customer = order_data.customer
        route = order_data.route

        customer_id = None
        if customer is not None and customer.type == CustomerType.CASUAL:
            customer_id = await self._create_casual_customer(client, customer, organization_id, actor_id)
        elif customer is not None and customer.type == CustomerType.FIXED:
            if not customer.id:
                raise OrderValidationError("A fixed customer must be referenced by id")
            customer_id = customer.id

        route_id = None
        route_status_ids = []
        if route is not None and route.type == RouteType.NON_FIXED:
            if not customer_id:
                raise OrderValidationError("A non-fixed route requires a customer")
            route_id, route_status_ids = await self._save_non_fixed_route(
                client, route, order_data, customer_id, organization_id, actor_id
            )
        elif route is not None and route.type == RouteType.FIXED:
            if not route.id:
                raise OrderValidationError("A fixed route must be referenced by id")
            route_id = route.id
            route_status_ids = await self._upsert_fixed_route_statuses(client, order_data, organization_id, actor_id)

        setting = await setting_crud.get_order_code_setting(client, organization_id)
        prefix_length, seed = setting.prefix_for(
            customer.code if customer else None,
            route.code if route else None
        )
        code = await self._code_generator(db).generate_unique(
            organization_id,
            setting.order_code_generation_type,
            setting.order_code_max_length,
            prefix_length,
            seed
        )

        data = self._order_fields(order_data, actor_id)
        data.update({
            "organization_id": organization_id,
            "code": code,
            "customer": customer_id,
            "route": route_id,
            "route_statuses": route_status_ids,
            "last_status_type": None if order_data.is_draft else OrderStatusType.NEW,
            "created_by_user": actor_id,
        })
        created = await self.crud.create(client, data=data)
        if not created.get("id"):
            raise ContentApiError(message="Order was not created")
        order_id = int(created["id"])
        logger.info(f"Order created: id={order_id}, code={code}, organization_id={organization_id}")

        for item in order_data.items:
            await order_item_crud.upsert_item(
                client, item=item.model_copy(update={"id": None}), organization_id=organization_id, order_id=order_id
            )

        participant_ids = []
        for participant in order_data.participants:
            saved = await participant_crud.upsert_participant(
                client,
                participant=participant,
                participant_id=None,
                organization_id=organization_id,
                order_id=order_id,
                actor_id=actor_id
            )
            participant_ids.append(int(saved["id"]))
        if participant_ids:
            await self.crud.update_partial(
                client, id=order_id, data={"participants": participant_ids, "updated_by_user": actor_id}
            )

        if not order_data.is_draft:
            await order_status_crud.append_status(
                client, organization_id=organization_id, order_id=order_id, type=OrderStatusType.NEW, actor_id=actor_id
            )

        return {"id": order_id, "code": created.get("code") or code}

    async def update_order(
        self,
        db: AsyncSession,
        client: ContentApiClient,
        order_id: int,
        order_data: OrderUpdate,
        organization_id: int,
        actor_id: int
    ) -> Dict[str, Any]:
        """
        Update an order, re-resolving its customer and route.

        ``order_data.last_customer``/``last_route`` are the references the
        order had when the caller loaded it. The submitted customer and
        route decide what gets created, updated or reused:

        - same customer with id: reused, and updated when casual
        - same customer without id: created when casual
        - different customer: created when casual, referenced when fixed;
          the code is regenerated under the customer specific strategy
        - non-fixed route: points reconciled, route updated when it has an
          id and created otherwise
        - fixed route: referenced, statuses upserted against the order's
          current statuses

        Only the customer is compared with its last reference. A route with
        an id is updated or referenced and one without an id is created,
        whether or not it is the order's previous route.

        Returns:
            Updated order record (``id`` and ``code``)
        """
        customer = order_data.customer
        route = order_data.route
        is_same_customer = order_data.last_customer.id == (customer.id if customer else None)
        logger.info(
            f"Updating order {order_id}: same_customer={is_same_customer}, organization_id={organization_id}"
        )

        code = order_data.code
        customer_id = None
        if is_same_customer:
            if customer is not None and customer.id:
                customer_id = customer.id
                if customer.type == CustomerType.CASUAL:
                    await customer_crud.update_customer(
                        client, customer=customer, organization_id=organization_id, actor_id=actor_id
                    )
            elif customer is not None and customer.type == CustomerType.CASUAL:
                customer_id = await self._create_casual_customer(client, customer, organization_id, actor_id)
        else:
            if customer is not None and customer.type == CustomerType.CASUAL:
                customer_id = await self._create_casual_customer(client, customer, organization_id, actor_id)
            elif customer is not None and customer.type == CustomerType.FIXED:
                if not customer.id:
                    raise OrderValidationError("A fixed customer must be referenced by id")
                customer_id = customer.id

            setting: OrderCodeSetting = await setting_crud.get_order_code_setting(client, organization_id)
            if (setting.order_code_generation_type == OrderCodeGenerationType.CUSTOMER_SPECIFIC
                    and customer is not None and customer.code):
                code = await self._code_generator(db, exclude_id=order_id).generate_unique(
                    organization_id,
                    setting.order_code_generation_type,
                    setting.order_code_max_length,
                    setting.customer_code_prefix_max_length,
                    customer.code
                )
                logger.info(f"Order {order_id} code changed from {order_data.code} to {code}")

        route_id = None
        route_status_ids = []
        if route is not None and route.type == RouteType.NON_FIXED:
            if not customer_id:
                raise OrderValidationError("A non-fixed route requires a customer")
            route_id, route_status_ids = await self._save_non_fixed_route(
                client, route, order_data, customer_id, organization_id, actor_id
            )
        elif route is not None and route.type == RouteType.FIXED:
            if not route.id:
                raise OrderValidationError("A fixed route must be referenced by id")
            route_id = route.id
            current_statuses = await route_status_crud.get_by_order_id(client, order_id)
            route_status_ids = await self._upsert_fixed_route_statuses(
                client, order_data, organization_id, actor_id, current=current_statuses
            )

        current_participants = await participant_crud.get_by_order_id(client, organization_id, order_id)
        participant_ids = []
        for participant in order_data.participants:
            existing = next(
                (p for p in current_participants
                 if str((p.get("user") or {}).get("id")) == str(participant.user_id)),
                None
            )
            saved = await participant_crud.upsert_participant(
                client,
                participant=participant,
                participant_id=int(existing["id"]) if existing else None,
                organization_id=organization_id,
                order_id=order_id,
                actor_id=actor_id
            )
            participant_ids.append(int(saved["id"]))

        # First publish of a draft starts the status history
        publishing = not order_data.is_draft and order_data.last_status_type is None
        last_status_type = OrderStatusType.NEW if publishing else order_data.last_status_type

        data = self._order_fields(order_data, actor_id)
        data.update({
            "code": code,
            "customer": customer_id,
            "route": route_id,
            "route_statuses": route_status_ids,
            "participants": participant_ids,
            "last_status_type": last_status_type,
        })
        updated = await self.crud.update(client, id=order_id, data=data)

        for item in order_data.items:
            await order_item_crud.upsert_item(client, item=item, organization_id=organization_id, order_id=order_id)

        if publishing:
            await order_status_crud.append_status(
                client, organization_id=organization_id, order_id=order_id, type=OrderStatusType.NEW, actor_id=actor_id
            )

        logger.info(f"Order updated: id={order_id}, code={code}")
        return {"id": order_id, "code": updated.get("code") or code}


order_service = OrderService()

import pytest
from tms_orders.core.exceptions import ContentApiError, OrderValidationError
from tms_orders.models.enums import CustomerType, OrderStatusType, RouteType
from tms_orders.models.order import Order
from tms_orders.schemas.common import EntityRef
from tms_orders.schemas.customer import CustomerInput
from tms_orders.schemas.order import (
    OrderCreate,
    OrderItemInput,
    OrderParticipantInput,
    OrderRouteStatusInput,
    OrderUpdate,
)
from tms_orders.schemas.route import RouteInput, RoutePointInput, RoutePointRef
from tms_orders.services.order import OrderService


def casual_order(**overrides):
    data = dict(
        order_date="2024-01-12T00:00:00",
        delivery_date="2024-01-14T00:00:00",
        weight=1200,
        customer=CustomerInput(type=CustomerType.CASUAL, code="walkin", name="Walk-in"),
        route=RouteInput(
            type=RouteType.NON_FIXED,
            pickup_points=[RoutePointInput(temp_id="p1", name="Pickup")],
            delivery_points=[RoutePointInput(temp_id="d1", name="Drop")],
        ),
        route_statuses=[
            OrderRouteStatusInput(route_point=RoutePointRef(temp_id="p1")),
            OrderRouteStatusInput(route_point=RoutePointRef(temp_id="d1")),
        ],
        items=[OrderItemInput(name="Rice", quantity=10)],
        participants=[OrderParticipantInput(user_id=8)],
    )
    data.update(overrides)
    return OrderCreate(**data)


@pytest.mark.anyio
async def test_create_casual_order_runs_every_step_in_order(db, content_api, content_client):
    content_api.query_results["organizationSettings"] = [{
        "id": 1,
        "orderCodeGenerationType": "CUSTOMER_SPECIFIC",
        "orderCodeMaxLength": 10,
        "customerCodePrefixMaxLength": 5,
    }]

    created = await OrderService().create_order(db, content_client, casual_order(), organization_id=1, actor_id=2)

    assert content_api.operations() == [
        "createBankAccount",
        "createCustomer",
        "createRoutePoint",
        "createOrderRouteStatus",
        "createRoutePoint",
        "createOrderRouteStatus",
        "createRoute",
        "organizationSettings",
        "createOrder",
        "createOrderItem",
        "createOrderParticipant",
        "updateOrder",
        "createOrderStatus",
    ]
    order_data = content_api.operations("createOrder")[0]["data"]
    assert order_data["code"].startswith("WALKI")
    assert len(order_data["code"]) == 10
    assert order_data["lastStatusType"] == "NEW"
    assert len(order_data["routeStatuses"]) == 2
    assert created["code"] == order_data["code"]
    assert content_api.operations("updateOrder")[0]["data"]["participants"] == [
        int(created["id"]) + 2
    ]
    assert content_api.operations("createOrderStatus")[0]["data"]["type"] == "NEW"


@pytest.mark.anyio
async def test_draft_order_has_no_status(db, content_api, content_client):
    order = casual_order(is_draft=True, participants=[], items=[])

    await OrderService().create_order(db, content_client, order, organization_id=1, actor_id=2)

    assert "createOrderStatus" not in content_api.operations()
    assert "lastStatusType" not in content_api.operations("createOrder")[0]["data"]


@pytest.mark.anyio
async def test_create_skips_codes_already_taken(db, content_api, content_client):
    content_api.query_results["organizationSettings"] = [{
        "id": 1,
        "orderCodeGenerationType": "CUSTOMER_SPECIFIC",
        "orderCodeMaxLength": 3,
        "customerCodePrefixMaxLength": 2,
    }]
    db.add_all([Order(organization_id=1, code=f"WA{i}") for i in range(10)])
    await db.commit()

    created = await OrderService().create_order(
        db, content_client, casual_order(participants=[], items=[]), organization_id=1, actor_id=2
    )

    assert created["code"].startswith("WA")
    assert created["code"] not in {f"WA{i}" for i in range(10)}


@pytest.mark.anyio
async def test_fixed_route_reuses_route_and_creates_statuses(db, content_api, content_client):
    order = OrderCreate(
        customer=CustomerInput(type=CustomerType.FIXED, id=5, code="ACME"),
        route=RouteInput(id=9, type=RouteType.FIXED, code="R9"),
        route_statuses=[OrderRouteStatusInput(route_point=RoutePointRef(id=31), meta={"gate": "B"})],
    )

    await OrderService().create_order(db, content_client, order, organization_id=1, actor_id=2)

    assert "createRoute" not in content_api.operations()
    assert "createCustomer" not in content_api.operations()
    status_data = content_api.operations("createOrderRouteStatus")[0]["data"]
    assert status_data["routePoint"] == 31
    order_data = content_api.operations("createOrder")[0]["data"]
    assert order_data["customer"] == 5
    assert order_data["route"] == 9


@pytest.mark.anyio
async def test_create_without_returned_order_id_fails(db, content_api, content_client):
    content_api.empty_on.add("createOrder")
    order = casual_order(participants=[], items=[])

    with pytest.raises(ContentApiError) as exc_info:
        await OrderService().create_order(db, content_client, order, organization_id=1, actor_id=2)

    assert exc_info.value.message == "Order was not created"
    assert "createOrderStatus" not in content_api.operations()


@pytest.mark.anyio
async def test_fixed_customer_without_id_is_rejected(db, content_client):
    order = OrderCreate(customer=CustomerInput(type=CustomerType.FIXED))

    with pytest.raises(OrderValidationError):
        await OrderService().create_order(db, content_client, order, organization_id=1, actor_id=2)


@pytest.mark.anyio
async def test_non_fixed_route_without_customer_is_rejected(db, content_api, content_client):
    order = OrderCreate(route=RouteInput(type=RouteType.NON_FIXED))

    with pytest.raises(OrderValidationError):
        await OrderService().create_order(db, content_client, order, organization_id=1, actor_id=2)

    assert content_api.calls == []


def order_update(**overrides):
    data = dict(
        code="OLDCODE123",
        order_date="2024-01-12T00:00:00",
        customer=CustomerInput(type=CustomerType.FIXED, id=5, code="ACME"),
        route=RouteInput(id=9, type=RouteType.FIXED),
        last_customer=EntityRef(id=5),
        last_route=EntityRef(id=9),
        last_status_type=OrderStatusType.NEW,
    )
    data.update(overrides)
    return OrderUpdate(**data)


@pytest.mark.anyio
async def test_update_keeps_code_when_customer_unchanged(db, content_api, content_client):
    content_api.query_results["organizationSettings"] = [{"id": 1, "orderCodeGenerationType": "CUSTOMER_SPECIFIC"}]

    updated = await OrderService().update_order(db, content_client, 50, order_update(), organization_id=1, actor_id=2)

    assert updated["code"] == "OLDCODE123"
    assert "createOrderStatus" not in content_api.operations()


@pytest.mark.anyio
async def test_update_regenerates_code_when_customer_changes(db, content_api, content_client):
    content_api.query_results["organizationSettings"] = [{
        "id": 1,
        "orderCodeGenerationType": "CUSTOMER_SPECIFIC",
        "orderCodeMaxLength": 8,
        "customerCodePrefixMaxLength": 4,
    }]
    order = order_update(
        customer=CustomerInput(type=CustomerType.FIXED, id=6, code="beta"),
        last_customer=EntityRef(id=5),
    )

    updated = await OrderService().update_order(db, content_client, 50, order, organization_id=1, actor_id=2)

    assert updated["code"].startswith("BETA")
    assert len(updated["code"]) == 8
    assert content_api.operations("updateOrder")[0]["data"]["customer"] == 6


@pytest.mark.anyio
async def test_update_fixed_route_statuses_match_current_ones(db, content_api, content_client):
    content_api.query_results["orderRouteStatuses"] = [
        {"id": 70, "routePoint": {"data": {"id": "31"}}},
    ]
    order = order_update(route_statuses=[
        OrderRouteStatusInput(route_point=RoutePointRef(id=31)),
        OrderRouteStatusInput(route_point=RoutePointRef(id=32)),
    ])

    await OrderService().update_order(db, content_client, 50, order, organization_id=1, actor_id=2)

    assert content_api.operations("updateOrderRouteStatus")[0]["id"] == 70
    assert content_api.operations("createOrderRouteStatus")[0]["data"]["routePoint"] == 32
    assert sorted(content_api.operations("updateOrder")[0]["data"]["routeStatuses"]) == [70, 101]


@pytest.mark.anyio
async def test_update_non_fixed_route_with_id_updates_route(db, content_api, content_client):
    route = RouteInput(
        id=9,
        type=RouteType.NON_FIXED,
        pickup_points=[RoutePointInput(id=11, name="P")],
        delivery_points=[RoutePointInput(temp_id="new", name="D")],
    )

    await OrderService().update_order(db, content_client, 50, order_update(route=route), organization_id=1, actor_id=2)

    route_update = content_api.operations("updateRoute")[0]
    assert route_update["id"] == 9
    assert route_update["data"]["pickupPoints"] == [11]
    assert route_update["data"]["deliveryPoints"] == [101]
    assert "createRoute" not in content_api.operations()


@pytest.mark.anyio
async def test_update_upserts_participants_by_user(db, content_api, content_client):
    content_api.query_results["orderParticipants"] = [
        {"id": 60, "role": "VIEWER", "user": {"data": {"id": "8"}}},
    ]
    order = order_update(participants=[OrderParticipantInput(user_id=8), OrderParticipantInput(user_id=9)])

    await OrderService().update_order(db, content_client, 50, order, organization_id=1, actor_id=2)

    assert content_api.operations("updateOrderParticipant")[0]["id"] == 60
    assert content_api.operations("createOrderParticipant")[0]["data"]["user"] == 9
    assert content_api.operations("updateOrder")[0]["data"]["participants"] == [60, 101]


@pytest.mark.anyio
async def test_publishing_a_draft_appends_new_status(db, content_api, content_client):
    order = order_update(last_status_type=None, is_draft=False)

    await OrderService().update_order(db, content_client, 50, order, organization_id=1, actor_id=2)

    assert content_api.operations("updateOrder")[0]["data"]["lastStatusType"] == "NEW"
    assert content_api.operations("createOrderStatus")[0]["data"]["order"] == 50


@pytest.mark.anyio
async def test_update_same_casual_customer_with_id_updates_it(db, content_api, content_client):
    order = order_update(
        customer=CustomerInput(type=CustomerType.CASUAL, id=5, code="walkin", name="Walk-in Co"),
        last_customer=EntityRef(id=5),
    )

    await OrderService().update_order(db, content_client, 50, order, organization_id=1, actor_id=2)

    assert content_api.operations() == [
        "updateCustomer",
        "orderRouteStatuses",
        "orderParticipants",
        "updateOrder",
    ]
    customer_update = content_api.operations("updateCustomer")[0]
    assert customer_update["id"] == 5
    assert customer_update["data"]["name"] == "Walk-in Co"
    assert content_api.operations("updateOrder")[0]["data"]["customer"] == 5


@pytest.mark.anyio
async def test_update_same_casual_customer_without_id_creates_it(db, content_api, content_client):
    order = order_update(
        customer=CustomerInput(type=CustomerType.CASUAL, code="walkin", name="Walk-in"),
        last_customer=EntityRef(),
    )

    await OrderService().update_order(db, content_client, 50, order, organization_id=1, actor_id=2)

    assert content_api.operations() == [
        "createBankAccount",
        "createCustomer",
        "orderRouteStatuses",
        "orderParticipants",
        "updateOrder",
    ]
    assert content_api.operations("createCustomer")[0]["data"]["bankAccount"] == 101
    assert content_api.operations("updateOrder")[0]["data"]["customer"] == 102


@pytest.mark.anyio
async def test_update_different_casual_customer_creates_it(db, content_api, content_client):
    order = order_update(
        customer=CustomerInput(type=CustomerType.CASUAL, code="walkin", name="Walk-in"),
        last_customer=EntityRef(id=5),
    )

    updated = await OrderService().update_order(db, content_client, 50, order, organization_id=1, actor_id=2)

    assert content_api.operations() == [
        "createBankAccount",
        "createCustomer",
        "organizationSettings",
        "orderRouteStatuses",
        "orderParticipants",
        "updateOrder",
    ]
    assert content_api.operations("updateOrder")[0]["data"]["customer"] == 102
    assert updated["code"] == "OLDCODE123"


@pytest.mark.anyio
async def test_update_non_fixed_route_without_id_creates_route(db, content_api, content_client):
    route = RouteInput(
        type=RouteType.NON_FIXED,
        pickup_points=[RoutePointInput(temp_id="p1", name="P")],
        delivery_points=[RoutePointInput(temp_id="d1", name="D")],
    )

    await OrderService().update_order(db, content_client, 50, order_update(route=route), organization_id=1, actor_id=2)

    assert content_api.operations() == [
        "createRoutePoint",
        "createRoutePoint",
        "createRoute",
        "orderParticipants",
        "updateOrder",
    ]
    route_data = content_api.operations("createRoute")[0]["data"]
    assert route_data["pickupPoints"] == [101]
    assert route_data["deliveryPoints"] == [102]
    assert route_data["customerId"] == 5
    assert content_api.operations("updateOrder")[0]["data"]["route"] == 103

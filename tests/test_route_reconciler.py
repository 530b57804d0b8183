import pytest
from tms_orders.schemas.common import AddressInput
from tms_orders.schemas.order import OrderRouteStatusInput
from tms_orders.schemas.route import RoutePointInput, RoutePointRef
from tms_orders.services.route_reconciler import RouteReconciler, find_matching_status


def test_find_matching_status_by_id_and_temp_id():
    statuses = [
        OrderRouteStatusInput(route_point=RoutePointRef(id=5)),
        OrderRouteStatusInput(route_point=RoutePointRef(temp_id="t1")),
    ]

    assert find_matching_status(RoutePointInput(id=5), statuses) is statuses[0]
    assert find_matching_status(RoutePointInput(temp_id="t1"), statuses) is statuses[1]
    assert find_matching_status(RoutePointInput(temp_id="t2"), statuses) is None


def test_route_point_needs_a_reference():
    with pytest.raises(ValueError):
        RoutePointInput(name="Nowhere")


@pytest.mark.anyio
async def test_temp_id_status_is_bound_to_created_point(content_api, content_client):
    points = [RoutePointInput(temp_id="t1", name="Warehouse A")]
    statuses = [OrderRouteStatusInput(route_point=RoutePointRef(temp_id="t1"), meta={"dock": "3"})]

    result = await RouteReconciler().reconcile(content_client, points, statuses, organization_id=1, actor_id=2)

    created_point_id = result.point_ids[0]
    status_calls = content_api.operations("createOrderRouteStatus")
    assert len(status_calls) == 1
    status_data = status_calls[0]["data"]
    assert status_data["routePoint"] == created_point_id
    assert status_data["meta"] == {"dock": "3"}
    assert "tempId" not in status_data
    assert len(result.status_ids) == 1


@pytest.mark.anyio
async def test_display_order_follows_input_order(content_api, content_client):
    points = [
        RoutePointInput(temp_id="a", name="A"),
        RoutePointInput(id=40, name="B"),
        RoutePointInput(temp_id="c", name="C"),
    ]

    result = await RouteReconciler().reconcile(content_client, points, [], organization_id=1, actor_id=2)

    writes = [
        variables["data"]
        for operation, variables in content_api.calls
        if operation in ("createRoutePoint", "updateRoutePoint")
    ]
    assert [w["name"] for w in writes] == ["A", "B", "C"]
    assert [w["displayOrder"] for w in writes] == [1, 2, 3]
    assert result.point_ids[1] == 40
    assert len(result.point_ids) == 3
    assert result.status_ids == []


@pytest.mark.anyio
async def test_existing_point_updates_and_keeps_status_id(content_api, content_client):
    points = [RoutePointInput(id=40, name="B")]
    statuses = [OrderRouteStatusInput(id=77, route_point=RoutePointRef(id=40))]

    result = await RouteReconciler().reconcile(content_client, points, statuses, organization_id=1, actor_id=2)

    assert content_api.operations() == ["updateRoutePoint", "updateOrderRouteStatus"]
    update = content_api.operations("updateOrderRouteStatus")[0]
    assert update["id"] == 77
    assert update["data"]["routePoint"] == 40
    assert result.status_ids == [77]


@pytest.mark.anyio
async def test_address_is_saved_before_point(content_api, content_client):
    address = AddressInput(address_line1="1 Le Loi", latitude=10.77, longitude=106.7)
    points = [RoutePointInput(temp_id="a", address=address)]

    await RouteReconciler().reconcile(content_client, points, [], organization_id=1, actor_id=2)

    assert content_api.operations() == ["createAddressInformation", "createRoutePoint"]
    address_id = 101
    assert content_api.operations("createRoutePoint")[0]["data"]["address"] == address_id


@pytest.mark.anyio
async def test_failed_address_skips_only_that_point(content_api, content_client):
    content_api.fail_on.add("createAddressInformation")
    points = [
        RoutePointInput(temp_id="a", address=AddressInput(address_line1="Bad")),
        RoutePointInput(temp_id="b", name="No address"),
    ]

    result = await RouteReconciler().reconcile(content_client, points, [], organization_id=1, actor_id=2)

    assert len(result.point_ids) == 1
    assert len(result.skipped) == 1
    assert result.skipped[0].temp_id == "a"
    assert content_api.operations("createRoutePoint")[0]["data"]["name"] == "No address"

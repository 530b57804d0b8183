import random
import pytest
from tms_orders.core.exceptions import OrderCodeExhaustedError
from tms_orders.models.enums import OrderCodeGenerationType
from tms_orders.services.order_code import (
    RANDOM_UPPERCASE_CHARS,
    OrderCodeGenerator,
    generate_order_code,
    random_string,
)


def test_random_string_uses_uppercase_alphanumerics():
    value = random_string(50, random.Random(1))
    assert len(value) == 50
    assert set(value) <= set(RANDOM_UPPERCASE_CHARS)


def test_customer_specific_code_has_customer_prefix():
    code = generate_order_code(OrderCodeGenerationType.CUSTOMER_SPECIFIC, 10, 5, "ABCDEFG")
    assert code.startswith("ABCDE")
    assert len(code) == 10


def test_route_specific_code_trims_and_uppercases_route_code():
    code = generate_order_code(OrderCodeGenerationType.ROUTE_SPECIFIC, 8, 3, "  hcm-hn ")
    assert code.startswith("HCM")
    assert len(code) == 8


def test_prefix_longer_than_code_leaves_no_suffix():
    code = generate_order_code(OrderCodeGenerationType.CUSTOMER_SPECIFIC, 4, 6, "CUSTOMER")
    assert code == "CUSTOM"


def test_missing_lengths_fall_back_to_defaults():
    code = generate_order_code(OrderCodeGenerationType.CUSTOMER_SPECIFIC, None, None, "abcdefgh")
    assert code.startswith("ABCDE")
    assert len(code) == 10


def test_default_strategy_is_fully_random():
    code = generate_order_code(None, 12)
    assert len(code) == 12
    assert set(code) <= set(RANDOM_UPPERCASE_CHARS)


def test_prefixed_strategy_without_seed_is_random():
    assert len(generate_order_code(OrderCodeGenerationType.CUSTOMER_SPECIFIC, 10, 5, None)) == 10


@pytest.mark.anyio
async def test_generate_unique_skips_taken_codes():
    seen = []

    async def exists(organization_id, code):
        seen.append(code)
        return len(seen) < 3

    generator = OrderCodeGenerator(exists)
    code = await generator.generate_unique(1, OrderCodeGenerationType.CUSTOMER_SPECIFIC, 10, 5, "ABCDEFG")

    assert len(seen) == 3
    assert code == seen[-1]
    assert code.startswith("ABCDE")


@pytest.mark.anyio
async def test_generate_unique_never_returns_an_existing_code():
    taken = {f"AB{i}" for i in range(10)}

    async def exists(organization_id, code):
        return code in taken

    generator = OrderCodeGenerator(exists)
    for _ in range(20):
        code = await generator.generate_unique(1, OrderCodeGenerationType.CUSTOMER_SPECIFIC, 3, 2, "AB")
        assert code not in taken


@pytest.mark.anyio
async def test_generate_unique_gives_up_after_max_attempts():
    attempts = 0

    async def exists(organization_id, code):
        nonlocal attempts
        attempts += 1
        return True

    generator = OrderCodeGenerator(exists, max_attempts=5)
    with pytest.raises(OrderCodeExhaustedError) as exc_info:
        await generator.generate_unique(7, None, 10)

    assert attempts == 5
    assert exc_info.value.organization_id == 7

import random
import string
from typing import Awaitable, Callable, Optional
from tms_orders.core.config import settings
from tms_orders.core.exceptions import OrderCodeExhaustedError
from tms_orders.core.logging_config import logger
from tms_orders.models.enums import OrderCodeGenerationType

RANDOM_UPPERCASE_CHARS = string.ascii_uppercase + string.digits

_system_random = random.SystemRandom()


def random_string(length: int, rng: Optional[random.Random] = None) -> str:
    """Random uppercase alphanumeric string of the given length."""
    rng = rng or _system_random
    return "".join(rng.choice(RANDOM_UPPERCASE_CHARS) for _ in range(max(length, 0)))


def generate_order_code(
    strategy: Optional[OrderCodeGenerationType],
    max_length: Optional[int],
    prefix_max_length: Optional[int] = None,
    seed: Optional[str] = None,
    rng: Optional[random.Random] = None
) -> str:
    """
    Generate one order code candidate.

    Customer and route specific strategies prefix the code with the first
    ``prefix_max_length`` characters of the customer or route code, then pad
    with random characters up to ``max_length``. Any other strategy, or a
    prefixed strategy without a seed, yields a fully random code.

    Args:
        strategy: Organization's generation strategy
        max_length: Total code length (defaults to ORDER_CODE_MIN_LENGTH)
        prefix_max_length: Prefix length (defaults to CODE_PREFIX_MIN_LENGTH)
        seed: Customer or route code the prefix is taken from
        rng: Random source, mainly for tests

    Returns:
        Candidate code; uniqueness is not checked here
    """
    length = max_length or settings.ORDER_CODE_MIN_LENGTH
    prefixed = strategy in (OrderCodeGenerationType.CUSTOMER_SPECIFIC, OrderCodeGenerationType.ROUTE_SPECIFIC)

    if not prefixed or not seed:
        return random_string(length, rng)

    prefix = seed.strip()[:prefix_max_length or settings.CODE_PREFIX_MIN_LENGTH].upper()
    # A prefix at or above the total length leaves no room for a suffix
    return prefix + random_string(length - len(prefix), rng)


class OrderCodeGenerator:
    """
    Produces order codes that are free within an organization.

    Codes are checked against the store with an optimistic existence check;
    two concurrent requests may still pick the same code.
    """

    def __init__(
        self,
        exists: Callable[[int, str], Awaitable[bool]],
        max_attempts: Optional[int] = None
    ):
        """
        Args:
            exists: Async callable ``(organization_id, code) -> bool``
            max_attempts: Generation attempts before giving up
        """
        self.exists = exists
        self.max_attempts = max_attempts or settings.ORDER_CODE_MAX_ATTEMPTS

    async def generate_unique(
        self,
        organization_id: int,
        strategy: Optional[OrderCodeGenerationType],
        max_length: Optional[int],
        prefix_max_length: Optional[int] = None,
        seed: Optional[str] = None
    ) -> str:
        """
        Generate codes until one is not taken.

        Raises:
            OrderCodeExhaustedError: If every attempt collided
        """
        for attempt in range(1, self.max_attempts + 1):
            code = generate_order_code(strategy, max_length, prefix_max_length, seed)
            if not await self.exists(organization_id, code):
                if attempt > 1:
                    logger.info(f"Order code {code} found after {attempt} attempts (organization_id={organization_id})")
                return code

        logger.error(f"Order code space exhausted for organization_id={organization_id}, strategy={strategy}")
        raise OrderCodeExhaustedError(organization_id, self.max_attempts)

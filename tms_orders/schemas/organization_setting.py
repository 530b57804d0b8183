from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, Tuple
from tms_orders.models.enums import OrderCodeGenerationType

class OrderCodeSetting(BaseModel):
    """Organization settings that drive order code generation."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    order_code_generation_type: Optional[OrderCodeGenerationType] = None
    order_code_max_length: Optional[int] = None
    customer_code_prefix_max_length: Optional[int] = None
    route_code_prefix_max_length: Optional[int] = None

    def prefix_for(
        self,
        customer_code: Optional[str],
        route_code: Optional[str]
    ) -> Tuple[Optional[int], Optional[str]]:
        """Return (prefix max length, seed) for the configured strategy."""
        if self.order_code_generation_type == OrderCodeGenerationType.CUSTOMER_SPECIFIC:
            return self.customer_code_prefix_max_length, customer_code
        if self.order_code_generation_type == OrderCodeGenerationType.ROUTE_SPECIFIC:
            return self.route_code_prefix_max_length, route_code
        return None, None

class DispatchPeriod(BaseModel):
    value: int = 7
    type: str = "day"

    @field_validator("value")
    @classmethod
    def clamp_value(cls, value: int) -> int:
        return max(value, 0)

    @field_validator("type")
    @classmethod
    def known_unit(cls, value: str) -> str:
        return value if value in ("day", "week", "month") else "day"

from pydantic import BaseModel
from typing import Optional
from tms_orders.models.enums import CustomerType

class BankAccountInput(BaseModel):
    id: Optional[int] = None
    account_number: Optional[str] = None
    holder_name: Optional[str] = None
    bank_name: Optional[str] = None
    branch: Optional[str] = None

class CustomerInput(BaseModel):
    id: Optional[int] = None
    type: CustomerType = CustomerType.FIXED
    code: Optional[str] = None
    name: Optional[str] = None
    tax_code: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    contact_name: Optional[str] = None
    business_address: Optional[str] = None
    bank_account: Optional[BankAccountInput] = None

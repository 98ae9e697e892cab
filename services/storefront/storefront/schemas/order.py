from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional
from datetime import datetime

from storefront.models.product import MAX_STOCK


class CustomerInfo(BaseModel):
    first_name: str = Field(..., description="First name")
    last_name: str = Field(..., description="Last name")
    phone: str = Field(..., description="Phone number")
    address: Optional[str] = Field(None, description="Delivery address")

    @field_validator("first_name", "last_name", "phone")
    @classmethod
    def required_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("address")
    @classmethod
    def blank_address_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None


class CheckoutItem(BaseModel):
    product_id: int
    quantity: int = Field(..., ge=1, le=MAX_STOCK)


class CheckoutRequest(BaseModel):
    customer: CustomerInfo
    items: Optional[List[CheckoutItem]] = Field(
        None,
        description="Explicit lines (guest checkout). Omit to check out the authenticated user's cart."
    )


class OrderItem(BaseModel):
    product_id: int
    name: str
    price: int
    quantity: int
    line_total: int
    image_url: Optional[str] = None


class OrderResponse(BaseModel):
    id: str
    user_id: Optional[int] = None
    customer_first_name: str
    customer_last_name: str
    customer_phone: str
    customer_address: Optional[str] = None
    items: List[OrderItem]
    total: int
    currency: str
    whatsapp_url: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

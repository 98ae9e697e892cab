from pydantic import BaseModel, Field
from typing import List, Optional

from storefront.models.product import MAX_STOCK


class CartItemAdd(BaseModel):
    product_id: int
    quantity: int = Field(default=1, ge=1, le=MAX_STOCK, description="Units to add")


class CartItemUpdate(BaseModel):
    quantity: int = Field(..., le=MAX_STOCK, description="New quantity; 0 or less removes the line")


class CartLineResponse(BaseModel):
    product_id: int
    name: str
    price: int
    quantity: int
    line_total: int
    image_url: Optional[str] = None
    in_stock: bool


class CartResponse(BaseModel):
    items: List[CartLineResponse]
    item_count: int = Field(..., description="Sum of quantities")
    total: int

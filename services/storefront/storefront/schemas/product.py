from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

from storefront.models.product import MAX_STOCK


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=500, description="Product name")
    description: Optional[str] = Field(None, description="Product description")
    category: Optional[str] = Field(None, max_length=255, description="Category label")
    price: int = Field(..., gt=0, description="Price in whole currency units")
    currency: str = Field(default="XOF", pattern="^[A-Z]{3}$", description="Currency code (ISO 4217)")
    image_urls: Optional[List[str]] = Field(None, description="Image URLs, first one is the cover")
    stock: int = Field(default=0, le=MAX_STOCK, description="Initial stock (negative values are stored as 0)")
    status: str = Field(default="active", pattern="^(active|archived)$", description="Product status")


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=500, description="Product name")
    description: Optional[str] = Field(None, description="Product description")
    category: Optional[str] = Field(None, max_length=255, description="Category label")
    price: Optional[int] = Field(None, gt=0, description="Price in whole currency units")
    currency: Optional[str] = Field(None, pattern="^[A-Z]{3}$", description="Currency code (ISO 4217)")
    image_urls: Optional[List[str]] = Field(None, description="Image URLs")
    stock: Optional[int] = Field(None, le=MAX_STOCK, description="New stock; goes through the stock ledger")


class StockUpdate(BaseModel):
    stock: int = Field(..., le=MAX_STOCK, description="New stock level (clamped to 0)")


class StatusUpdate(BaseModel):
    status: str = Field(..., pattern="^(active|archived)$", description="New product status")


class ProductResponse(BaseModel):
    id: int = Field(..., description="Product ID")
    name: str = Field(..., description="Product name")
    description: Optional[str] = Field(None, description="Product description")
    category: Optional[str] = Field(None, description="Category label")
    price: int = Field(..., description="Price in whole currency units")
    currency: str = Field(..., description="Currency code")
    image_urls: List[str] = Field(default_factory=list, description="Image URLs")
    stock: int = Field(..., description="Units in stock")
    in_stock: bool = Field(..., description="Whether the product can be added to a cart")
    status: str = Field(..., description="Product status")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")
    deleted_at: Optional[datetime] = Field(None, description="Soft delete timestamp")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 7,
                "name": "Savon noir au karité",
                "description": "Savon artisanal",
                "category": "Soins du corps",
                "price": 3500,
                "currency": "XOF",
                "image_urls": ["https://cdn.belleza.example/savon-noir.jpg"],
                "stock": 3,
                "in_stock": True,
                "status": "active",
                "created_at": "2024-01-15T10:30:00Z",
                "updated_at": "2024-01-15T10:30:00Z",
                "deleted_at": None
            }
        }
    )


class ProductListResponse(BaseModel):
    products: List[ProductResponse]
    total: int
    page: int
    page_size: int
    has_next: bool


class StockUpdateResponse(BaseModel):
    product: ProductResponse
    previous_stock: int = Field(..., description="Stock before the update")
    replenished: bool = Field(..., description="True when stock crossed from zero to positive")
    notified_user_ids: List[int] = Field(default_factory=list, description="Users notified by this update")


class MessageResponse(BaseModel):
    message: str

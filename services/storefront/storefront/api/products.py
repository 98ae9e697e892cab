from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from storefront.db.database import get_db
from storefront.schemas.product import (
    ProductCreate, ProductUpdate, ProductResponse, ProductListResponse,
    StockUpdate, StatusUpdate, StockUpdateResponse, MessageResponse,
)
from storefront.auth.dependencies import get_optional_user, require_admin
from storefront.exceptions import NotFoundError, ValidationError
from storefront.models.user import User
from storefront.services.product_service import ProductService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/products",
    tags=["Products"]
)


def get_product_service(db: Session = Depends(get_db)) -> ProductService:
    """Dependency to get product service"""
    return ProductService(db)


@router.get(
    "",
    response_model=ProductListResponse,
    summary="Browse products",
    description="""
    Browse active products. This is a public endpoint - no authentication required.

    **Sorting:**
    - `newest` (default), `availability` (in stock first), `price_asc`, `price_desc`

    **Pagination:**
    - Default page size: 20, maximum: 100
    - Use `has_next` to determine if more pages exist
    """,
    responses={
        200: {"description": "List of products with pagination metadata"},
        400: {"description": "Unknown sort option"}
    }
)
async def browse_products(
    category: Optional[str] = Query(None, description="Filter by category label"),
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(20, ge=1, le=100, description="Number of items per page"),
    sort_by: str = Query("newest", description="newest, availability, price_asc or price_desc"),
    product_service: ProductService = Depends(get_product_service)
):
    """Browse active products (public endpoint)"""
    try:
        return product_service.list_active_products(
            category=category,
            page=page,
            page_size=page_size,
            sort_by=sort_by
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)


@router.get(
    "/all",
    response_model=List[ProductResponse],
    summary="List all products (admin only)",
    description="""
    List every product including archived and deleted ones.

    **Requirements:**
    - Authentication: Required (JWT token)
    - Role: admin
    """,
    responses={
        401: {"description": "Authentication required"},
        403: {"description": "Requires admin role"}
    }
)
async def list_all_products(
    status_filter: Optional[str] = Query(None, alias="status", pattern="^(active|archived|deleted)$", description="Filter by product status"),
    current_user: User = Depends(require_admin),
    product_service: ProductService = Depends(get_product_service)
):
    """List all products (admin only)"""
    products = product_service.list_all_products(status_filter=status_filter)
    return [product_service._product_to_response_dict(p) for p in products]


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Get product by ID",
    description="""
    Get product details by ID. Public endpoint; deleted products are only visible to admins.
    """,
    responses={
        200: {"description": "Product found"},
        404: {"description": "Product not found"}
    }
)
async def get_product(
    product_id: int,
    current_user: Optional[User] = Depends(get_optional_user),
    product_service: ProductService = Depends(get_product_service)
):
    """Get product by ID (public endpoint)"""
    include_deleted = bool(current_user and current_user.is_admin)
    try:
        product = product_service.get_product(product_id, include_deleted=include_deleted)
        return product_service._product_to_response_dict(product)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new product (admin only)",
    description="""
    Create a product. The id is assigned by the store and the status defaults to `active`.
    A negative initial stock is stored as 0.
    """,
    responses={
        201: {"description": "Product created successfully"},
        401: {"description": "Authentication required"},
        403: {"description": "Requires admin role"}
    }
)
async def create_product(
    product_data: ProductCreate,
    current_user: User = Depends(require_admin),
    product_service: ProductService = Depends(get_product_service)
):
    """Create a product (admin only)"""
    product = product_service.create_product(product_data)
    return product_service._product_to_response_dict(product)


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Update a product (admin only)",
    description="""
    Partial update: only provided fields change. A `stock` value is applied through the
    stock ledger, so a zero-to-positive change notifies users waiting for the product.
    """,
    responses={
        200: {"description": "Product updated successfully"},
        400: {"description": "Invalid field value"},
        401: {"description": "Authentication required"},
        403: {"description": "Requires admin role"},
        404: {"description": "Product not found"}
    }
)
async def update_product(
    product_id: int,
    product_data: ProductUpdate,
    current_user: User = Depends(require_admin),
    product_service: ProductService = Depends(get_product_service)
):
    """Update a product (admin only)"""
    try:
        product = product_service.update_product(product_id, product_data)
        return product_service._product_to_response_dict(product)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)


@router.put(
    "/{product_id}/stock",
    response_model=StockUpdateResponse,
    summary="Set product stock (admin only)",
    description="""
    Set a product's stock. Negative values are stored as 0.

    When stock goes from 0 to a positive value, every user who asked to be notified
    receives one notification and the product's reservations are cleared.
    """,
    responses={
        200: {"description": "Stock updated"},
        401: {"description": "Authentication required"},
        403: {"description": "Requires admin role"},
        404: {"description": "Product not found"},
        409: {"description": "Concurrent stock update in progress, retry"},
        503: {"description": "Storage unavailable"}
    }
)
async def set_product_stock(
    product_id: int,
    stock_update: StockUpdate,
    current_user: User = Depends(require_admin),
    product_service: ProductService = Depends(get_product_service)
):
    """Set stock through the inventory ledger (admin only)"""
    try:
        change = product_service.set_stock(product_id, stock_update.stock)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

    return {
        "product": product_service._product_to_response_dict(change.product),
        "previous_stock": change.previous_stock,
        "replenished": change.replenished,
        "notified_user_ids": change.notified_user_ids,
    }


@router.put(
    "/{product_id}/status",
    response_model=ProductResponse,
    summary="Activate or archive a product (admin only)",
    responses={
        200: {"description": "Status updated"},
        404: {"description": "Product not found"}
    }
)
async def update_product_status(
    product_id: int,
    status_update: StatusUpdate,
    current_user: User = Depends(require_admin),
    product_service: ProductService = Depends(get_product_service)
):
    try:
        product = product_service.update_status(product_id, status_update.status)
        return product_service._product_to_response_dict(product)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.delete(
    "/{product_id}",
    response_model=MessageResponse,
    summary="Soft delete a product (admin only)",
    description="""
    Marks the product deleted. It disappears from the storefront but keeps its record
    and can be restored.
    """,
    responses={
        200: {"description": "Product soft deleted"},
        404: {"description": "Product not found"}
    }
)
async def delete_product(
    product_id: int,
    current_user: User = Depends(require_admin),
    product_service: ProductService = Depends(get_product_service)
):
    try:
        product_service.delete_product(product_id)
        return {"message": "Product soft deleted"}
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.put(
    "/{product_id}/restore",
    response_model=ProductResponse,
    summary="Restore a deleted product (admin only)",
    responses={
        200: {"description": "Product restored"},
        404: {"description": "Product not found"}
    }
)
async def restore_product(
    product_id: int,
    current_user: User = Depends(require_admin),
    product_service: ProductService = Depends(get_product_service)
):
    try:
        product = product_service.restore_product(product_id)
        return product_service._product_to_response_dict(product)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.delete(
    "/{product_id}/permanent",
    response_model=MessageResponse,
    summary="Permanently delete a product (admin only)",
    description="""
    Removes the product record together with its reservations and cart lines.
    Past orders keep their item snapshots.
    """,
    responses={
        200: {"description": "Product permanently deleted"},
        404: {"description": "Product not found"}
    }
)
async def permanently_delete_product(
    product_id: int,
    current_user: User = Depends(require_admin),
    product_service: ProductService = Depends(get_product_service)
):
    try:
        product_service.permanently_delete_product(product_id)
        return {"message": "Product permanently deleted"}
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from storefront.db.database import get_db
from storefront.schemas.cart import CartItemAdd, CartItemUpdate, CartResponse
from storefront.auth.dependencies import get_current_user
from storefront.exceptions import ConflictError, NotFoundError
from storefront.models.user import User
from storefront.services.cart_service import CartService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/cart",
    tags=["Cart"]
)


def get_cart_service(db: Session = Depends(get_db)) -> CartService:
    """Dependency to get cart service"""
    return CartService(db)


@router.get(
    "",
    response_model=CartResponse,
    summary="Get my cart",
    responses={
        200: {"description": "Cart lines with totals"},
        401: {"description": "Authentication required"}
    }
)
async def get_cart(
    current_user: User = Depends(get_current_user),
    cart_service: CartService = Depends(get_cart_service)
):
    return cart_service.get_cart(current_user.id)


@router.post(
    "/items",
    response_model=CartResponse,
    summary="Add a product to my cart",
    description="""
    Add units of an active, in-stock product. Adding a product already in the cart
    increases its quantity.
    """,
    responses={
        200: {"description": "Updated cart"},
        401: {"description": "Authentication required"},
        404: {"description": "Product not found"},
        409: {"description": "Product is out of stock"}
    }
)
async def add_to_cart(
    payload: CartItemAdd,
    current_user: User = Depends(get_current_user),
    cart_service: CartService = Depends(get_cart_service)
):
    try:
        return cart_service.add_to_cart(current_user.id, payload.product_id, payload.quantity)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)


@router.put(
    "/items/{product_id}",
    response_model=CartResponse,
    summary="Change a line's quantity",
    description="A quantity of 0 or less removes the line.",
    responses={
        200: {"description": "Updated cart"},
        401: {"description": "Authentication required"},
        404: {"description": "Product is not in the cart"}
    }
)
async def update_cart_item(
    product_id: int,
    payload: CartItemUpdate,
    current_user: User = Depends(get_current_user),
    cart_service: CartService = Depends(get_cart_service)
):
    try:
        return cart_service.update_quantity(current_user.id, product_id, payload.quantity)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.delete(
    "/items/{product_id}",
    response_model=CartResponse,
    summary="Remove a product from my cart",
    responses={
        200: {"description": "Updated cart"},
        401: {"description": "Authentication required"}
    }
)
async def remove_cart_item(
    product_id: int,
    current_user: User = Depends(get_current_user),
    cart_service: CartService = Depends(get_cart_service)
):
    return cart_service.remove_from_cart(current_user.id, product_id)


@router.delete(
    "",
    response_model=CartResponse,
    summary="Empty my cart",
    responses={
        200: {"description": "Empty cart"},
        401: {"description": "Authentication required"}
    }
)
async def clear_cart(
    current_user: User = Depends(get_current_user),
    cart_service: CartService = Depends(get_cart_service)
):
    cart_service.clear_cart(current_user.id)
    return cart_service.get_cart(current_user.id)

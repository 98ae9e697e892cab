from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from storefront.db.database import get_db
from storefront.schemas.order import CheckoutRequest, OrderResponse
from storefront.auth.dependencies import get_current_user, get_optional_user, require_admin
from storefront.exceptions import ConflictError, NotFoundError, ValidationError
from storefront.models.user import User
from storefront.services.order_service import OrderService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/orders",
    tags=["Orders"]
)


def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    """Dependency to get order service"""
    return OrderService(db)


@router.post(
    "/checkout",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Check out via WhatsApp",
    description="""
    Record an order and return the WhatsApp link that sends it to the merchant.

    - Authenticated users may omit `items` to check out their cart; the cart is emptied.
    - Guests must send explicit `items`.
    - Every product must be active and in stock.
    """,
    responses={
        201: {"description": "Order recorded, `whatsapp_url` ready to open"},
        400: {"description": "Nothing to check out"},
        404: {"description": "Product not found"},
        409: {"description": "Product unavailable or out of stock"}
    }
)
async def checkout(
    payload: CheckoutRequest,
    current_user: Optional[User] = Depends(get_optional_user),
    order_service: OrderService = Depends(get_order_service)
):
    try:
        return order_service.checkout(payload, user=current_user)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)


@router.get(
    "",
    response_model=List[OrderResponse],
    summary="My order history",
    responses={
        200: {"description": "Orders of the authenticated user, newest first"},
        401: {"description": "Authentication required"}
    }
)
async def list_my_orders(
    current_user: User = Depends(get_current_user),
    order_service: OrderService = Depends(get_order_service)
):
    return order_service.list_orders_for_user(current_user.id)


@router.get(
    "/all",
    response_model=List[OrderResponse],
    summary="All orders (admin only)",
    responses={
        200: {"description": "Every order, newest first"},
        401: {"description": "Authentication required"},
        403: {"description": "Requires admin role"}
    }
)
async def list_all_orders(
    current_user: User = Depends(require_admin),
    order_service: OrderService = Depends(get_order_service)
):
    return order_service.list_all_orders()


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    summary="Get an order",
    description="Customers can only read their own orders; admins can read any.",
    responses={
        200: {"description": "Order found"},
        401: {"description": "Authentication required"},
        404: {"description": "Order not found"}
    }
)
async def get_order(
    order_id: str,
    current_user: User = Depends(get_current_user),
    order_service: OrderService = Depends(get_order_service)
):
    try:
        return order_service.get_order(order_id, current_user)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

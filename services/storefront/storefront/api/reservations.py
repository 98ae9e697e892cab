from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
import logging

from storefront.db.database import get_db
from storefront.schemas.reservation import (
    ReservationCreate, ReservationResponse, ReservationStatusResponse,
)
from storefront.schemas.product import MessageResponse
from storefront.auth.dependencies import get_current_user
from storefront.exceptions import NotFoundError
from storefront.models.user import User
from storefront.services.product_service import ProductService
from storefront.services.reservation_service import ReservationService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/reservations",
    tags=["Reservations"]
)


def get_reservation_service(db: Session = Depends(get_db)) -> ReservationService:
    """Dependency to get reservation service"""
    return ReservationService(db)


def get_product_service(db: Session = Depends(get_db)) -> ProductService:
    return ProductService(db)


@router.post(
    "",
    response_model=ReservationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Ask to be notified when a product is back in stock",
    description="""
    Record the authenticated user's interest in a product.

    Reserving the same product twice keeps a single reservation; the existing one is returned.
    When the product's stock goes from 0 to a positive value the user receives one
    notification and the reservation is cleared.

    **Requirements:**
    - Authentication: Required (JWT token)
    """,
    responses={
        201: {"description": "Reservation recorded"},
        401: {"description": "Authentication required"},
        404: {"description": "Product not found"}
    }
)
async def create_reservation(
    payload: ReservationCreate,
    current_user: User = Depends(get_current_user),
    reservation_service: ReservationService = Depends(get_reservation_service),
    product_service: ProductService = Depends(get_product_service)
):
    try:
        product_service.get_product(payload.product_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

    return reservation_service.reserve(payload.product_id, current_user.id)


@router.get(
    "",
    response_model=List[ReservationResponse],
    summary="List my reservations",
    responses={
        200: {"description": "Pending reservations of the authenticated user"},
        401: {"description": "Authentication required"}
    }
)
async def list_my_reservations(
    current_user: User = Depends(get_current_user),
    reservation_service: ReservationService = Depends(get_reservation_service)
):
    return reservation_service.list_for_user(current_user.id)


@router.get(
    "/{product_id}",
    response_model=ReservationStatusResponse,
    summary="Check whether I am waiting for a product",
    responses={
        200: {"description": "Reservation status"},
        401: {"description": "Authentication required"}
    }
)
async def reservation_status(
    product_id: int,
    current_user: User = Depends(get_current_user),
    reservation_service: ReservationService = Depends(get_reservation_service)
):
    return {
        "product_id": product_id,
        "reserved": reservation_service.has_reserved(product_id, current_user.id),
    }


@router.delete(
    "/{product_id}",
    response_model=MessageResponse,
    summary="Cancel my reservation for a product",
    responses={
        200: {"description": "Reservation cancelled"},
        401: {"description": "Authentication required"},
        404: {"description": "No reservation for this product"}
    }
)
async def cancel_reservation(
    product_id: int,
    current_user: User = Depends(get_current_user),
    reservation_service: ReservationService = Depends(get_reservation_service)
):
    if not reservation_service.cancel_reservation(product_id, current_user.id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Reservation not found"
        )
    return {"message": "Reservation cancelled"}

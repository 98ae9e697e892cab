from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import List
import logging

from storefront.models.reservation import Reservation

logger = logging.getLogger(__name__)


class ReservationService:
    """Reservation registry: who is waiting for which out-of-stock product.

    Product existence is the caller's responsibility. `commit=False` lets the
    stock ledger fold a clear into its own transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def _find(self, product_id: int, user_id: int):
        return self.db.query(Reservation).filter(
            Reservation.product_id == product_id,
            Reservation.user_id == user_id
        ).first()

    def reserve(self, product_id: int, user_id: int) -> Reservation:
        """Record a reservation; an existing one for the pair is returned unchanged"""
        existing = self._find(product_id, user_id)
        if existing:
            logger.debug(f"User {user_id} already reserved product {product_id}")
            return existing

        reservation = Reservation(product_id=product_id, user_id=user_id)
        self.db.add(reservation)
        try:
            self.db.commit()
        except IntegrityError:
            # A concurrent request inserted the same pair first
            self.db.rollback()
            existing = self._find(product_id, user_id)
            if existing is None:
                raise
            return existing

        self.db.refresh(reservation)
        logger.info(f"User {user_id} reserved product {product_id}")
        return reservation

    def reservations_for(self, product_id: int) -> List[Reservation]:
        return self.db.query(Reservation).filter(
            Reservation.product_id == product_id
        ).all()

    def list_for_user(self, user_id: int) -> List[Reservation]:
        return self.db.query(Reservation).filter(
            Reservation.user_id == user_id
        ).order_by(Reservation.created_at.desc(), Reservation.id.desc()).all()

    def has_reserved(self, product_id: int, user_id: int) -> bool:
        return self._find(product_id, user_id) is not None

    def clear_reservations(self, product_id: int, commit: bool = True) -> int:
        """Remove every reservation for the product; returns how many were removed"""
        removed = self.db.query(Reservation).filter(
            Reservation.product_id == product_id
        ).delete(synchronize_session=False)
        if commit:
            self.db.commit()
        if removed:
            logger.info(f"Cleared {removed} reservations for product {product_id}")
        return removed

    def cancel_reservation(self, product_id: int, user_id: int) -> bool:
        """Per-user cancel; returns False when there was nothing to cancel"""
        removed = self.db.query(Reservation).filter(
            Reservation.product_id == product_id,
            Reservation.user_id == user_id
        ).delete(synchronize_session=False)
        self.db.commit()
        if removed:
            logger.info(f"User {user_id} cancelled reservation for product {product_id}")
        return bool(removed)

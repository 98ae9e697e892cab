"""Inventory ledger: the only writer of Product.stock.

Setting stock clamps to zero and, when stock crosses from zero to a
positive value, notifies every user holding a reservation for the product
and clears those reservations. The whole read-modify-write-notify sequence
is serialized per product: a process-local lock plus a row lock
(SELECT ... FOR UPDATE) where the backend supports it.

Notifications are written only after the stock write is committed. If the
notification transaction fails it is rolled back (reservations are kept
for the next transition) and the stock write stands.
"""
from dataclasses import dataclass, field
from typing import Callable, List
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.config import settings
from storefront.db.locks import product_locks
from storefront.exceptions import NotFoundError, StorageFailureError
from storefront.kafka.producer import event_producer
from storefront.models.notification import Notification
from storefront.models.product import MAX_STOCK, Product
from storefront.services.notification_service import NotificationService
from storefront.services.reservation_service import ReservationService

logger = logging.getLogger(__name__)


@dataclass
class StockChange:
    product: Product
    previous_stock: int
    stock: int
    notifications: List[Notification] = field(default_factory=list)

    @property
    def replenished(self) -> bool:
        return self.previous_stock <= 0 and self.stock > 0

    @property
    def notified_user_ids(self) -> List[int]:
        return [n.user_id for n in self.notifications]


def back_in_stock_message(product_name: str) -> str:
    return settings.back_in_stock_message.format(product_name=product_name)


class InventoryService:
    """Service layer for stock mutations"""

    def __init__(self, db: Session):
        self.db = db
        self.reservations = ReservationService(db)
        self.notifications = NotificationService(db)

    def set_stock(self, product_id: int, new_stock: int) -> StockChange:
        """Set a product's stock to max(0, new_stock)"""
        return self._apply(product_id, lambda previous: new_stock)

    def adjust_stock(self, product_id: int, delta: int) -> StockChange:
        """Add `delta` (may be negative) to the current stock, clamped at 0"""
        return self._apply(product_id, lambda previous: previous + delta)

    def _apply(self, product_id: int, compute: Callable[[int], int]) -> StockChange:
        with product_locks.hold(product_id, timeout=settings.stock_lock_timeout_seconds):
            product, previous_stock, safe_stock = self._write_stock(product_id, compute)
            product_name = product.name

            change = StockChange(product=product, previous_stock=previous_stock, stock=safe_stock)
            if change.replenished:
                change.notifications = self._notify_waiting_users(product_id, product_name)

        logger.info(
            f"Stock for product {product_id} set {previous_stock} -> {safe_stock}"
            + (f", notified {len(change.notifications)} users" if change.notifications else "")
        )

        event_producer.publish_stock_updated(
            product_id=product_id,
            previous_stock=previous_stock,
            stock=safe_stock
        )
        if change.notifications:
            event_producer.publish_back_in_stock(
                product_id=product_id,
                name=product_name,
                notified_user_ids=change.notified_user_ids
            )
        return change

    def _write_stock(self, product_id: int, compute: Callable[[int], int]):
        try:
            product = self.db.query(Product).filter(
                Product.id == product_id
            ).with_for_update().first()

            if not product:
                self.db.rollback()
                raise NotFoundError("Product not found", product_id=product_id)

            previous_stock = product.stock or 0
            safe_stock = min(MAX_STOCK, max(0, int(compute(previous_stock))))
            product.stock = safe_stock
            self.db.commit()
        except SQLAlchemyError as e:
            self._rollback_quietly()
            logger.error(f"Failed to write stock for product {product_id}: {e}", exc_info=True)
            raise StorageFailureError("Failed to update stock", product_id=product_id) from e

        self.db.refresh(product)
        return product, previous_stock, safe_stock

    def _notify_waiting_users(self, product_id: int, product_name: str) -> List[Notification]:
        """Replenishment trigger: one notification per reservation, then clear them.

        Runs after the stock write has committed, so any storage error here is
        logged and swallowed; the reservations stay for the next transition.
        """
        message = back_in_stock_message(product_name)
        try:
            reservations = self.reservations.reservations_for(product_id)
            if not reservations:
                return []

            notifications = [
                self.notifications.create(
                    user_id=reservation.user_id,
                    product_id=product_id,
                    message=message,
                    commit=False
                )
                for reservation in reservations
            ]
            self.reservations.clear_reservations(product_id, commit=False)
            self.db.commit()
        except SQLAlchemyError as e:
            self._rollback_quietly()
            logger.error(
                f"Stock for product {product_id} was updated but back-in-stock notifications failed; "
                f"reservations kept: {e}",
                exc_info=True
            )
            return []

        logger.info(f"Product {product_id} back in stock, notified {len(notifications)} users")
        return notifications

    def _rollback_quietly(self):
        try:
            self.db.rollback()
        except SQLAlchemyError as e:
            logger.error(f"Rollback failed: {e}")

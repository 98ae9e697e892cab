from sqlalchemy.orm import Session, joinedload
from typing import List
import logging

from storefront.exceptions import ConflictError, NotFoundError
from storefront.models.cart import CartItem
from storefront.models.product import Product

logger = logging.getLogger(__name__)


class CartService:
    """Server-side cart, one line per (user, product)"""

    def __init__(self, db: Session):
        self.db = db

    def _lines(self, user_id: int) -> List[CartItem]:
        return self.db.query(CartItem).options(joinedload(CartItem.product)).filter(
            CartItem.user_id == user_id
        ).order_by(CartItem.added_at.asc(), CartItem.id.asc()).all()

    def _line(self, user_id: int, product_id: int):
        return self.db.query(CartItem).filter(
            CartItem.user_id == user_id,
            CartItem.product_id == product_id
        ).first()

    def get_cart(self, user_id: int) -> dict:
        lines = []
        for item in self._lines(user_id):
            product = item.product
            lines.append({
                "product_id": product.id,
                "name": product.name,
                "price": product.price,
                "quantity": item.quantity,
                "line_total": product.price * item.quantity,
                "image_url": product.cover_image_url,
                "in_stock": product.in_stock,
            })
        return {
            "items": lines,
            "item_count": sum(line["quantity"] for line in lines),
            "total": sum(line["line_total"] for line in lines),
        }

    def add_to_cart(self, user_id: int, product_id: int, quantity: int = 1) -> dict:
        """Add units of an in-stock product; existing lines are incremented without a stock ceiling"""
        product = self.db.query(Product).filter(
            Product.id == product_id,
            Product.status == "active"
        ).first()
        if not product:
            raise NotFoundError("Product not found", product_id=product_id)
        if not product.in_stock:
            raise ConflictError("Product is out of stock", code="OUT_OF_STOCK", product_id=product_id)

        line = self._line(user_id, product_id)
        if line:
            line.quantity += quantity
        else:
            self.db.add(CartItem(user_id=user_id, product_id=product_id, quantity=quantity))
        self.db.commit()

        logger.debug(f"User {user_id} added {quantity} x product {product_id} to cart")
        return self.get_cart(user_id)

    def update_quantity(self, user_id: int, product_id: int, quantity: int) -> dict:
        """Set a line's quantity; zero or less removes it"""
        if quantity <= 0:
            return self.remove_from_cart(user_id, product_id)

        line = self._line(user_id, product_id)
        if not line:
            raise NotFoundError("Product is not in the cart", product_id=product_id)
        line.quantity = quantity
        self.db.commit()
        return self.get_cart(user_id)

    def remove_from_cart(self, user_id: int, product_id: int) -> dict:
        self.db.query(CartItem).filter(
            CartItem.user_id == user_id,
            CartItem.product_id == product_id
        ).delete(synchronize_session=False)
        self.db.commit()
        return self.get_cart(user_id)

    def clear_cart(self, user_id: int, commit: bool = True) -> None:
        self.db.query(CartItem).filter(
            CartItem.user_id == user_id
        ).delete(synchronize_session=False)
        if commit:
            self.db.commit()

from sqlalchemy.orm import Session
from typing import Dict, List, Optional
from urllib.parse import quote
import logging
import uuid

from storefront.config import settings
from storefront.exceptions import ConflictError, NotFoundError, ValidationError
from storefront.kafka.producer import event_producer
from storefront.models.cart import CartItem
from storefront.models.order import Order
from storefront.models.product import Product
from storefront.models.user import User
from storefront.schemas.order import CheckoutRequest, CustomerInfo
from storefront.services.cart_service import CartService

logger = logging.getLogger(__name__)

SEPARATOR = "-----------------------------"
CLOSING_MESSAGE = (
    "Merci de confirmer la commande et de me communiquer les modalités de paiement et de livraison."
)
# encodeURIComponent leaves these unescaped; wa.me links are built the same way by the web client
URI_COMPONENT_SAFE = "-_.!~*'()"


def format_amount(amount: int) -> str:
    """French grouping (narrow no-break space) followed by the currency label"""
    grouped = f"{amount:,}".replace(",", "\u202f")
    return f"{grouped} {settings.currency_label}"


def build_order_message(customer: CustomerInfo, lines: List[dict], total: int) -> str:
    """Compose the WhatsApp order message sent to the merchant"""
    customer_info = [
        "*Nouvelle Commande de Belleza*",
        SEPARATOR,
        f"*Client:* {customer.first_name} {customer.last_name}",
        f"*Téléphone:* {customer.phone}",
    ]
    if customer.address:
        customer_info.append(f"*Adresse:* {customer.address}")
    customer_info.append(SEPARATOR)

    base_url = settings.storefront_base_url.rstrip("/")
    order_items = []
    for line in lines:
        item = [
            f"*{line['name']}* (x{line['quantity']})",
            f"- Prix: {format_amount(line['line_total'])}",
            f"- Lien du produit: {base_url}/product/{line['product_id']}",
        ]
        if line.get("image_url"):
            item.append(f"- Lien de l'image: {line['image_url']}")
        order_items.append("\n".join(item))

    return (
        "\n".join(customer_info)
        + "\n\n*Détails de la commande:*\n\n"
        + "\n\n".join(order_items)
        + f"\n\n{SEPARATOR}\n*TOTAL: {format_amount(total)}*\n\n{CLOSING_MESSAGE}"
    )


def build_whatsapp_url(message: str) -> str:
    return f"https://wa.me/{settings.merchant_whatsapp_number}?text={quote(message, safe=URI_COMPONENT_SAFE)}"


class OrderService:
    """Checkout via WhatsApp and order history"""

    def __init__(self, db: Session):
        self.db = db
        self.cart = CartService(db)

    def _requested_quantities(self, request: CheckoutRequest, user: Optional[User]) -> Dict[int, int]:
        quantities: Dict[int, int] = {}
        if request.items:
            for item in request.items:
                quantities[item.product_id] = quantities.get(item.product_id, 0) + item.quantity
        elif user is not None:
            for item in self.db.query(CartItem).filter(CartItem.user_id == user.id).order_by(CartItem.id.asc()):
                quantities[item.product_id] = item.quantity
        return quantities

    def _snapshot_lines(self, quantities: Dict[int, int]) -> List[dict]:
        products = {
            p.id: p for p in self.db.query(Product).filter(Product.id.in_(list(quantities))).all()
        }
        lines = []
        for product_id, quantity in quantities.items():
            product = products.get(product_id)
            if product is None or product.status == "deleted":
                raise NotFoundError("Product not found", product_id=product_id)
            if product.status != "active":
                raise ConflictError("Product is not available", code="PRODUCT_UNAVAILABLE", product_id=product_id)
            if not product.in_stock:
                raise ConflictError("Product is out of stock", code="OUT_OF_STOCK", product_id=product_id)
            lines.append({
                "product_id": product.id,
                "name": product.name,
                "price": product.price,
                "quantity": quantity,
                "line_total": product.price * quantity,
                "image_url": product.cover_image_url,
            })
        return lines

    def checkout(self, request: CheckoutRequest, user: Optional[User] = None) -> Order:
        """Persist an order snapshot and build the WhatsApp link for the merchant"""
        from_cart = not request.items
        quantities = self._requested_quantities(request, user)
        if not quantities:
            raise ValidationError("There are no items to check out", code="EMPTY_ORDER")

        lines = self._snapshot_lines(quantities)
        total = sum(line["line_total"] for line in lines)
        message = build_order_message(request.customer, lines, total)

        order = Order(
            id=f"order-{uuid.uuid4().hex}",
            user_id=user.id if user else None,
            customer_first_name=request.customer.first_name,
            customer_last_name=request.customer.last_name,
            customer_phone=request.customer.phone,
            customer_address=request.customer.address,
            items=lines,
            total=total,
            currency=settings.currency_code,
            whatsapp_url=build_whatsapp_url(message),
        )
        self.db.add(order)
        if from_cart and user is not None:
            self.cart.clear_cart(user.id, commit=False)
        self.db.commit()
        self.db.refresh(order)

        logger.info(f"Order {order.id} placed ({len(lines)} lines, total {total}) by user {order.user_id}")
        event_producer.publish_order_placed(
            order_id=order.id,
            user_id=order.user_id,
            total=total,
            item_count=sum(line["quantity"] for line in lines)
        )
        return order

    def list_orders_for_user(self, user_id: int) -> List[Order]:
        return self.db.query(Order).filter(
            Order.user_id == user_id
        ).order_by(Order.created_at.desc()).all()

    def list_all_orders(self) -> List[Order]:
        return self.db.query(Order).order_by(Order.created_at.desc()).all()

    def get_order(self, order_id: str, user: User) -> Order:
        order = self.db.query(Order).filter(Order.id == order_id).first()
        # Someone else's order is reported as missing
        if not order or (not user.is_admin and order.user_id != user.id):
            raise NotFoundError("Order not found", order_id=order_id)
        return order

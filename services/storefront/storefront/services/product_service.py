from sqlalchemy.orm import Session
from sqlalchemy import case
from typing import List, Optional
from datetime import datetime, timezone
import logging

from storefront.exceptions import NotFoundError, ValidationError
from storefront.models.cart import CartItem
from storefront.models.product import Product
from storefront.schemas.product import ProductCreate, ProductUpdate, ProductListResponse
from storefront.services.inventory_service import InventoryService, StockChange
from storefront.services.reservation_service import ReservationService
from storefront.kafka.producer import event_producer

logger = logging.getLogger(__name__)

SORT_OPTIONS = ("newest", "availability", "price_asc", "price_desc")


class ProductService:
    """Service layer for catalog operations"""

    def __init__(self, db: Session):
        self.db = db
        self.inventory = InventoryService(db)
        self.reservations = ReservationService(db)

    @staticmethod
    def _product_to_response_dict(product: Product) -> dict:
        """Convert Product model to a response dict"""
        return {
            "id": product.id,
            "name": product.name,
            "description": product.description,
            "category": product.category,
            "price": product.price,
            "currency": product.currency,
            "image_urls": list(product.image_urls or []),
            "stock": product.stock,
            "in_stock": product.in_stock,
            "status": product.status,
            "created_at": product.created_at,
            "updated_at": product.updated_at,
            "deleted_at": product.deleted_at,
        }

    def list_active_products(
        self,
        category: Optional[str] = None,
        page: int = 1,
        page_size: int = 20,
        sort_by: str = "newest"
    ) -> ProductListResponse:
        """Browse active products with pagination"""
        if sort_by not in SORT_OPTIONS:
            raise ValidationError(f"Unknown sort option '{sort_by}'", sort_by=sort_by)

        query = self.db.query(Product).filter(Product.status == "active")
        if category:
            query = query.filter(Product.category == category)

        total = query.count()

        if sort_by == "availability":
            # In-stock products first, then by quantity, then newest
            query = query.order_by(
                case((Product.stock > 0, 0), else_=1).asc(),
                Product.stock.desc(),
                Product.created_at.desc(),
                Product.id.desc()
            )
        elif sort_by == "price_asc":
            query = query.order_by(Product.price.asc(), Product.id.asc())
        elif sort_by == "price_desc":
            query = query.order_by(Product.price.desc(), Product.id.asc())
        else:
            query = query.order_by(Product.created_at.desc(), Product.id.desc())

        products = query.offset((page - 1) * page_size).limit(page_size).all()

        return ProductListResponse(
            products=[self._product_to_response_dict(p) for p in products],
            total=total,
            page=page,
            page_size=page_size,
            has_next=(page * page_size) < total
        )

    def list_all_products(self, status_filter: Optional[str] = None) -> List[Product]:
        """List every product regardless of status (admin)"""
        query = self.db.query(Product)
        if status_filter:
            query = query.filter(Product.status == status_filter)
        return query.order_by(Product.id.asc()).all()

    def get_product(self, product_id: int, include_deleted: bool = False) -> Product:
        query = self.db.query(Product).filter(Product.id == product_id)
        if not include_deleted:
            query = query.filter(Product.status != "deleted")

        product = query.first()
        if not product:
            raise NotFoundError("Product not found", product_id=product_id)
        return product

    def create_product(self, product_data: ProductCreate) -> Product:
        """Create a new product; ids are assigned by the store"""
        product = Product(
            name=product_data.name,
            description=product_data.description,
            category=product_data.category,
            price=product_data.price,
            currency=product_data.currency,
            image_urls=product_data.image_urls or [],
            stock=max(0, product_data.stock),
            status=product_data.status,
        )

        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)

        logger.info(f"Created product {product.id} '{product.name}' with stock {product.stock}")
        event_producer.publish_product_created(
            product_id=product.id,
            name=product.name,
            stock=product.stock
        )
        return product

    def update_product(self, product_id: int, product_data: ProductUpdate) -> Product:
        """Partial update; a stock change goes through the inventory ledger"""
        product = self.get_product(product_id, include_deleted=True)

        update_data = product_data.model_dump(exclude_unset=True)
        new_stock = update_data.pop("stock", None)

        for field_name, value in update_data.items():
            if value is None and field_name in ("name", "price", "currency"):
                raise ValidationError(f"'{field_name}' cannot be null", field=field_name)
            setattr(product, field_name, value)

        self.db.commit()
        self.db.refresh(product)

        if new_stock is not None:
            self.inventory.set_stock(product_id, new_stock)
            self.db.refresh(product)

        event_producer.publish_product_updated(
            product_id=product.id,
            name=product.name,
            status=product.status
        )
        return product

    def set_stock(self, product_id: int, new_stock: int) -> StockChange:
        return self.inventory.set_stock(product_id, new_stock)

    def update_status(self, product_id: int, status: str) -> Product:
        """Move a product between active and archived"""
        if status not in ("active", "archived"):
            raise ValidationError("Status must be 'active' or 'archived'", status=status)

        product = self.get_product(product_id)
        product.status = status
        self.db.commit()
        self.db.refresh(product)

        logger.info(f"Product {product_id} status set to {status}")
        event_producer.publish_product_updated(
            product_id=product.id,
            name=product.name,
            status=product.status
        )
        return product

    def delete_product(self, product_id: int) -> None:
        """Soft delete a product"""
        product = self.get_product(product_id)

        product.status = "deleted"
        product.deleted_at = datetime.now(timezone.utc)
        self.db.commit()

        logger.info(f"Soft deleted product {product_id}")
        event_producer.publish_product_deleted(product_id=product_id, permanent=False)

    def restore_product(self, product_id: int) -> Product:
        """Bring a soft-deleted (or archived) product back to active"""
        product = self.get_product(product_id, include_deleted=True)

        product.status = "active"
        product.deleted_at = None
        self.db.commit()
        self.db.refresh(product)

        logger.info(f"Restored product {product_id}")
        event_producer.publish_product_updated(
            product_id=product.id,
            name=product.name,
            status=product.status
        )
        return product

    def permanently_delete_product(self, product_id: int) -> None:
        """Remove a product with its reservations and cart lines"""
        product = self.get_product(product_id, include_deleted=True)

        self.reservations.clear_reservations(product_id, commit=False)
        self.db.query(CartItem).filter(
            CartItem.product_id == product_id
        ).delete(synchronize_session=False)
        self.db.delete(product)
        self.db.commit()

        logger.info(f"Permanently deleted product {product_id}")
        event_producer.publish_product_deleted(product_id=product_id, permanent=True)

from sqlalchemy import Column, Integer, BigInteger, String, Text, DateTime, CheckConstraint, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from storefront.db.database import Base
from storefront.models.types import JSONType


PRODUCT_STATUSES = ("active", "archived", "deleted")

# stock is a 32-bit INTEGER column
MAX_STOCK = 2_147_483_647


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    description = Column(Text)
    category = Column(Text)
    price = Column(BigInteger, nullable=False)  # whole currency units (FCFA has no minor unit)
    currency = Column(String(3), nullable=False, default="XOF")
    image_urls = Column(JSONType)  # list of image URLs, first one is the cover
    stock = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="active")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    deleted_at = Column(DateTime(timezone=True))

    __table_args__ = (
        CheckConstraint("price > 0", name="positive_price"),
        CheckConstraint("stock >= 0", name="non_negative_stock"),
        CheckConstraint("status IN ('active', 'archived', 'deleted')", name="status_valid"),
        Index("idx_products_status", "status"),
        Index("idx_products_category", "category"),
    )

    reservations = relationship("Reservation", back_populates="product", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def in_stock(self) -> bool:
        return (self.stock or 0) > 0

    @property
    def cover_image_url(self):
        return self.image_urls[0] if self.image_urls else None

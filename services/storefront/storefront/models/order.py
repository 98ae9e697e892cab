from sqlalchemy import Column, Integer, BigInteger, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.sql import func
from storefront.db.database import Base
from storefront.models.types import JSONType


class Order(Base):
    """Checkout snapshot; items are copied, not referenced, so history survives catalog edits"""
    __tablename__ = "orders"

    id = Column(String(64), primary_key=True)  # "order-<hex>"
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)  # null for guest checkout
    customer_first_name = Column(Text, nullable=False)
    customer_last_name = Column(Text, nullable=False)
    customer_phone = Column(Text, nullable=False)
    customer_address = Column(Text)
    items = Column(JSONType, nullable=False)
    total = Column(BigInteger, nullable=False)
    currency = Column(String(3), nullable=False, default="XOF")
    whatsapp_url = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("idx_orders_user", "user_id"),
    )

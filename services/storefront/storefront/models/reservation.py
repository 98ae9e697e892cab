from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from storefront.db.database import Base


class Reservation(Base):
    """A user's standing request to be told when an out-of-stock product is back"""
    __tablename__ = "reservations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("product_id", "user_id", name="uq_reservation_product_user"),
        Index("idx_reservations_user", "user_id"),
    )

    product = relationship("Product", back_populates="reservations")

"""Order and order item models."""

from sqlalchemy import JSON, Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from ..database import UTCDateTime
from .base import Base, utcnow


class Order(Base):
    """Checkout order. quote_id is unique: one order per quote."""

    __tablename__ = "orders"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    quote_id = Column(Integer, ForeignKey("quotes.id"), unique=True)
    stripe_session_id = Column(String(255), unique=True)
    stripe_payment_intent_id = Column(String(255), unique=True)
    status = Column(String(20), nullable=False, default="pending")
    total_amount = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False, default="usd")
    customer_email = Column(String(320))
    customer_name = Column(String(255))
    shipping_address = Column(JSON)
    notes = Column(Text)
    completed_at = Column(UTCDateTime)
    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User")
    quote = relationship("Quote")
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="OrderItem.id",
    )

    __table_args__ = (
        Index("ix_orders_user", "user_id"),
        Index("ix_orders_status", "status"),
    )


class OrderItem(Base):
    """Immutable price snapshot of one order line."""

    __tablename__ = "order_items"
    id = Column(Integer, primary_key=True)
    order_id = Column(
        Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False
    )
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Integer, nullable=False)
    total_price = Column(Integer, nullable=False)

    order = relationship("Order", back_populates="items")
    product = relationship("Product")

    __table_args__ = (Index("ix_order_items_order", "order_id"),)

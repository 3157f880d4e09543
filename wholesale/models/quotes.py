"""Quote, quote line item, and quote history models."""

from sqlalchemy import (
    Column,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from ..database import UTCDateTime
from .base import Base, utcnow


class Quote(Base):
    """Seller quote against an RFQ inquiry. Amounts in cents."""

    __tablename__ = "quotes"
    id = Column(Integer, primary_key=True)
    inquiry_id = Column(Integer, ForeignKey("rfq_inquiries.id"), nullable=False)
    quote_number = Column(String(40), nullable=False, unique=True)
    revision = Column(Integer, nullable=False, default=1)

    status = Column(String(20), nullable=False, default="draft")
    total_amount = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False, default="usd")
    valid_until = Column(UTCDateTime, nullable=False)
    notes = Column(Text)
    terms = Column(Text)

    created_by_id = Column(Integer, ForeignKey("users.id"))
    sent_at = Column(UTCDateTime)
    responded_at = Column(UTCDateTime)
    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)

    inquiry = relationship("RfqInquiry", back_populates="quotes")
    created_by = relationship("User", foreign_keys=[created_by_id])
    items = relationship(
        "QuoteItem",
        back_populates="quote",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="QuoteItem.id",
    )
    history = relationship(
        "QuoteHistory",
        back_populates="quote",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="QuoteHistory.id",
    )

    __table_args__ = (
        UniqueConstraint("inquiry_id", "revision", name="uq_quotes_inquiry_revision"),
        Index("ix_quotes_inquiry", "inquiry_id"),
        Index("ix_quotes_status", "status"),
    )


class QuoteItem(Base):
    __tablename__ = "quote_items"
    id = Column(Integer, primary_key=True)
    quote_id = Column(
        Integer, ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False
    )
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Integer, nullable=False)
    discount = Column(Numeric(5, 2), nullable=False, default=0)
    total_price = Column(Integer, nullable=False)
    notes = Column(Text)

    quote = relationship("Quote", back_populates="items")
    product = relationship("Product")

    __table_args__ = (Index("ix_quote_items_quote", "quote_id"),)


class QuoteHistory(Base):
    """Append-only audit trail for a quote."""

    __tablename__ = "quote_history"
    id = Column(Integer, primary_key=True)
    quote_id = Column(
        Integer, ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False
    )
    action = Column(String(30), nullable=False)
    changed_by_id = Column(Integer, ForeignKey("users.id"))
    notes = Column(Text)
    created_at = Column(UTCDateTime, default=utcnow)

    quote = relationship("Quote", back_populates="history")

    __table_args__ = (Index("ix_quote_history_quote", "quote_id"),)

"""RFQ inquiry and inquiry notification models."""

from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from ..database import UTCDateTime
from .base import Base, utcnow


class RfqInquiry(Base):
    """Buyer request for quotation. Never deleted; status follows its quotes."""

    __tablename__ = "rfq_inquiries"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    company_name = Column(String(255))
    contact_name = Column(String(255))
    contact_email = Column(String(320))
    contact_phone = Column(String(50))
    message = Column(Text)
    status = Column(String(20), nullable=False, default="pending")
    quoted_price = Column(Integer)
    quoted_at = Column(UTCDateTime)
    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User")
    product = relationship("Product")
    quotes = relationship(
        "Quote", back_populates="inquiry", order_by="Quote.revision.desc()"
    )

    __table_args__ = (
        Index("ix_rfq_inquiries_user", "user_id"),
        Index("ix_rfq_inquiries_status", "status"),
    )


class InquiryNotification(Base):
    """Record of the confirmation email / SMS sent for an inquiry."""

    __tablename__ = "inquiry_notifications"
    id = Column(Integer, primary_key=True)
    inquiry_id = Column(
        Integer, ForeignKey("rfq_inquiries.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    email_sent = Column(Boolean, nullable=False, default=False)
    email_sent_at = Column(UTCDateTime)
    sms_sent = Column(Boolean, nullable=False, default=False)
    sms_sent_at = Column(UTCDateTime)
    created_at = Column(UTCDateTime, default=utcnow)

    __table_args__ = (Index("ix_inquiry_notifications_inquiry", "inquiry_id"),)

"""User and buyer profile models."""

from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from ..database import UTCDateTime
from .base import Base, utcnow


class User(Base):
    """Account from the external auth provider. Admins act as seller staff."""

    __tablename__ = "users"
    id = Column(Integer, primary_key=True)
    open_id = Column(String(64), unique=True)
    email = Column(String(320), nullable=False, unique=True)
    name = Column(String(255))
    role = Column(String(20), nullable=False, default="user")  # user | admin
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)
    last_signed_in = Column(UTCDateTime)

    buyer_profile = relationship("BuyerProfile", back_populates="user", uselist=False)
    membership = relationship("UserMembership", back_populates="user", uselist=False)


class BuyerProfile(Base):
    """Company details for a buyer. One per user."""

    __tablename__ = "buyer_profiles"
    id = Column(Integer, primary_key=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    company_name = Column(String(255))
    company_type = Column(String(100))
    country = Column(String(2))
    phone = Column(String(50))
    address = Column(Text)
    business_license = Column(String(255))
    tax_id = Column(String(100))
    verification_status = Column(String(20), nullable=False, default="pending")
    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="buyer_profile")

    __table_args__ = (Index("ix_buyer_profiles_verification", "verification_status"),)

"""Membership tiers, user memberships, and tier discount rules."""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from ..database import UTCDateTime
from .base import Base, utcnow


class MembershipTier(Base):
    __tablename__ = "membership_tiers"
    id = Column(Integer, primary_key=True)
    name = Column(String(50), nullable=False, unique=True)
    description = Column(Text)
    level = Column(Integer, nullable=False, default=0)
    color = Column(String(20))
    discount_percentage = Column(Numeric(5, 2), nullable=False, default=0)
    min_annual_purchase = Column(Integer, nullable=False, default=0)
    additional_benefits = Column(JSON, default=list)
    created_at = Column(UTCDateTime, default=utcnow)


class UserMembership(Base):
    """A user's current tier. One row per user."""

    __tablename__ = "user_memberships"
    id = Column(Integer, primary_key=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    tier_id = Column(Integer, ForeignKey("membership_tiers.id"), nullable=False)
    annual_purchase_amount = Column(Integer, nullable=False, default=0)
    started_at = Column(UTCDateTime, default=utcnow)
    expires_at = Column(UTCDateTime)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="membership")
    tier = relationship("MembershipTier")


class MembershipDiscount(Base):
    """Tier discount rule, scoped to a product, a category, or the whole tier.

    discount_value is a percentage for "percentage" rows and cents for "fixed".
    """

    __tablename__ = "membership_discounts"
    id = Column(Integer, primary_key=True)
    tier_id = Column(
        Integer, ForeignKey("membership_tiers.id", ondelete="CASCADE"), nullable=False
    )
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"))
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="CASCADE"))
    discount_type = Column(String(20), nullable=False, default="percentage")
    discount_value = Column(Numeric(10, 2), nullable=False)
    valid_from = Column(UTCDateTime)
    valid_until = Column(UTCDateTime)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(UTCDateTime, default=utcnow)

    tier = relationship("MembershipTier")

    __table_args__ = (Index("ix_membership_discounts_tier", "tier_id", "is_active"),)

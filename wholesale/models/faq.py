"""FAQ categories and items."""

from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from ..database import UTCDateTime
from .base import Base, utcnow


class FaqCategory(Base):
    __tablename__ = "faq_categories"
    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)
    description = Column(Text)
    icon = Column(String(50))
    sort_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(UTCDateTime, default=utcnow)

    items = relationship("FaqItem", back_populates="category")


class FaqItem(Base):
    __tablename__ = "faq_items"
    id = Column(Integer, primary_key=True)
    category_id = Column(
        Integer, ForeignKey("faq_categories.id", ondelete="CASCADE"), nullable=False
    )
    question = Column(Text, nullable=False)
    answer = Column(Text, nullable=False)
    sort_order = Column(Integer, nullable=False, default=0)
    views = Column(Integer, nullable=False, default=0)
    helpful = Column(Integer, nullable=False, default=0)
    not_helpful = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)

    category = relationship("FaqCategory", back_populates="items")

    __table_args__ = (Index("ix_faq_items_category", "category_id", "sort_order"),)

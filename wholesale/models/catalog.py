"""Catalog models: categories, condition grades, products, pricing tiers, certifications."""

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
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from ..database import UTCDateTime
from .base import Base, utcnow


class Category(Base):
    __tablename__ = "categories"
    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)
    description = Column(Text)
    image_url = Column(String(500))
    created_at = Column(UTCDateTime, default=utcnow)

    products = relationship("Product", back_populates="category")


class ConditionGrade(Base):
    """A / B / C condition grade with a price multiplier."""

    __tablename__ = "condition_grades"
    id = Column(Integer, primary_key=True)
    grade = Column(String(1), nullable=False, unique=True)
    description = Column(Text)
    price_multiplier = Column(Numeric(4, 2), nullable=False, default=1)


class Product(Base):
    """Sellable product. Prices are integer cents."""

    __tablename__ = "products"
    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)
    sku = Column(String(100), nullable=False, unique=True)
    description = Column(Text)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"))
    condition_grade_id = Column(Integer, ForeignKey("condition_grades.id"))
    base_price = Column(Integer, nullable=False)
    moq = Column(Integer, nullable=False, default=1)
    stock = Column(Integer, nullable=False, default=0)
    images = Column(JSON, default=list)
    specifications = Column(JSON, default=dict)
    weight = Column(String(50))
    dimensions = Column(String(100))
    origin = Column(String(100))
    featured = Column(Boolean, nullable=False, default=False)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)

    category = relationship("Category", back_populates="products")
    condition_grade = relationship("ConditionGrade")
    pricing_tiers = relationship(
        "PricingTier",
        back_populates="product",
        order_by="PricingTier.min_quantity",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_products_category", "category_id"),
        Index("ix_products_featured_active", "featured", "active"),
    )


class PricingTier(Base):
    """Quantity bracket price. max_quantity NULL means no upper bound."""

    __tablename__ = "pricing_tiers"
    id = Column(Integer, primary_key=True)
    product_id = Column(
        Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    )
    min_quantity = Column(Integer, nullable=False)
    max_quantity = Column(Integer)
    price = Column(Integer, nullable=False)
    created_at = Column(UTCDateTime, default=utcnow)

    product = relationship("Product", back_populates="pricing_tiers")

    __table_args__ = (Index("ix_pricing_tiers_product", "product_id", "min_quantity"),)


class Certification(Base):
    __tablename__ = "certifications"
    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False, unique=True)
    issuer = Column(String(255))
    description = Column(Text)
    logo_url = Column(String(500))
    created_at = Column(UTCDateTime, default=utcnow)


class ProductCertification(Base):
    __tablename__ = "product_certifications"
    id = Column(Integer, primary_key=True)
    product_id = Column(
        Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    )
    certification_id = Column(
        Integer, ForeignKey("certifications.id", ondelete="CASCADE"), nullable=False
    )
    certificate_number = Column(String(100))
    expires_at = Column(UTCDateTime)

    certification = relationship("Certification")

    __table_args__ = (
        UniqueConstraint("product_id", "certification_id", name="uq_product_certification"),
    )

"""Catalog reads: products, categories, certifications."""

from sqlalchemy.orm import Session, selectinload

from ..config import settings
from ..models import Category, Certification, Product, ProductCertification
from .errors import NotFoundError


def _active_products(db: Session):
    return db.query(Product).filter(Product.active.is_(True))


def list_products(db: Session, limit: int | None = None, offset: int = 0) -> list[Product]:
    return (
        _active_products(db)
        .order_by(Product.created_at.desc(), Product.id.desc())
        .offset(offset)
        .limit(limit or settings.products_page_size)
        .all()
    )


def featured_products(db: Session) -> list[Product]:
    return (
        _active_products(db)
        .filter(Product.featured.is_(True))
        .order_by(Product.created_at.desc(), Product.id.desc())
        .limit(settings.featured_products_limit)
        .all()
    )


def products_by_category(db: Session, category_id: int) -> list[Product]:
    return (
        _active_products(db)
        .filter(Product.category_id == category_id)
        .order_by(Product.name)
        .all()
    )


def get_product_by_slug(db: Session, slug: str) -> Product:
    product = (
        _active_products(db)
        .options(selectinload(Product.pricing_tiers))
        .filter(Product.slug == slug)
        .first()
    )
    if not product:
        raise NotFoundError("Product not found", slug=slug)
    return product


def get_product(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if not product or not product.active:
        raise NotFoundError("Product not found", product_id=product_id)
    return product


def list_categories(db: Session) -> list[Category]:
    return db.query(Category).order_by(Category.name).all()


def list_certifications(db: Session) -> list[Certification]:
    return db.query(Certification).order_by(Certification.name).all()


def product_certifications(db: Session, product_id: int) -> list[ProductCertification]:
    return (
        db.query(ProductCertification)
        .options(selectinload(ProductCertification.certification))
        .filter(ProductCertification.product_id == product_id)
        .all()
    )


def product_to_dict(p: Product, include_tiers: bool = False) -> dict:
    d = {
        "id": p.id,
        "name": p.name,
        "slug": p.slug,
        "sku": p.sku,
        "description": p.description,
        "category_id": p.category_id,
        "condition_grade": p.condition_grade.grade if p.condition_grade else None,
        "base_price": p.base_price,
        "moq": p.moq,
        "stock": p.stock,
        "images": p.images or [],
        "specifications": p.specifications or {},
        "weight": p.weight,
        "dimensions": p.dimensions,
        "origin": p.origin,
        "featured": p.featured,
    }
    if include_tiers:
        d["pricing_tiers"] = [
            {"id": t.id, "min_quantity": t.min_quantity, "max_quantity": t.max_quantity, "price": t.price}
            for t in p.pricing_tiers
        ]
    return d


def category_to_dict(c: Category) -> dict:
    return {
        "id": c.id,
        "name": c.name,
        "slug": c.slug,
        "description": c.description,
        "image_url": c.image_url,
    }


def certification_to_dict(c: Certification) -> dict:
    return {
        "id": c.id,
        "name": c.name,
        "issuer": c.issuer,
        "description": c.description,
        "logo_url": c.logo_url,
    }


def product_certification_to_dict(pc: ProductCertification) -> dict:
    return {
        **certification_to_dict(pc.certification),
        "certificate_number": pc.certificate_number,
        "expires_at": pc.expires_at.isoformat() if pc.expires_at else None,
    }

"""
products.py — Public catalog endpoints: products and categories

Called by: main.py (router mount)
Depends on: services/catalog_service
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..services import catalog_service as catalog

router = APIRouter(tags=["catalog"])


@router.get("/api/products")
def list_products(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    return [catalog.product_to_dict(p) for p in catalog.list_products(db, limit, offset)]


@router.get("/api/products/featured")
def featured_products(db: Session = Depends(get_db)):
    return [catalog.product_to_dict(p) for p in catalog.featured_products(db)]


@router.get("/api/products/category/{category_id}")
def products_by_category(category_id: int, db: Session = Depends(get_db)):
    return [catalog.product_to_dict(p) for p in catalog.products_by_category(db, category_id)]


@router.get("/api/products/{slug}")
def product_by_slug(slug: str, db: Session = Depends(get_db)):
    """Product detail page, with its quantity tiers."""
    return catalog.product_to_dict(catalog.get_product_by_slug(db, slug), include_tiers=True)


@router.get("/api/categories")
def list_categories(db: Session = Depends(get_db)):
    return [catalog.category_to_dict(c) for c in catalog.list_categories(db)]

"""
certifications.py — Product certification listings

Called by: main.py (router mount)
Depends on: services/catalog_service
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..services import catalog_service as catalog

router = APIRouter(tags=["catalog"])


@router.get("/api/certifications")
def list_certifications(db: Session = Depends(get_db)):
    return [catalog.certification_to_dict(c) for c in catalog.list_certifications(db)]


@router.get("/api/certifications/product/{product_id}")
def product_certifications(product_id: int, db: Session = Depends(get_db)):
    catalog.get_product(db, product_id)
    return [
        catalog.product_certification_to_dict(pc)
        for pc in catalog.product_certifications(db, product_id)
    ]

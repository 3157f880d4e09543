"""
pricing.py — Quantity tier pricing

Price quotes here are what checkout will charge: tier price for the quantity,
then the caller's membership discount when signed in.

Called by: main.py (router mount)
Depends on: services/pricing_service, services/catalog_service
"""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_user, require_admin
from ..models import User
from ..schemas.catalog import PricingTierCreate
from ..services import pricing_service
from ..services.catalog_service import get_product

router = APIRouter(tags=["pricing"])


@router.get("/api/pricing/tiers/{product_id}")
def pricing_tiers(product_id: int, db: Session = Depends(get_db)):
    return [pricing_service.tier_to_dict(t) for t in pricing_service.get_pricing_tiers(db, product_id)]


@router.get("/api/pricing/price/{product_id}")
def price_for_quantity(
    product_id: int,
    request: Request,
    quantity: int = Query(..., ge=1),
    db: Session = Depends(get_db),
):
    user = get_user(request, db)
    product = get_product(db, product_id)
    return pricing_service.price_for_quantity(db, product, quantity, user.id if user else None)


@router.post("/api/pricing/tiers")
def create_pricing_tier(
    body: PricingTierCreate,
    user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    tier = pricing_service.create_pricing_tier(
        db, body.product_id, body.min_quantity, body.max_quantity, body.price
    )
    return pricing_service.tier_to_dict(tier)

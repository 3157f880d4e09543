"""
membership.py — Membership tiers and member discounts

Called by: main.py (router mount)
Depends on: services/membership_service, services/pricing_service
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_user
from ..models import User
from ..services import membership_service, pricing_service

router = APIRouter(tags=["membership"])


@router.get("/api/membership/tiers")
def tiers(db: Session = Depends(get_db)):
    return [membership_service.tier_to_dict(t) for t in membership_service.get_tiers(db)]


@router.get("/api/membership/mine")
def my_membership(user: User = Depends(require_user), db: Session = Depends(get_db)):
    membership = pricing_service.get_current_membership(db, user.id)
    return membership_service.membership_to_dict(membership) if membership else None


@router.get("/api/membership/discount/{product_id}")
def applicable_discount(
    product_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    discount = pricing_service.get_applicable_discount(db, user.id, product_id)
    return pricing_service.discount_to_dict(discount) if discount else None


@router.post("/api/membership/check-upgrade")
def check_upgrade(user: User = Depends(require_user), db: Session = Depends(get_db)):
    return membership_service.check_upgrade(db, user.id)

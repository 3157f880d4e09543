"""
membership_service.py — Membership tiers, upgrades and purchase tracking

Business Rules:
- Tiers are listed by level, lowest first
- A buyer qualifies for the highest-level tier whose min_annual_purchase is
  covered by their annual_purchase_amount
- Upgrades only move up; a buyer is never demoted here
- Completed orders add their total (cents) to annual_purchase_amount

Called by: routers/membership.py, services/order_service.py
Depends on: models, services/pricing_service
"""

import logging

from sqlalchemy.orm import Session

from ..database import transaction
from ..models import MembershipTier, UserMembership
from .pricing_service import get_current_membership

log = logging.getLogger("wholesale.membership")


def get_tiers(db: Session) -> list[MembershipTier]:
    return db.query(MembershipTier).order_by(MembershipTier.level, MembershipTier.id).all()


def eligible_tier(db: Session, annual_purchase_amount: int) -> MembershipTier | None:
    return (
        db.query(MembershipTier)
        .filter(MembershipTier.min_annual_purchase <= annual_purchase_amount)
        .order_by(MembershipTier.level.desc(), MembershipTier.id.desc())
        .first()
    )


def check_upgrade(db: Session, user_id: int) -> dict:
    """Move the user to the best tier their purchases qualify for."""
    membership = get_current_membership(db, user_id)
    amount = membership.annual_purchase_amount if membership else 0
    target = eligible_tier(db, amount)
    current = membership.tier if membership else None

    if target is None or (current is not None and target.level <= current.level):
        return {"upgraded": False, "tier": tier_to_dict(current) if current else None}

    with transaction(db):
        if membership is None:
            membership = db.query(UserMembership).filter_by(user_id=user_id).first()
            if membership is None:
                membership = UserMembership(user_id=user_id, annual_purchase_amount=0)
                db.add(membership)
            membership.expires_at = None
        membership.tier_id = target.id
        membership.tier = target

    log.info("User %s moved to membership tier %s", user_id, target.name)
    return {
        "upgraded": True,
        "previous_tier": current.name if current else None,
        "tier": tier_to_dict(target),
    }


def record_purchase(db: Session, user_id: int, amount: int) -> None:
    """Add a completed order total to the running annual amount. Caller commits."""
    updated = (
        db.query(UserMembership)
        .filter(UserMembership.user_id == user_id)
        .update(
            {UserMembership.annual_purchase_amount: UserMembership.annual_purchase_amount + amount},
            synchronize_session="fetch",
        )
    )
    if updated:
        return
    base = eligible_tier(db, 0)
    if base is None:
        return
    db.add(UserMembership(user_id=user_id, tier_id=base.id, annual_purchase_amount=amount))


def tier_to_dict(tier: MembershipTier) -> dict:
    return {
        "id": tier.id,
        "name": tier.name,
        "description": tier.description,
        "level": tier.level,
        "color": tier.color,
        "discount_percentage": float(tier.discount_percentage or 0),
        "min_annual_purchase": tier.min_annual_purchase,
        "additional_benefits": tier.additional_benefits or [],
    }


def membership_to_dict(membership: UserMembership) -> dict:
    return {
        "id": membership.id,
        "user_id": membership.user_id,
        "annual_purchase_amount": membership.annual_purchase_amount,
        "started_at": membership.started_at.isoformat() if membership.started_at else None,
        "expires_at": membership.expires_at.isoformat() if membership.expires_at else None,
        "tier": tier_to_dict(membership.tier) if membership.tier else None,
    }

"""
pricing_service.py — Pricing tiers and membership discount resolution

Resolves what a buyer pays per unit: the quantity bracket price (or the
product base price), then the best membership discount for their tier.

Business Rules:
- A tier matches when min_quantity <= qty <= max_quantity; NULL max is open-ended
- Tier brackets of one product never overlap (checked on create)
- Quantity below the product MOQ is rejected
- No membership (or an expired one) means no discount, never an error
- Discount precedence, decided in SQL: product-specific, then category-wide,
  then tier-wide; ties go to the newest created_at, then the highest id
- Percentage discounts floor to whole cents; fixed discounts clamp at zero

Called by: routers/catalog.py, routers/membership.py, services/order_service.py,
           services/cart_service.py
Depends on: models
"""

import logging
from datetime import datetime, timezone
from decimal import ROUND_FLOOR, Decimal

from sqlalchemy import case, or_
from sqlalchemy.orm import Session

from ..database import transaction
from ..models import MembershipDiscount, PricingTier, Product, UserMembership
from .errors import InvalidInputError, NotFoundError

log = logging.getLogger("wholesale.pricing")


# ── Pricing tiers ────────────────────────────────────────────────────


def get_pricing_tiers(db: Session, product_id: int) -> list[PricingTier]:
    return (
        db.query(PricingTier)
        .filter(PricingTier.product_id == product_id)
        .order_by(PricingTier.min_quantity)
        .all()
    )


def select_pricing_tier(tiers: list[PricingTier], quantity: int) -> PricingTier | None:
    """Pick the bracket containing quantity, or None."""
    for tier in tiers:
        if tier.min_quantity <= quantity and (
            tier.max_quantity is None or quantity <= tier.max_quantity
        ):
            return tier
    return None


def _overlaps(lo: int, hi: int | None, other_lo: int, other_hi: int | None) -> bool:
    return (other_hi is None or lo <= other_hi) and (hi is None or other_lo <= hi)


def create_pricing_tier(
    db: Session, product_id: int, min_quantity: int, max_quantity: int | None, price: int
) -> PricingTier:
    if not db.get(Product, product_id):
        raise NotFoundError("Product not found", product_id=product_id)
    if min_quantity < 1:
        raise InvalidInputError("min_quantity must be at least 1")
    if max_quantity is not None and max_quantity < min_quantity:
        raise InvalidInputError("max_quantity must be >= min_quantity")
    if price < 0:
        raise InvalidInputError("price must be non-negative cents")

    for tier in get_pricing_tiers(db, product_id):
        if _overlaps(min_quantity, max_quantity, tier.min_quantity, tier.max_quantity):
            raise InvalidInputError(
                "Pricing tier overlaps an existing bracket",
                tier_id=tier.id,
                min_quantity=tier.min_quantity,
                max_quantity=tier.max_quantity,
            )

    with transaction(db):
        tier = PricingTier(
            product_id=product_id,
            min_quantity=min_quantity,
            max_quantity=max_quantity,
            price=price,
        )
        db.add(tier)
    return tier


# ── Membership discounts ─────────────────────────────────────────────


def get_current_membership(db: Session, user_id: int, now: datetime | None = None) -> UserMembership | None:
    now = now or datetime.now(timezone.utc)
    return (
        db.query(UserMembership)
        .filter(
            UserMembership.user_id == user_id,
            or_(UserMembership.expires_at.is_(None), UserMembership.expires_at > now),
        )
        .first()
    )


def get_applicable_discount(
    db: Session,
    user_id: int,
    product_id: int,
    category_id: int | None = None,
    now: datetime | None = None,
) -> MembershipDiscount | None:
    """Best discount row for this user and product, or None."""
    now = now or datetime.now(timezone.utc)
    membership = get_current_membership(db, user_id, now)
    if not membership:
        return None

    if category_id is None:
        product = db.get(Product, product_id)
        category_id = product.category_id if product else None

    specificity = case(
        (MembershipDiscount.product_id.isnot(None), 0),
        (MembershipDiscount.category_id.isnot(None), 1),
        else_=2,
    )
    category_match = MembershipDiscount.category_id.is_(None)
    if category_id is not None:
        category_match = or_(category_match, MembershipDiscount.category_id == category_id)

    return (
        db.query(MembershipDiscount)
        .filter(
            MembershipDiscount.tier_id == membership.tier_id,
            MembershipDiscount.is_active.is_(True),
            or_(MembershipDiscount.product_id.is_(None), MembershipDiscount.product_id == product_id),
            category_match,
            or_(MembershipDiscount.valid_from.is_(None), MembershipDiscount.valid_from <= now),
            or_(MembershipDiscount.valid_until.is_(None), MembershipDiscount.valid_until >= now),
        )
        .order_by(specificity, MembershipDiscount.created_at.desc(), MembershipDiscount.id.desc())
        .first()
    )


def apply_discount(unit_price: int, discount: MembershipDiscount | None) -> int:
    """Member unit price in cents."""
    if discount is None:
        return unit_price
    value = Decimal(str(discount.discount_value))
    if discount.discount_type == "fixed":
        return max(0, unit_price - int(value))
    discounted = Decimal(unit_price) * (Decimal(100) - value) / Decimal(100)
    return max(0, int(discounted.quantize(Decimal(1), rounding=ROUND_FLOOR)))


def discount_to_dict(discount: MembershipDiscount) -> dict:
    return {
        "id": discount.id,
        "tier_id": discount.tier_id,
        "product_id": discount.product_id,
        "category_id": discount.category_id,
        "discount_type": discount.discount_type,
        "discount_value": float(discount.discount_value),
        "valid_from": discount.valid_from.isoformat() if discount.valid_from else None,
        "valid_until": discount.valid_until.isoformat() if discount.valid_until else None,
    }


def price_for_quantity(db: Session, product: Product, quantity: int, user_id: int | None = None) -> dict:
    """Unit and line price for quantity, with tier and member discount applied."""
    if quantity < (product.moq or 1):
        raise InvalidInputError(
            f"Minimum order quantity for {product.sku} is {product.moq}",
            product_id=product.id,
            moq=product.moq,
        )
    tier = select_pricing_tier(get_pricing_tiers(db, product.id), quantity)
    list_price = tier.price if tier else product.base_price

    discount = None
    if user_id is not None:
        discount = get_applicable_discount(db, user_id, product.id, product.category_id)
    unit_price = apply_discount(list_price, discount)

    return {
        "product_id": product.id,
        "quantity": quantity,
        "list_unit_price": list_price,
        "unit_price": unit_price,
        "line_total": unit_price * quantity,
        "tier_id": tier.id if tier else None,
        "discount": discount_to_dict(discount) if discount else None,
    }


def tier_to_dict(tier: PricingTier) -> dict:
    return {
        "id": tier.id,
        "product_id": tier.product_id,
        "min_quantity": tier.min_quantity,
        "max_quantity": tier.max_quantity,
        "price": tier.price,
    }

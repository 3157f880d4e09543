"""
test_pricing_service.py — Quantity tiers and member discount resolution

Called by: pytest
Depends on: wholesale/services/pricing_service.py, conftest.py
"""

from datetime import datetime, timedelta, timezone

import pytest

from wholesale.models import MembershipTier, PricingTier, UserMembership
from wholesale.services.errors import InvalidInputError, NotFoundError
from wholesale.services.pricing_service import (
    apply_discount,
    create_pricing_tier,
    get_applicable_discount,
    get_current_membership,
    get_pricing_tiers,
    price_for_quantity,
    select_pricing_tier,
)


# ── Tiers ────────────────────────────────────────────────────────────


class TestSelectPricingTier:
    def test_boundaries(self, db_session, tiered_product):
        tiers = get_pricing_tiers(db_session, tiered_product.id)
        assert select_pricing_tier(tiers, 499).price == 900
        assert select_pricing_tier(tiers, 500).price == 800
        assert select_pricing_tier(tiers, 100).price == 900

    def test_open_ended_top_tier(self, db_session, tiered_product):
        tiers = get_pricing_tiers(db_session, tiered_product.id)
        assert select_pricing_tier(tiers, 1_000_000).price == 800

    def test_below_lowest_tier(self, db_session, tiered_product):
        tiers = get_pricing_tiers(db_session, tiered_product.id)
        assert select_pricing_tier(tiers, 99) is None

    def test_price_falls_back_to_base(self, db_session, tiered_product):
        result = price_for_quantity(db_session, tiered_product, 10)
        assert result["unit_price"] == 1000
        assert result["tier_id"] is None
        assert result["line_total"] == 10_000

    def test_price_uses_tier(self, db_session, tiered_product):
        result = price_for_quantity(db_session, tiered_product, 500)
        assert result["list_unit_price"] == 800
        assert result["line_total"] == 400_000

    def test_below_moq_rejected(self, db_session, test_product):
        test_product.moq = 50
        db_session.commit()
        with pytest.raises(InvalidInputError, match="Minimum order quantity"):
            price_for_quantity(db_session, test_product, 49)


class TestCreatePricingTier:
    def test_creates(self, db_session, test_product):
        tier = create_pricing_tier(db_session, test_product.id, 10, 99, 950)
        assert tier.id is not None
        assert db_session.query(PricingTier).count() == 1

    def test_overlap_rejected(self, db_session, tiered_product):
        with pytest.raises(InvalidInputError):
            create_pricing_tier(db_session, tiered_product.id, 400, 600, 850)

    def test_overlap_with_open_ended(self, db_session, tiered_product):
        with pytest.raises(InvalidInputError):
            create_pricing_tier(db_session, tiered_product.id, 10_000, None, 700)

    def test_gap_below_is_fine(self, db_session, tiered_product):
        tier = create_pricing_tier(db_session, tiered_product.id, 10, 99, 950)
        assert tier.min_quantity == 10

    def test_inverted_bounds(self, db_session, test_product):
        with pytest.raises(InvalidInputError):
            create_pricing_tier(db_session, test_product.id, 100, 50, 900)

    def test_unknown_product(self, db_session):
        with pytest.raises(NotFoundError):
            create_pricing_tier(db_session, 9999, 1, None, 100)


# ── Member discounts ─────────────────────────────────────────────────


class TestGetApplicableDiscount:
    def test_no_membership_returns_none(self, db_session, test_user, test_product, gold_tier, make_discount):
        make_discount(gold_tier, 10, product=test_product)
        assert get_applicable_discount(db_session, test_user.id, test_product.id) is None

    def test_expired_membership_returns_none(self, db_session, test_user, test_product, gold_member, gold_tier, make_discount):
        make_discount(gold_tier, 10, product=test_product)
        gold_member.expires_at = datetime.now(timezone.utc) - timedelta(days=1)
        db_session.commit()
        assert get_current_membership(db_session, test_user.id) is None
        assert get_applicable_discount(db_session, test_user.id, test_product.id) is None

    def test_product_beats_category(
        self, db_session, test_user, test_product, test_category, gold_member, gold_tier, make_discount
    ):
        product_row = make_discount(gold_tier, 5, product=test_product)
        # Newer and bigger, but only category-wide
        make_discount(gold_tier, 20, category=test_category)
        found = get_applicable_discount(db_session, test_user.id, test_product.id)
        assert found.id == product_row.id

    def test_category_beats_tier_wide(
        self, db_session, test_user, test_product, test_category, gold_member, gold_tier, make_discount
    ):
        category_row = make_discount(gold_tier, 5, category=test_category)
        make_discount(gold_tier, 20)
        found = get_applicable_discount(db_session, test_user.id, test_product.id)
        assert found.id == category_row.id

    def test_same_specificity_newest_wins(
        self, db_session, test_user, test_product, gold_member, gold_tier, make_discount
    ):
        now = datetime.now(timezone.utc)
        make_discount(gold_tier, 5, product=test_product, created_at=now - timedelta(days=2))
        newest = make_discount(gold_tier, 7, product=test_product, created_at=now)
        found = get_applicable_discount(db_session, test_user.id, test_product.id)
        assert found.id == newest.id

    def test_same_timestamp_higher_id_wins(
        self, db_session, test_user, test_product, gold_member, gold_tier, make_discount
    ):
        stamp = datetime(2026, 1, 1, tzinfo=timezone.utc)
        make_discount(gold_tier, 5, product=test_product, created_at=stamp)
        second = make_discount(gold_tier, 6, product=test_product, created_at=stamp)
        assert get_applicable_discount(db_session, test_user.id, test_product.id).id == second.id

    def test_other_tier_rows_ignored(self, db_session, test_user, test_product, gold_member, make_discount):
        silver = MembershipTier(name="Silver", level=1, min_annual_purchase=1_000_000)
        db_session.add(silver)
        db_session.commit()
        make_discount(silver, 50, product=test_product)
        assert get_applicable_discount(db_session, test_user.id, test_product.id) is None

    def test_inactive_and_out_of_window_rows_ignored(
        self, db_session, test_user, test_product, gold_member, gold_tier, make_discount
    ):
        now = datetime.now(timezone.utc)
        make_discount(gold_tier, 5, product=test_product, is_active=False)
        make_discount(gold_tier, 6, product=test_product, valid_until=now - timedelta(days=1))
        make_discount(gold_tier, 7, product=test_product, valid_from=now + timedelta(days=1))
        assert get_applicable_discount(db_session, test_user.id, test_product.id) is None

    def test_other_category_ignored(
        self, db_session, test_user, test_product, gold_member, gold_tier, make_discount
    ):
        from wholesale.models import Category

        toys = Category(name="Toys", slug="toys")
        db_session.add(toys)
        db_session.commit()
        make_discount(gold_tier, 10, category=toys)
        assert get_applicable_discount(db_session, test_user.id, test_product.id) is None


class TestApplyDiscount:
    def test_percentage_floors(self, db_session, gold_tier, make_discount):
        row = make_discount(gold_tier, "12.5")
        # 999 * 0.875 = 874.125
        assert apply_discount(999, row) == 874

    def test_fixed_amount(self, db_session, gold_tier, make_discount):
        row = make_discount(gold_tier, 150, discount_type="fixed")
        assert apply_discount(1000, row) == 850
        assert apply_discount(100, row) == 0

    def test_none_is_identity(self):
        assert apply_discount(1234, None) == 1234


def test_member_price_for_quantity(db_session, test_user, tiered_product, gold_member, gold_tier, make_discount):
    make_discount(gold_tier, 10, product=tiered_product)
    result = price_for_quantity(db_session, tiered_product, 500, test_user.id)
    assert result["list_unit_price"] == 800
    assert result["unit_price"] == 720
    assert result["line_total"] == 360_000
    assert result["discount"]["discount_value"] == 10.0


def test_membership_row_without_expiry_is_current(db_session, test_user, gold_tier):
    db_session.add(UserMembership(user_id=test_user.id, tier_id=gold_tier.id))
    db_session.commit()
    assert get_current_membership(db_session, test_user.id) is not None

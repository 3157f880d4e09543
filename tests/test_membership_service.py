"""
test_membership_service.py — Tier upgrades and purchase tracking

Called by: pytest
Depends on: wholesale/services/membership_service.py, conftest.py
"""

import pytest

from wholesale.models import MembershipTier, UserMembership
from wholesale.services.membership_service import (
    check_upgrade,
    eligible_tier,
    get_tiers,
    membership_to_dict,
    record_purchase,
)


@pytest.fixture()
def ladder(db_session, gold_tier):
    bronze = MembershipTier(name="Bronze", level=0, min_annual_purchase=0)
    silver = MembershipTier(name="Silver", level=1, min_annual_purchase=1_000_000)
    db_session.add_all([bronze, silver])
    db_session.commit()
    return {"bronze": bronze, "silver": silver, "gold": gold_tier}


def test_tiers_listed_lowest_first(db_session, ladder):
    assert [t.name for t in get_tiers(db_session)] == ["Bronze", "Silver", "Gold"]


def test_eligible_tier_boundaries(db_session, ladder):
    assert eligible_tier(db_session, 999_999).name == "Bronze"
    assert eligible_tier(db_session, 1_000_000).name == "Silver"
    assert eligible_tier(db_session, 50_000_000).name == "Gold"


class TestCheckUpgrade:
    def test_moves_up(self, db_session, test_user, ladder):
        db_session.add(UserMembership(user_id=test_user.id, tier_id=ladder["bronze"].id, annual_purchase_amount=1_200_000))
        db_session.commit()

        result = check_upgrade(db_session, test_user.id)
        assert result["upgraded"] is True
        assert result["previous_tier"] == "Bronze"
        assert result["tier"]["name"] == "Silver"

    def test_already_at_best_tier(self, db_session, test_user, gold_member, ladder):
        result = check_upgrade(db_session, test_user.id)
        assert result["upgraded"] is False
        assert result["tier"]["name"] == "Gold"

    def test_never_demotes(self, db_session, test_user, gold_member, ladder):
        gold_member.annual_purchase_amount = 0
        db_session.commit()
        assert check_upgrade(db_session, test_user.id)["upgraded"] is False
        db_session.refresh(gold_member)
        assert gold_member.tier_id == ladder["gold"].id

    def test_first_membership_gets_base_tier(self, db_session, test_user, ladder):
        result = check_upgrade(db_session, test_user.id)
        assert result["upgraded"] is True
        assert result["previous_tier"] is None
        membership = db_session.query(UserMembership).filter_by(user_id=test_user.id).one()
        assert membership.tier_id == ladder["bronze"].id

    def test_no_tiers_configured(self, db_session, test_user):
        assert check_upgrade(db_session, test_user.id) == {"upgraded": False, "tier": None}


class TestRecordPurchase:
    def test_adds_to_existing(self, db_session, test_user, gold_member):
        record_purchase(db_session, test_user.id, 250_000)
        db_session.commit()
        assert gold_member.annual_purchase_amount == 6_250_000
        assert membership_to_dict(gold_member)["tier"]["name"] == "Gold"

    def test_without_tiers_is_noop(self, db_session, test_user):
        record_purchase(db_session, test_user.id, 250_000)
        db_session.commit()
        assert db_session.query(UserMembership).count() == 0

"""
test_faq_service.py — FAQ browsing, search and counters

Called by: pytest
Depends on: wholesale/services/faq_service.py, conftest.py
"""

import pytest

from wholesale.models import FaqCategory, FaqItem
from wholesale.services.errors import InvalidInputError, NotFoundError
from wholesale.services.faq_service import (
    create_category,
    create_item,
    get_categories,
    get_item,
    get_items_by_category,
    item_to_dict,
    mark_helpful,
    search,
)


@pytest.fixture()
def shipping(db_session):
    category = create_category(db_session, "Shipping & Delivery", icon="truck", sort_order=2)
    create_item(db_session, category.id, "How long does shipping take?", "Usually 5 to 10 days.", sort_order=1)
    create_item(db_session, category.id, "Do you ship 100% of orders insured?", "Yes, all of them.", sort_order=0)
    return category


class TestBrowse:
    def test_categories_sorted_and_active_only(self, db_session, shipping):
        create_category(db_session, "Payments", sort_order=1)
        db_session.add(FaqCategory(name="Hidden", slug="hidden", is_active=False))
        db_session.commit()
        assert [c.name for c in get_categories(db_session)] == ["Payments", "Shipping & Delivery"]

    def test_slug_from_name(self, shipping):
        assert shipping.slug == "shipping-delivery"

    def test_items_sorted(self, db_session, shipping):
        items = get_items_by_category(db_session, shipping.id)
        assert [i.sort_order for i in items] == [0, 1]

    def test_create_item_unknown_category(self, db_session):
        with pytest.raises(NotFoundError):
            create_item(db_session, 999, "Q?", "A.")


class TestCounters:
    def test_view_counted_each_read(self, db_session, shipping):
        item_id = get_items_by_category(db_session, shipping.id)[0].id
        get_item(db_session, item_id)
        assert get_item(db_session, item_id).views == 2

    def test_inactive_item_hidden(self, db_session, shipping):
        item = get_items_by_category(db_session, shipping.id)[0]
        item.is_active = False
        db_session.commit()
        with pytest.raises(NotFoundError):
            get_item(db_session, item.id)

    def test_feedback(self, db_session, shipping):
        item_id = get_items_by_category(db_session, shipping.id)[0].id
        mark_helpful(db_session, item_id, True)
        mark_helpful(db_session, item_id, True)
        item = mark_helpful(db_session, item_id, False)
        assert (item.helpful, item.not_helpful) == (2, 1)
        assert item_to_dict(item)["helpful"] == 2

    def test_feedback_unknown_item(self, db_session):
        with pytest.raises(NotFoundError):
            mark_helpful(db_session, 999, True)


class TestSearch:
    def test_matches_question_or_answer_case_insensitive(self, db_session, shipping):
        assert len(search(db_session, "SHIPPING")) == 1
        assert len(search(db_session, "all of them")) == 1

    def test_like_wildcards_are_literal(self, db_session, shipping):
        results = search(db_session, "100%")
        assert [r.question for r in results] == ["Do you ship 100% of orders insured?"]
        assert search(db_session, "1_0") == []

    def test_ordered_by_helpful(self, db_session, shipping):
        items = get_items_by_category(db_session, shipping.id)
        mark_helpful(db_session, items[1].id, True)
        results = search(db_session, "ship")
        assert results[0].id == items[1].id

    @pytest.mark.parametrize("term", ["", " ", "a", " b "])
    def test_too_short(self, db_session, term):
        with pytest.raises(InvalidInputError):
            search(db_session, term)

    def test_limit(self, db_session, shipping):
        for n in range(25):
            db_session.add(FaqItem(category_id=shipping.id, question=f"Pallet question {n}", answer="-"))
        db_session.commit()
        assert len(search(db_session, "pallet")) == 20

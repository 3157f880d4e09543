"""
test_cart_service.py — Cart lines, MOQ and live totals

Called by: pytest
Depends on: wholesale/services/cart_service.py, conftest.py
"""

import pytest

from wholesale.models import CartItem
from wholesale.services import cart_service
from wholesale.services.errors import InvalidInputError, NotFoundError


def test_add_merges_same_product(db_session, test_user, test_product):
    cart_service.add_item(db_session, test_user, test_product.id, 5)
    line = cart_service.add_item(db_session, test_user, test_product.id, 7)
    assert line.quantity == 12
    assert db_session.query(CartItem).count() == 1


def test_moq_enforced(db_session, test_user, test_product):
    test_product.moq = 10
    db_session.commit()
    with pytest.raises(InvalidInputError, match="Minimum order quantity"):
        cart_service.add_item(db_session, test_user, test_product.id, 9)


def test_selected_moq_raises_floor(db_session, test_user, test_product):
    with pytest.raises(InvalidInputError):
        cart_service.add_item(db_session, test_user, test_product.id, 50, selected_moq=100)
    line = cart_service.add_item(db_session, test_user, test_product.id, 100, selected_moq=100)
    with pytest.raises(InvalidInputError):
        cart_service.update_item(db_session, test_user, line.id, 99)


def test_inactive_product_not_addable(db_session, test_user, test_product):
    test_product.active = False
    db_session.commit()
    with pytest.raises(NotFoundError):
        cart_service.add_item(db_session, test_user, test_product.id, 1)


def test_other_users_line_is_invisible(db_session, test_user, other_user, test_product):
    line = cart_service.add_item(db_session, test_user, test_product.id, 3)
    with pytest.raises(NotFoundError):
        cart_service.update_item(db_session, other_user, line.id, 4)
    with pytest.raises(NotFoundError):
        cart_service.remove_item(db_session, other_user, line.id)
    assert cart_service.get_items(db_session, other_user) == []


def test_remove_and_clear(db_session, test_user, other_user, test_product):
    line = cart_service.add_item(db_session, test_user, test_product.id, 3)
    cart_service.remove_item(db_session, test_user, line.id)
    assert cart_service.get_items(db_session, test_user) == []

    cart_service.add_item(db_session, test_user, test_product.id, 3)
    cart_service.add_item(db_session, other_user, test_product.id, 3)
    assert cart_service.clear(db_session, test_user) == 1
    assert len(cart_service.get_items(db_session, other_user)) == 1


def test_total_uses_tiers_and_member_discount(
    db_session, test_user, tiered_product, gold_member, gold_tier, make_discount
):
    make_discount(gold_tier, 10, product=tiered_product)
    cart_service.add_item(db_session, test_user, tiered_product.id, 500)

    total = cart_service.get_total(db_session, test_user)
    assert total["item_count"] == 1
    assert total["total_quantity"] == 500
    assert total["items"][0]["unit_price"] == 720
    assert total["total"] == 360_000


def test_item_to_dict(db_session, test_user, test_product):
    line = cart_service.add_item(db_session, test_user, test_product.id, 2)
    out = cart_service.item_to_dict(line)
    assert out["product_slug"] == "wireless-speaker"
    assert out["base_price"] == 1000

"""
cart_service.py — Per-user shopping cart

Business Rules:
- One line per (user, product); adding again merges quantities
- Line quantity must meet the product MOQ (or the buyer's selected MOQ)
- Users can only touch their own cart lines
- Totals are priced live through pricing_service (tier + member discount)

Called by: routers/cart.py
Depends on: models, services/pricing_service
"""

import logging

from sqlalchemy.orm import Session

from ..database import transaction
from ..models import CartItem, Product, User
from .errors import InvalidInputError, NotFoundError
from .pricing_service import price_for_quantity

log = logging.getLogger("wholesale.cart")


def get_items(db: Session, user: User) -> list[CartItem]:
    return db.query(CartItem).filter(CartItem.user_id == user.id).order_by(CartItem.id).all()


def _get_line(db: Session, user: User, item_id: int) -> CartItem:
    item = db.get(CartItem, item_id)
    if not item or item.user_id != user.id:
        raise NotFoundError("Cart item not found", cart_item_id=item_id)
    return item


def _check_moq(product: Product, quantity: int, selected_moq: int | None) -> None:
    floor = max(product.moq or 1, selected_moq or 0)
    if quantity < floor:
        raise InvalidInputError(f"Minimum order quantity for {product.sku} is {floor}", moq=floor)


def add_item(db: Session, user: User, product_id: int, quantity: int, selected_moq: int | None = None) -> CartItem:
    product = db.get(Product, product_id)
    if not product or not product.active:
        raise NotFoundError("Product not found", product_id=product_id)

    with transaction(db):
        item = db.query(CartItem).filter_by(user_id=user.id, product_id=product_id).first()
        if item:
            new_qty = item.quantity + quantity
            _check_moq(product, new_qty, selected_moq or item.selected_moq)
            item.quantity = new_qty
            if selected_moq:
                item.selected_moq = selected_moq
        else:
            _check_moq(product, quantity, selected_moq)
            item = CartItem(
                user_id=user.id, product_id=product_id, quantity=quantity, selected_moq=selected_moq
            )
            db.add(item)
    return item


def update_item(db: Session, user: User, item_id: int, quantity: int) -> CartItem:
    item = _get_line(db, user, item_id)
    _check_moq(item.product, quantity, item.selected_moq)
    with transaction(db):
        item.quantity = quantity
    return item


def remove_item(db: Session, user: User, item_id: int) -> None:
    item = _get_line(db, user, item_id)
    with transaction(db):
        db.delete(item)


def clear(db: Session, user: User) -> int:
    with transaction(db):
        count = db.query(CartItem).filter(CartItem.user_id == user.id).delete(synchronize_session=False)
    return count


def get_total(db: Session, user: User) -> dict:
    lines = []
    for item in get_items(db, user):
        priced = price_for_quantity(db, item.product, item.quantity, user.id)
        lines.append({"cart_item_id": item.id, **priced})
    return {
        "items": lines,
        "item_count": len(lines),
        "total_quantity": sum(l["quantity"] for l in lines),
        "total": sum(l["line_total"] for l in lines),
    }


def item_to_dict(item: CartItem) -> dict:
    p = item.product
    return {
        "id": item.id,
        "product_id": item.product_id,
        "product_name": p.name if p else None,
        "product_slug": p.slug if p else None,
        "base_price": p.base_price if p else None,
        "moq": p.moq if p else None,
        "quantity": item.quantity,
        "selected_moq": item.selected_moq,
    }

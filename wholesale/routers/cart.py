"""
cart.py — Shopping cart

Called by: main.py (router mount)
Depends on: services/cart_service
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_user
from ..models import User
from ..schemas.cart import CartAdd, CartUpdate
from ..services import cart_service as cart

router = APIRouter(tags=["cart"])


@router.get("/api/cart")
def cart_items(user: User = Depends(require_user), db: Session = Depends(get_db)):
    return [cart.item_to_dict(i) for i in cart.get_items(db, user)]


@router.post("/api/cart")
def add_to_cart(body: CartAdd, user: User = Depends(require_user), db: Session = Depends(get_db)):
    item = cart.add_item(db, user, body.product_id, body.quantity, body.selected_moq)
    return cart.item_to_dict(item)


@router.get("/api/cart/total")
def cart_total(user: User = Depends(require_user), db: Session = Depends(get_db)):
    return cart.get_total(db, user)


@router.put("/api/cart/{item_id}")
def update_cart_item(
    item_id: int,
    body: CartUpdate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    return cart.item_to_dict(cart.update_item(db, user, item_id, body.quantity))


@router.delete("/api/cart/{item_id}")
def remove_cart_item(item_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)):
    cart.remove_item(db, user, item_id)
    return {"success": True}


@router.delete("/api/cart")
def clear_cart(user: User = Depends(require_user), db: Session = Depends(get_db)):
    return {"removed": cart.clear(db, user)}

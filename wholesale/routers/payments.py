"""
payments.py — Checkout, order views and the Stripe webhook

The webhook is unauthenticated; it is trusted only after the Stripe-Signature
HMAC check passes.

Called by: main.py (router mount)
Depends on: services/order_service, services/stripe_client
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_user
from ..models import User
from ..schemas.orders import CheckoutCreate, PayOrder
from ..services import order_service
from ..services.stripe_client import verify_webhook

router = APIRouter(tags=["payments"])


@router.post("/api/payments/checkout")
async def create_checkout(
    body: CheckoutCreate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    return await order_service.create_checkout_session(
        db,
        user,
        [item.model_dump() for item in body.items],
        shipping_address=body.shipping_address,
        notes=body.notes,
        customer_email=body.customer_email,
        customer_name=body.customer_name,
    )


@router.post("/api/payments/pay-order")
async def pay_order(body: PayOrder, user: User = Depends(require_user), db: Session = Depends(get_db)):
    """Open a checkout session for an existing pending order (e.g. one converted from a quote)."""
    return await order_service.pay_order(db, body.order_id, user)


@router.get("/api/payments/orders")
def user_orders(user: User = Depends(require_user), db: Session = Depends(get_db)):
    return [order_service.order_to_dict(o, include_items=False) for o in order_service.get_user_orders(db, user)]


@router.get("/api/payments/orders/{order_id}")
def order_details(order_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)):
    return order_service.order_to_dict(order_service.get_order(db, order_id, user))


@router.post("/api/payments/webhook")
async def stripe_webhook(request: Request, db: Session = Depends(get_db)):
    payload = await request.body()
    event = verify_webhook(payload, request.headers.get("stripe-signature"))
    return order_service.handle_webhook_event(db, event)

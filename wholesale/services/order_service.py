"""
order_service.py — Checkout, payment sessions and order reconciliation

Turns a cart-style item list (or an order converted from a quote) into a
pending order plus a Stripe Checkout session, and completes orders when the
provider's webhook confirms payment.

Business Rules:
- Prices are always computed server-side (tier price + member discount);
  client-sent prices are ignored
- Order and its items are written in one transaction before the provider is called
- Provider failure on a fresh checkout marks the order failed and raises
  ProviderError (502); payment errors are never swallowed
- Quote-converted orders stay pending when the provider fails so the buyer can retry
- Webhook completion is idempotent; one conditional UPDATE decides which
  delivery completes the order, and only that one records the purchase
- Completing an order adds its total to the buyer's annual purchase amount
- Buyers only see their own orders; admins see all

Called by: routers/payments.py
Depends on: services/pricing_service, services/membership_service,
            services/stripe_client, models
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import update
from sqlalchemy.orm import Session

from ..config import settings
from ..database import transaction
from ..models import Order, OrderItem, Product, User
from .errors import (
    InvalidInputError,
    NotFoundError,
    PermissionDeniedError,
    ProviderError,
    storage_errors,
)
from .membership_service import record_purchase
from .pricing_service import price_for_quantity
from .quote_service import order_number
from .stripe_client import StripeClient

log = logging.getLogger("wholesale.orders")


def _checkout_params(order: Order, user: User, line_items: list[dict]) -> dict:
    base = settings.public_base_url.rstrip("/")
    metadata = {"order_id": order.id, "user_id": user.id}
    if order.quote_id:
        metadata["quote_id"] = order.quote_id
    return {
        "mode": "payment",
        "success_url": f"{base}/orders/{order.id}?status=success&session_id={{CHECKOUT_SESSION_ID}}",
        "cancel_url": f"{base}/cart?status=cancelled&order_id={order.id}",
        "customer_email": order.customer_email,
        "client_reference_id": str(user.id),
        "metadata": metadata,
        "line_items": line_items,
    }


def _line_item(name: str, unit_amount: int, quantity: int, currency: str) -> dict:
    return {
        "quantity": quantity,
        "price_data": {
            "currency": currency,
            "unit_amount": unit_amount,
            "product_data": {"name": name[:250]},
        },
    }


async def create_checkout_session(
    db: Session,
    user: User,
    items: list[dict],
    shipping_address: dict | None = None,
    notes: str | None = None,
    customer_email: str | None = None,
    customer_name: str | None = None,
    client: StripeClient | None = None,
) -> dict:
    """Price items, create a pending order, and open a provider checkout session."""
    if not items:
        raise InvalidInputError("Cart is empty")

    product_ids = [item["product_id"] for item in items]
    products = {
        p.id: p
        for p in db.query(Product).filter(Product.id.in_(product_ids), Product.active.is_(True))
    }
    priced = []
    for item in items:
        product = products.get(item["product_id"])
        if not product:
            raise NotFoundError("Product not found", product_id=item["product_id"])
        quantity = item["quantity"]
        if quantity > product.stock:
            raise InvalidInputError(f"Only {product.stock} units of {product.sku} in stock")
        priced.append((product, price_for_quantity(db, product, quantity, user.id)))

    currency = settings.default_currency
    total = sum(p["line_total"] for _, p in priced)

    with storage_errors("creating order"), transaction(db):
        order = Order(
            user_id=user.id,
            status="pending",
            total_amount=total,
            currency=currency,
            customer_email=customer_email or user.email,
            customer_name=customer_name or user.name,
            shipping_address=shipping_address,
            notes=notes,
        )
        for product, p in priced:
            order.items.append(
                OrderItem(
                    product_id=product.id,
                    quantity=p["quantity"],
                    unit_price=p["unit_price"],
                    total_price=p["line_total"],
                )
            )
        db.add(order)

    line_items = [
        _line_item(product.name, p["unit_price"], p["quantity"], currency) for product, p in priced
    ]
    client = client or StripeClient()
    try:
        session = await client.create_checkout_session(_checkout_params(order, user, line_items))
    except ProviderError:
        with transaction(db):
            order.status = "failed"
        log.error("Checkout for order %s failed at the provider", order.id)
        raise

    with storage_errors("saving checkout session"), transaction(db):
        order.stripe_session_id = session.get("id")
    log.info("Checkout session %s opened for order %s (%s cents)", order.stripe_session_id, order.id, total)
    return {"order_id": order.id, "session_id": session.get("id"), "checkout_url": session.get("url")}


async def pay_order(db: Session, order_id: int, user: User, client: StripeClient | None = None) -> dict:
    """Open a checkout session for an existing pending order (e.g. from a quote)."""
    order = get_order(db, order_id, user)
    if order.status != "pending":
        raise InvalidInputError(f"Order is {order.status}; only pending orders can be paid")

    # Quote lines carry rounded discounted totals, so each line is billed as one unit
    line_items = [
        _line_item(
            f"{item.product.name if item.product else item.product_id} x {item.quantity}",
            item.total_price,
            1,
            order.currency,
        )
        for item in order.items
    ]
    client = client or StripeClient()
    session = await client.create_checkout_session(_checkout_params(order, user, line_items))

    with storage_errors("saving checkout session"), transaction(db):
        order.stripe_session_id = session.get("id")
    return {"order_id": order.id, "session_id": session.get("id"), "checkout_url": session.get("url")}


def handle_webhook_event(db: Session, event: dict) -> dict:
    """Apply a verified provider event to its order."""
    event_type = event.get("type", "")
    obj = (event.get("data") or {}).get("object") or {}
    if event_type not in ("checkout.session.completed", "checkout.session.expired"):
        return {"status": "ignored", "type": event_type}

    order = None
    if obj.get("id"):
        order = db.query(Order).filter(Order.stripe_session_id == obj["id"]).first()
    if order is None:
        order_id = (obj.get("metadata") or {}).get("order_id")
        if order_id:
            order = db.get(Order, int(order_id))
    if order is None:
        log.warning("Webhook %s for unknown session %s", event_type, obj.get("id"))
        return {"status": "ignored", "type": event_type}

    if order.status == "completed":
        return {"status": "already_completed", "order_id": order.id}

    # Redelivered events can race; the conditional UPDATE lets exactly one win
    if event_type == "checkout.session.completed":
        with storage_errors("reconciling order"), transaction(db):
            result = db.execute(
                update(Order)
                .where(Order.id == order.id, Order.status != "completed")
                .values(
                    status="completed",
                    completed_at=datetime.now(timezone.utc),
                    stripe_payment_intent_id=obj.get("payment_intent"),
                )
                .execution_options(synchronize_session=False)
            )
            won = result.rowcount == 1
            if won:
                record_purchase(db, order.user_id, order.total_amount)
        db.refresh(order)
        if not won:
            return {"status": "already_completed", "order_id": order.id}
    else:
        with storage_errors("reconciling order"), transaction(db):
            db.execute(
                update(Order)
                .where(Order.id == order.id, Order.status == "pending")
                .values(status="cancelled")
                .execution_options(synchronize_session=False)
            )
        db.refresh(order)

    log.info("Order %s -> %s via webhook", order.id, order.status)
    return {"status": order.status, "order_id": order.id}


def get_order(db: Session, order_id: int, user: User) -> Order:
    order = db.get(Order, order_id)
    if not order:
        raise NotFoundError("Order not found", order_id=order_id)
    if order.user_id != user.id and user.role != "admin":
        raise PermissionDeniedError("Not your order")
    return order


def get_user_orders(db: Session, user: User) -> list[Order]:
    return (
        db.query(Order)
        .filter(Order.user_id == user.id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )


def order_to_dict(order: Order, include_items: bool = True) -> dict:
    out = {
        "id": order.id,
        "order_number": order_number(order),
        "user_id": order.user_id,
        "quote_id": order.quote_id,
        "status": order.status,
        "total_amount": order.total_amount,
        "currency": order.currency,
        "customer_email": order.customer_email,
        "customer_name": order.customer_name,
        "shipping_address": order.shipping_address,
        "notes": order.notes,
        "stripe_session_id": order.stripe_session_id,
        "completed_at": order.completed_at.isoformat() if order.completed_at else None,
        "created_at": order.created_at.isoformat() if order.created_at else None,
    }
    if include_items:
        out["items"] = [
            {
                "id": i.id,
                "product_id": i.product_id,
                "product_name": i.product.name if i.product else None,
                "quantity": i.quantity,
                "unit_price": i.unit_price,
                "total_price": i.total_price,
            }
            for i in order.items
        ]
    return out

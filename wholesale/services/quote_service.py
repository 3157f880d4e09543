"""
quote_service.py — Quote lifecycle and quote-to-order conversion

Creates quotes against RFQ inquiries, moves them through their status
machine, keeps the inquiry in step, and converts accepted quotes to orders.

Business Rules:
- Line total = round_half_up(unit_price * quantity * (100 - discount) / 100),
  per line, in cents. Quote total = sum of rounded line totals.
- Totals are computed before any write; quote, items and history are
  written in one transaction (no partial quote ever exists)
- Transitions: draft->sent, sent->accepted, sent->rejected, any->expired
  (except converted quotes). Same-status and every other move is rejected.
- draft/sent quotes past valid_until expire when read
- A new quote for an inquiry is the next revision; it supersedes any
  earlier draft/sent quote. The active quote is the highest revision.
- At most one accepted quote per inquiry; at most one order per quote
- Seller staff (admins) create, send and expire; the buyer or an admin
  accepts, rejects and converts

Called by: routers/quotes.py
Depends on: models, database.transaction, services/errors
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import settings
from ..database import transaction
from ..models import Order, OrderItem, Product, Quote, QuoteHistory, QuoteItem, RfqInquiry, User
from .errors import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    PermissionDeniedError,
    storage_errors,
)

log = logging.getLogger("wholesale.quotes")

QUOTE_STATUSES = ("draft", "sent", "accepted", "rejected", "expired")
OPEN_STATUSES = ("draft", "sent")

VALID_TRANSITIONS = {
    "draft": {"sent", "expired"},
    "sent": {"accepted", "rejected", "expired"},
    "accepted": {"expired"},
    "rejected": {"expired"},
    "expired": set(),
}

# Quote status -> inquiry status it implies
INQUIRY_SYNC = {"sent": "quoted", "accepted": "accepted", "rejected": "rejected"}

_HUNDRED = Decimal(100)


def compute_line_total(unit_price: int, quantity: int, discount=0) -> int:
    """Cents total for one line, rounded half-up."""
    pct = Decimal(str(discount or 0))
    raw = Decimal(unit_price) * quantity * (_HUNDRED - pct) / _HUNDRED
    return int(raw.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _whole_number(value) -> bool:
    # bool is an int subclass; True must not pass as quantity 1
    return isinstance(value, int) and not isinstance(value, bool)


def _validate_line(line: dict, idx: int) -> dict:
    quantity = line.get("quantity")
    unit_price = line.get("unit_price")
    if not _whole_number(quantity) or quantity < 1:
        raise InvalidInputError(f"Line {idx + 1}: quantity must be a positive integer")
    if not _whole_number(unit_price) or unit_price < 0:
        raise InvalidInputError(f"Line {idx + 1}: unit_price must be non-negative cents")
    raw_discount = line.get("discount") or 0
    try:
        discount = Decimal(str(raw_discount))
    except InvalidOperation:
        discount = None
    if isinstance(raw_discount, bool) or discount is None or not discount.is_finite() or not 0 <= discount <= 100:
        raise InvalidInputError(f"Line {idx + 1}: discount must be between 0 and 100")
    return {
        "product_id": line.get("product_id"),
        "quantity": quantity,
        "unit_price": unit_price,
        "discount": discount,
        "total_price": compute_line_total(unit_price, quantity, discount),
        "notes": line.get("notes"),
    }


def _is_admin(user: User) -> bool:
    return user is not None and user.role == "admin"


def _require_admin(user: User, action: str) -> None:
    if not _is_admin(user):
        raise PermissionDeniedError(f"Only seller staff can {action}")


def _require_party(user: User, inquiry: RfqInquiry, action: str) -> None:
    if not _is_admin(user) and inquiry.user_id != user.id:
        raise PermissionDeniedError(f"Not allowed to {action} this quote")


def _history(quote: Quote, action: str, actor_id: int | None, notes: str | None = None):
    quote.history.append(QuoteHistory(action=action, changed_by_id=actor_id, notes=notes))


def _get_quote(db: Session, quote_id: int) -> Quote:
    quote = db.get(Quote, quote_id)
    if not quote:
        raise NotFoundError("Quote not found", quote_id=quote_id)
    return quote


def _apply_expiry(db: Session, quote: Quote, now: datetime | None = None) -> bool:
    """Mark an open quote past its validity as expired. Caller commits."""
    now = now or datetime.now(timezone.utc)
    if quote.status in OPEN_STATUSES and quote.valid_until and quote.valid_until < now:
        quote.status = "expired"
        _history(quote, "expired", None, "Validity period ended")
        log.info("Quote %s expired on read", quote.quote_number)
        return True
    return False


def _refresh_expiry(db: Session, quotes: list[Quote]) -> None:
    now = datetime.now(timezone.utc)
    with storage_errors("expiring quotes"), transaction(db):
        for quote in quotes:
            _apply_expiry(db, quote, now)


def _is_converted(db: Session, quote_id: int) -> bool:
    return db.query(Order.id).filter(Order.quote_id == quote_id).first() is not None


# ── Create ───────────────────────────────────────────────────────────


def create_quote(
    db: Session,
    inquiry_id: int,
    items: list[dict],
    actor: User,
    valid_days: int | None = None,
    notes: str | None = None,
    terms: str | None = None,
    currency: str | None = None,
) -> Quote:
    """Create the next quote revision for an inquiry."""
    _require_admin(actor, "create quotes")
    inquiry = db.get(RfqInquiry, inquiry_id)
    if not inquiry:
        raise NotFoundError("Inquiry not found", inquiry_id=inquiry_id)
    if not items:
        raise InvalidInputError("A quote needs at least one line item")
    valid_days = settings.quote_valid_days if valid_days is None else valid_days
    if valid_days < 1:
        raise InvalidInputError("valid_days must be at least 1")

    lines = [_validate_line(line, i) for i, line in enumerate(items)]
    product_ids = {line["product_id"] for line in lines}
    found = {pid for (pid,) in db.query(Product.id).filter(Product.id.in_(product_ids))}
    missing = product_ids - found
    if missing:
        raise NotFoundError("Product not found", product_ids=sorted(missing, key=str))
    total = sum(line["total_price"] for line in lines)

    now = datetime.now(timezone.utc)
    try:
        with storage_errors("creating quote"), transaction(db):
            latest = (
                db.query(func.max(Quote.revision)).filter(Quote.inquiry_id == inquiry.id).scalar()
            ) or 0
            superseded = (
                db.query(Quote)
                .filter(Quote.inquiry_id == inquiry.id, Quote.status.in_(OPEN_STATUSES))
                .all()
            )
            quote = Quote(
                inquiry_id=inquiry.id,
                quote_number=f"QT-{uuid.uuid4().hex[:12].upper()}",
                revision=latest + 1,
                status="draft",
                total_amount=total,
                currency=(currency or settings.default_currency).lower(),
                valid_until=now + timedelta(days=valid_days),
                notes=notes,
                terms=terms,
                created_by_id=actor.id,
            )
            for old in superseded:
                old.status = "expired"
                _history(old, "superseded", actor.id, f"Superseded by {quote.quote_number}")
            for line in lines:
                quote.items.append(QuoteItem(**line))
            _history(quote, "created", actor.id, notes)
            db.add(quote)
            db.flush()
    except IntegrityError as e:
        raise ConflictError("Another revision of this quote was created concurrently") from e

    log.info(
        "Quote %s rev %s created for inquiry %s: %s cents",
        quote.quote_number, quote.revision, inquiry.id, total,
    )
    return quote


# ── Status ───────────────────────────────────────────────────────────


def update_quote_status(
    db: Session, quote_id: int, new_status: str, actor: User, notes: str | None = None
) -> Quote:
    """Move a quote along the status machine and sync its inquiry."""
    if new_status not in QUOTE_STATUSES:
        raise InvalidInputError(f"Unknown quote status: {new_status}")
    quote = _get_quote(db, quote_id)
    inquiry = quote.inquiry

    if new_status in ("accepted", "rejected"):
        _require_party(actor, inquiry, "accept" if new_status == "accepted" else "reject")
    else:
        _require_admin(actor, f"mark quotes {new_status}")

    _refresh_expiry(db, [quote])

    current = quote.status
    if new_status == current:
        raise InvalidInputError(f"Quote is already {current}")
    if new_status not in VALID_TRANSITIONS[current]:
        raise InvalidInputError(f"Cannot move quote from {current} to {new_status}")
    if new_status == "expired" and _is_converted(db, quote.id):
        raise InvalidInputError("Quote was converted to an order and cannot expire")
    if new_status == "accepted":
        other = (
            db.query(Quote.id)
            .filter(Quote.inquiry_id == quote.inquiry_id, Quote.status == "accepted", Quote.id != quote.id)
            .first()
        )
        if other:
            raise ConflictError("Another quote for this inquiry is already accepted", quote_id=other.id)

    now = datetime.now(timezone.utc)
    with storage_errors("updating quote status"), transaction(db):
        quote.status = new_status
        if new_status == "sent":
            quote.sent_at = now
        elif new_status in ("accepted", "rejected"):
            quote.responded_at = now
        _history(quote, new_status, actor.id, notes)

        inquiry_status = INQUIRY_SYNC.get(new_status)
        if inquiry_status:
            inquiry.status = inquiry_status
            if new_status == "sent":
                inquiry.quoted_price = quote.total_amount
                inquiry.quoted_at = now

    log.info("Quote %s: %s -> %s by user %s", quote.quote_number, current, new_status, actor.id)
    return quote


def expire_stale_quotes(db: Session, now: datetime | None = None) -> int:
    """Expire every open quote past its validity. Returns the count."""
    now = now or datetime.now(timezone.utc)
    stale = (
        db.query(Quote)
        .filter(Quote.status.in_(OPEN_STATUSES), Quote.valid_until < now)
        .all()
    )
    with storage_errors("expiring quotes"), transaction(db):
        for quote in stale:
            _apply_expiry(db, quote, now)
    if stale:
        log.info("Expired %d stale quotes", len(stale))
    return len(stale)


# ── Conversion ───────────────────────────────────────────────────────


def convert_quote_to_order(db: Session, quote_id: int, actor: User) -> Order:
    """Create exactly one pending order from an accepted quote."""
    quote = _get_quote(db, quote_id)
    inquiry = quote.inquiry
    _require_party(actor, inquiry, "convert")
    if quote.status != "accepted":
        raise InvalidInputError(f"Only accepted quotes can be converted (status: {quote.status})")

    existing = db.query(Order).filter(Order.quote_id == quote.id).first()
    if existing:
        raise ConflictError("Quote already converted to an order", order_id=existing.id)

    buyer = inquiry.user
    try:
        with storage_errors("converting quote"), transaction(db):
            order = Order(
                user_id=inquiry.user_id,
                quote_id=quote.id,
                status="pending",
                total_amount=quote.total_amount,
                currency=quote.currency,
                customer_email=inquiry.contact_email or (buyer.email if buyer else None),
                customer_name=inquiry.contact_name or (buyer.name if buyer else None),
                notes=f"Converted from quote {quote.quote_number}",
            )
            db.add(order)
            db.flush()
            for item in quote.items:
                order.items.append(
                    OrderItem(
                        product_id=item.product_id,
                        quantity=item.quantity,
                        unit_price=item.unit_price,
                        total_price=item.total_price,
                    )
                )
            _history(quote, "converted", actor.id, f"Order {order_number(order)}")
            db.flush()
    except IntegrityError as e:
        raise ConflictError("Quote already converted to an order") from e

    log.info("Quote %s converted to order %s", quote.quote_number, order.id)
    return order


def order_number(order: Order) -> str:
    return f"ORD-{order.id}"


# ── Reads ────────────────────────────────────────────────────────────


def get_quote(db: Session, quote_id: int, actor: User) -> Quote:
    quote = _get_quote(db, quote_id)
    _require_party(actor, quote.inquiry, "view")
    _refresh_expiry(db, [quote])
    return quote


def list_inquiry_quotes(db: Session, inquiry_id: int, actor: User) -> list[Quote]:
    """All revisions for an inquiry, newest first."""
    inquiry = db.get(RfqInquiry, inquiry_id)
    if not inquiry:
        raise NotFoundError("Inquiry not found", inquiry_id=inquiry_id)
    _require_party(actor, inquiry, "view")
    quotes = (
        db.query(Quote)
        .filter(Quote.inquiry_id == inquiry_id)
        .order_by(Quote.revision.desc())
        .all()
    )
    _refresh_expiry(db, quotes)
    return quotes


def get_active_quote(db: Session, inquiry_id: int, actor: User) -> Quote | None:
    """The highest-revision quote for an inquiry, or None."""
    quotes = list_inquiry_quotes(db, inquiry_id, actor)
    return quotes[0] if quotes else None


# ── Serializers ──────────────────────────────────────────────────────


def _iso(dt):
    return dt.isoformat() if dt else None


def quote_item_to_dict(item: QuoteItem) -> dict:
    return {
        "id": item.id,
        "product_id": item.product_id,
        "product_name": item.product.name if item.product else None,
        "quantity": item.quantity,
        "unit_price": item.unit_price,
        "discount": float(item.discount or 0),
        "total_price": item.total_price,
        "notes": item.notes,
    }


def history_to_dict(entry: QuoteHistory) -> dict:
    return {
        "id": entry.id,
        "action": entry.action,
        "changed_by": entry.changed_by_id,
        "notes": entry.notes,
        "created_at": _iso(entry.created_at),
    }


def quote_to_dict(quote: Quote) -> dict:
    return {
        "id": quote.id,
        "inquiry_id": quote.inquiry_id,
        "quote_number": quote.quote_number,
        "revision": quote.revision,
        "status": quote.status,
        "total_amount": quote.total_amount,
        "currency": quote.currency,
        "valid_until": _iso(quote.valid_until),
        "notes": quote.notes,
        "terms": quote.terms,
        "created_by": quote.created_by_id,
        "sent_at": _iso(quote.sent_at),
        "responded_at": _iso(quote.responded_at),
        "created_at": _iso(quote.created_at),
    }


def quote_detail(quote: Quote) -> dict:
    return {
        "quote": quote_to_dict(quote),
        "items": [quote_item_to_dict(i) for i in quote.items],
        "history": [history_to_dict(h) for h in quote.history],
    }

"""
quotes.py — Quote engine endpoints

Staff create quote revisions and send them; buyers accept or reject and turn
an accepted quote into an order. The "sent" transition emails the buyer after
the status change has committed.

Called by: main.py (router mount)
Depends on: services/quote_service, services/order_service, services/notification_service
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_admin, require_user
from ..models import User
from ..schemas.quotes import QuoteCreate, QuoteStatusUpdate
from ..services import notification_service
from ..services import quote_service as qs
from ..services.order_service import order_to_dict

log = logging.getLogger("wholesale.quotes")

router = APIRouter(tags=["quotes"])


@router.post("/api/quotes")
def create_quote(
    body: QuoteCreate,
    user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    quote = qs.create_quote(
        db,
        body.inquiry_id,
        [line.model_dump() for line in body.items],
        user,
        valid_days=body.valid_days,
        notes=body.notes,
        terms=body.terms,
        currency=body.currency,
    )
    return qs.quote_detail(quote)


@router.post("/api/quotes/expire-stale")
def expire_stale_quotes(user: User = Depends(require_admin), db: Session = Depends(get_db)):
    return {"expired": qs.expire_stale_quotes(db)}


@router.get("/api/quotes/inquiry/{inquiry_id}")
def list_inquiry_quotes(
    inquiry_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    return [qs.quote_to_dict(q) for q in qs.list_inquiry_quotes(db, inquiry_id, user)]


@router.get("/api/quotes/inquiry/{inquiry_id}/active")
def active_quote(
    inquiry_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    quote = qs.get_active_quote(db, inquiry_id, user)
    return qs.quote_detail(quote) if quote else None


@router.get("/api/quotes/{quote_id}")
def get_quote(quote_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)):
    return qs.quote_detail(qs.get_quote(db, quote_id, user))


@router.put("/api/quotes/{quote_id}/status")
async def update_quote_status(
    quote_id: int,
    body: QuoteStatusUpdate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    quote = qs.update_quote_status(db, quote_id, body.status, user, notes=body.notes)
    result = qs.quote_detail(quote)
    if quote.status == "sent":
        inquiry = quote.inquiry
        to = inquiry.contact_email or (inquiry.user.email if inquiry.user else None)
        result["email_sent"] = await notification_service.send_quote_email(quote, to)
    return result


@router.post("/api/quotes/{quote_id}/convert")
def convert_quote(quote_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)):
    order = qs.convert_quote_to_order(db, quote_id, user)
    return order_to_dict(order)

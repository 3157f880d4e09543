"""
rfq.py — Buyer RFQ submission

The inquiry is committed first; confirmation and sales emails go out after
and never fail the request.

Called by: main.py (router mount)
Depends on: services/rfq_service, services/notification_service
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..dependencies import require_user
from ..models import User
from ..rate_limit import limiter
from ..schemas.rfq import RfqSubmit
from ..services import notification_service, rfq_service

log = logging.getLogger("wholesale.rfq")

router = APIRouter(tags=["rfq"])


@router.post("/api/rfq")
@limiter.limit(settings.rate_limit_submit)
async def submit_rfq(
    request: Request,
    body: RfqSubmit,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    inquiry = rfq_service.submit_inquiry(db, user, **body.model_dump())
    product_name = inquiry.product.name
    email_sent = await notification_service.send_inquiry_confirmation(inquiry, product_name)
    await notification_service.send_rfq_received(inquiry, product_name)
    return {**rfq_service.inquiry_to_dict(inquiry), "email_sent": email_sent}


@router.get("/api/rfq/mine")
def my_inquiries(user: User = Depends(require_user), db: Session = Depends(get_db)):
    return [rfq_service.inquiry_to_dict(i) for i in rfq_service.get_user_inquiries(db, user)]

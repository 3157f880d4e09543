"""
inquiries.py — Re-send inquiry confirmations (email and/or SMS)

Called by: main.py (router mount)
Depends on: services/rfq_service
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..dependencies import require_user
from ..models import User
from ..rate_limit import limiter
from ..schemas.rfq import InquiryNotify
from ..services import rfq_service

router = APIRouter(tags=["rfq"])


@router.post("/api/inquiries/notify")
@limiter.limit(settings.rate_limit_submit)
async def send_inquiry_notification(
    request: Request,
    body: InquiryNotify,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    record = await rfq_service.send_inquiry_notification(
        db, body.inquiry_id, user, send_email=body.send_email, send_sms=body.send_sms
    )
    return rfq_service.notification_to_dict(record)

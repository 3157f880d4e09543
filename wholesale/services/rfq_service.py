"""
rfq_service.py — Buyer RFQ inquiries and their notification records

Business Rules:
- An inquiry targets one active product; quantity must meet the product MOQ
- Contact email falls back to the account email
- New inquiries start as pending; quote_service moves the status afterwards
- Each notification attempt is recorded (email_sent / sms_sent + timestamps)
  whether or not the provider accepted it

Called by: routers/rfq.py, routers/inquiries.py
Depends on: models, services/notification_service
"""

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from ..database import transaction
from ..models import InquiryNotification, Product, RfqInquiry, User
from . import notification_service
from .errors import InvalidInputError, NotFoundError, PermissionDeniedError

log = logging.getLogger("wholesale.rfq")


def submit_inquiry(
    db: Session,
    user: User,
    product_id: int,
    quantity: int,
    company_name: str | None = None,
    contact_name: str | None = None,
    contact_email: str | None = None,
    contact_phone: str | None = None,
    message: str | None = None,
) -> RfqInquiry:
    product = db.get(Product, product_id)
    if not product or not product.active:
        raise NotFoundError("Product not found", product_id=product_id)
    if quantity < (product.moq or 1):
        raise InvalidInputError(
            f"Minimum order quantity for {product.sku} is {product.moq}", moq=product.moq
        )

    with transaction(db):
        inquiry = RfqInquiry(
            user_id=user.id,
            product_id=product_id,
            quantity=quantity,
            company_name=company_name,
            contact_name=contact_name or user.name,
            contact_email=contact_email or user.email,
            contact_phone=contact_phone,
            message=message,
            status="pending",
        )
        db.add(inquiry)
    log.info("RFQ-%d submitted by user %d for product %d x%d", inquiry.id, user.id, product_id, quantity)
    return inquiry


def get_user_inquiries(db: Session, user: User) -> list[RfqInquiry]:
    return (
        db.query(RfqInquiry)
        .filter(RfqInquiry.user_id == user.id)
        .order_by(RfqInquiry.created_at.desc(), RfqInquiry.id.desc())
        .all()
    )


def get_inquiry(db: Session, inquiry_id: int, user: User) -> RfqInquiry:
    inquiry = db.get(RfqInquiry, inquiry_id)
    if not inquiry:
        raise NotFoundError("Inquiry not found", inquiry_id=inquiry_id)
    if inquiry.user_id != user.id and user.role != "admin":
        raise PermissionDeniedError("Not allowed to view this inquiry")
    return inquiry


async def send_inquiry_notification(
    db: Session, inquiry_id: int, user: User, send_email: bool = True, send_sms: bool = False
) -> InquiryNotification:
    """Send the confirmation over the requested channels and record the outcome."""
    inquiry = get_inquiry(db, inquiry_id, user)
    product_name = inquiry.product.name if inquiry.product else f"product {inquiry.product_id}"

    email_ok = False
    sms_ok = False
    if send_email:
        email_ok = await notification_service.send_inquiry_confirmation(inquiry, product_name)
    if send_sms and inquiry.contact_phone:
        sms_ok = await notification_service.send_sms(
            inquiry.contact_phone,
            f"RFQ-{inquiry.id} received: {inquiry.quantity} x {product_name}. We'll be in touch soon.",
        )

    now = datetime.now(timezone.utc)
    with transaction(db):
        record = InquiryNotification(
            inquiry_id=inquiry.id,
            user_id=inquiry.user_id,
            email_sent=email_ok,
            email_sent_at=now if email_ok else None,
            sms_sent=sms_ok,
            sms_sent_at=now if sms_ok else None,
        )
        db.add(record)
    return record


def inquiry_to_dict(i: RfqInquiry) -> dict:
    return {
        "id": i.id,
        "user_id": i.user_id,
        "product_id": i.product_id,
        "product_name": i.product.name if i.product else None,
        "quantity": i.quantity,
        "company_name": i.company_name,
        "contact_name": i.contact_name,
        "contact_email": i.contact_email,
        "contact_phone": i.contact_phone,
        "message": i.message,
        "status": i.status,
        "quoted_price": i.quoted_price,
        "quoted_at": i.quoted_at.isoformat() if i.quoted_at else None,
        "created_at": i.created_at.isoformat() if i.created_at else None,
    }


def notification_to_dict(n: InquiryNotification) -> dict:
    return {
        "id": n.id,
        "inquiry_id": n.inquiry_id,
        "email_sent": n.email_sent,
        "email_sent_at": n.email_sent_at.isoformat() if n.email_sent_at else None,
        "sms_sent": n.sms_sent,
        "sms_sent_at": n.sms_sent_at.isoformat() if n.sms_sent_at else None,
    }

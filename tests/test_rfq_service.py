"""
test_rfq_service.py — RFQ submission, visibility and notification records

Called by: pytest
Depends on: wholesale/services/rfq_service.py, conftest.py
"""

from unittest.mock import AsyncMock, patch

import pytest

from wholesale.models import InquiryNotification
from wholesale.services.errors import InvalidInputError, NotFoundError, PermissionDeniedError
from wholesale.services.rfq_service import (
    get_inquiry,
    get_user_inquiries,
    inquiry_to_dict,
    notification_to_dict,
    send_inquiry_notification,
    submit_inquiry,
)


class TestSubmitInquiry:
    def test_pending_with_account_fallbacks(self, db_session, test_user, test_product):
        inquiry = submit_inquiry(db_session, test_user, test_product.id, 250, company_name="Acme Retail")
        assert inquiry.status == "pending"
        assert inquiry.contact_email == "buyer@acme-retail.com"
        assert inquiry.contact_name == "Test Buyer"
        assert inquiry_to_dict(inquiry)["product_name"] == "Wireless Speaker"

    def test_explicit_contact_kept(self, db_session, test_user, test_product):
        inquiry = submit_inquiry(
            db_session, test_user, test_product.id, 10, contact_email="purchasing@acme-retail.com"
        )
        assert inquiry.contact_email == "purchasing@acme-retail.com"

    def test_below_moq(self, db_session, test_user, test_product):
        test_product.moq = 100
        db_session.commit()
        with pytest.raises(InvalidInputError, match="Minimum order quantity"):
            submit_inquiry(db_session, test_user, test_product.id, 99)

    def test_inactive_product(self, db_session, test_user, test_product):
        test_product.active = False
        db_session.commit()
        with pytest.raises(NotFoundError):
            submit_inquiry(db_session, test_user, test_product.id, 10)


class TestVisibility:
    def test_owner_admin_stranger(self, db_session, test_inquiry, test_user, admin_user, other_user):
        assert get_inquiry(db_session, test_inquiry.id, test_user).id == test_inquiry.id
        assert get_inquiry(db_session, test_inquiry.id, admin_user).id == test_inquiry.id
        with pytest.raises(PermissionDeniedError):
            get_inquiry(db_session, test_inquiry.id, other_user)

    def test_user_inquiries_only_own(self, db_session, test_inquiry, test_user, other_user, test_product):
        submit_inquiry(db_session, other_user, test_product.id, 5)
        assert [i.id for i in get_user_inquiries(db_session, test_user)] == [test_inquiry.id]


class TestNotificationRecord:
    @pytest.mark.asyncio
    async def test_email_success_recorded(self, db_session, test_inquiry, test_user):
        with patch(
            "wholesale.services.notification_service.send_inquiry_confirmation",
            new_callable=AsyncMock,
            return_value=True,
        ) as send:
            record = await send_inquiry_notification(db_session, test_inquiry.id, test_user)

        send.assert_awaited_once()
        assert record.email_sent is True
        assert record.email_sent_at is not None
        assert record.sms_sent is False
        assert notification_to_dict(record)["inquiry_id"] == test_inquiry.id

    @pytest.mark.asyncio
    async def test_provider_failure_still_recorded(self, db_session, test_inquiry, test_user):
        with patch(
            "wholesale.services.notification_service.send_inquiry_confirmation",
            new_callable=AsyncMock,
            return_value=False,
        ):
            record = await send_inquiry_notification(db_session, test_inquiry.id, test_user)
        assert record.email_sent is False
        assert record.email_sent_at is None
        assert db_session.query(InquiryNotification).count() == 1

    @pytest.mark.asyncio
    async def test_sms_needs_phone(self, db_session, test_inquiry, test_user):
        record = await send_inquiry_notification(
            db_session, test_inquiry.id, test_user, send_email=False, send_sms=True
        )
        assert record.sms_sent is False

        test_inquiry.contact_phone = "+15550100"
        db_session.commit()
        record = await send_inquiry_notification(
            db_session, test_inquiry.id, test_user, send_email=False, send_sms=True
        )
        assert record.sms_sent is True
        assert record.sms_sent_at is not None

    @pytest.mark.asyncio
    async def test_stranger_cannot_notify(self, db_session, test_inquiry, other_user):
        with pytest.raises(PermissionDeniedError):
            await send_inquiry_notification(db_session, test_inquiry.id, other_user)

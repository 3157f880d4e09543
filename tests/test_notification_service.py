"""
test_notification_service.py — Outbound email rendering and fail-soft sending

The shared httpx client is patched; nothing leaves the process.

Called by: pytest
Depends on: wholesale/services/notification_service.py
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from wholesale.services import notification_service
from wholesale.services.notification_service import (
    format_cents,
    send_chat_transcript,
    send_email,
    send_inquiry_confirmation,
    send_rfq_received,
)


@pytest.fixture()
def provider():
    """Configure the provider and capture posts."""
    with patch.object(notification_service.settings, "notification_api_url", "https://notify.test/"), patch.object(
        notification_service.settings, "notification_api_key", "key-123"
    ), patch("wholesale.services.notification_service.http") as http:
        http.post = AsyncMock(return_value=MagicMock(status_code=200, text="ok"))
        yield http


def _inquiry(**kw):
    data = dict(
        id=42,
        quantity=1500,
        contact_name="Dana <script>",
        contact_email="dana@acme-retail.com",
        company_name="Acme",
        message=None,
    )
    data.update(kw)
    return SimpleNamespace(**data)


def test_format_cents():
    assert format_cents(123456) == "$1,234.56"
    assert format_cents(500, "eur") == "EUR 5.00"
    assert format_cents(None) == "$0.00"


class TestSendEmail:
    @pytest.mark.asyncio
    async def test_posts_to_provider(self, provider):
        assert await send_email("a@b.test", "Hi", "<p>x</p>") is True
        args, kwargs = provider.post.call_args
        assert args[0] == "https://notify.test/notification/send-email"
        assert kwargs["headers"]["Authorization"] == "Bearer key-123"
        assert kwargs["json"]["text"] == "Hi"

    @pytest.mark.asyncio
    async def test_unconfigured_skips(self):
        with patch.object(notification_service.settings, "notification_api_url", ""):
            assert await send_email("a@b.test", "Hi", "<p>x</p>") is False

    @pytest.mark.asyncio
    async def test_no_recipient(self, provider):
        assert await send_email("", "Hi", "<p>x</p>") is False
        provider.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_http_error_is_soft(self, provider):
        provider.post.side_effect = httpx.ConnectTimeout("slow")
        assert await send_email("a@b.test", "Hi", "<p>x</p>") is False

    @pytest.mark.asyncio
    async def test_rejected_is_soft(self, provider):
        provider.post.return_value = MagicMock(status_code=500, text="boom")
        assert await send_email("a@b.test", "Hi", "<p>x</p>") is False


@pytest.mark.asyncio
async def test_inquiry_confirmation_escapes_user_text(provider):
    await send_inquiry_confirmation(_inquiry(), "Speaker & Co")
    payload = provider.post.call_args.kwargs["json"]
    assert payload["to"] == "dana@acme-retail.com"
    assert "RFQ-42" in payload["subject"]
    assert "Dana &lt;script&gt;" in payload["html"]
    assert "Speaker &amp; Co" in payload["html"]
    assert "1,500" in payload["html"]


@pytest.mark.asyncio
async def test_sales_inbox_only_when_configured(provider):
    assert await send_rfq_received(_inquiry(), "Speaker") is False
    provider.post.assert_not_called()

    with patch.object(notification_service.settings, "sales_notification_email", "sales@wholesale-b2b.com"):
        assert await send_rfq_received(_inquiry(message="Need <b>fast</b>"), "Speaker") is True
    payload = provider.post.call_args.kwargs["json"]
    assert payload["to"] == "sales@wholesale-b2b.com"
    assert "Need &lt;b&gt;fast&lt;/b&gt;" in payload["html"]


@pytest.mark.asyncio
async def test_chat_transcript(provider):
    session = SimpleNamespace(id=9, topic="Shipping")
    messages = [
        SimpleNamespace(sender_type="user", message="Hello"),
        SimpleNamespace(sender_type="agent", message="Hi <there>"),
    ]
    assert await send_chat_transcript("a@b.test", session, messages) is True
    payload = provider.post.call_args.kwargs["json"]
    assert "Hi &lt;there&gt;" in payload["html"]
    assert payload["text"] == "user: Hello\nagent: Hi <there>"

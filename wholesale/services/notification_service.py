"""
notification_service.py — Outbound email and SMS notifications

Sends transactional email through the notification provider's HTTP endpoint
and renders the HTML bodies for each event.

Business Rules:
- Every sender is fail-soft: provider errors are logged and reported as False,
  never raised. The caller's primary operation is already committed.
- All user-supplied text is HTML-escaped before it goes into a template
- SMS delivery is a logged placeholder
- Money is rendered from integer cents

Called by: routers/rfq.py, routers/quotes.py, routers/chat.py, routers/inquiries.py
Depends on: http_client, config
"""

import html
import logging

import httpx

from ..config import settings
from ..http_client import http

log = logging.getLogger("wholesale.notifications")


def format_cents(amount: int | None, currency: str = "usd") -> str:
    amount = amount or 0
    symbol = "$" if currency.lower() == "usd" else f"{currency.upper()} "
    return f"{symbol}{amount / 100:,.2f}"


async def send_email(to: str, subject: str, html_body: str, text_body: str | None = None) -> bool:
    """POST one email to the notification provider. Returns True on 2xx."""
    if not to:
        log.warning("Email skipped: no recipient for %r", subject)
        return False
    if not settings.notification_api_url or not settings.notification_api_key:
        log.warning("Email skipped: notification provider not configured (to=%s)", to)
        return False

    url = f"{settings.notification_api_url.rstrip('/')}/notification/send-email"
    payload = {"to": to, "subject": subject, "html": html_body, "text": text_body or subject}
    try:
        resp = await http.post(
            url,
            json=payload,
            headers={"Authorization": f"Bearer {settings.notification_api_key}"},
            timeout=15,
        )
    except httpx.HTTPError as e:
        log.error("Email to %s failed: %s", to, e)
        return False

    if resp.status_code >= 400:
        log.error("Email to %s rejected: HTTP %s %s", to, resp.status_code, resp.text[:200])
        return False
    log.info("Email sent to %s: %s", to, subject)
    return True


async def send_sms(phone: str, message: str) -> bool:
    """Placeholder: no SMS provider is wired up, so just log."""
    if not phone:
        return False
    log.info("SMS to %s: %s", phone, message[:160])
    return True


def _layout(title: str, body: str) -> str:
    return (
        "<div style=\"font-family:Arial,sans-serif;max-width:600px;margin:0 auto\">"
        f"<h2 style=\"color:#1e3a5f\">{html.escape(title)}</h2>"
        f"{body}"
        f"<p style=\"color:#888;font-size:12px\">{html.escape(settings.notification_from_name)}</p>"
        "</div>"
    )


async def send_inquiry_confirmation(inquiry, product_name: str) -> bool:
    """Confirm receipt of an RFQ to the buyer's contact email."""
    name = html.escape(inquiry.contact_name or "there")
    body = (
        f"<p>Hi {name},</p>"
        f"<p>We received your request for <b>{inquiry.quantity:,}</b> units of "
        f"<b>{html.escape(product_name)}</b>. Reference: RFQ-{inquiry.id}.</p>"
        "<p>Our team will reply with a quote shortly.</p>"
    )
    return await send_email(
        inquiry.contact_email,
        f"We received your quote request (RFQ-{inquiry.id})",
        _layout("Quote request received", body),
        f"We received your request for {inquiry.quantity} units of {product_name}.",
    )


async def send_quote_email(quote, to: str) -> bool:
    """Send a quote summary to the buyer when it moves to sent."""
    rows = "".join(
        "<tr>"
        f"<td>{html.escape(item.product.name if item.product else str(item.product_id))}</td>"
        f"<td style=\"text-align:right\">{item.quantity:,}</td>"
        f"<td style=\"text-align:right\">{format_cents(item.unit_price, quote.currency)}</td>"
        f"<td style=\"text-align:right\">{item.discount}%</td>"
        f"<td style=\"text-align:right\">{format_cents(item.total_price, quote.currency)}</td>"
        "</tr>"
        for item in quote.items
    )
    valid = quote.valid_until.strftime("%Y-%m-%d") if quote.valid_until else ""
    body = (
        f"<p>Quote <b>{html.escape(quote.quote_number)}</b> (revision {quote.revision}) "
        f"is ready for your review.</p>"
        "<table style=\"width:100%;border-collapse:collapse\">"
        "<tr><th align=left>Product</th><th>Qty</th><th>Unit</th><th>Discount</th><th>Total</th></tr>"
        f"{rows}</table>"
        f"<p><b>Total: {format_cents(quote.total_amount, quote.currency)}</b></p>"
        f"<p>Valid until {valid}.</p>"
    )
    if quote.terms:
        body += f"<p><i>{html.escape(quote.terms)}</i></p>"
    return await send_email(
        to,
        f"Quote {quote.quote_number}",
        _layout("Your quote", body),
        f"Quote {quote.quote_number}: {format_cents(quote.total_amount, quote.currency)}",
    )


async def send_chat_transcript(to: str, session, messages: list) -> bool:
    lines = "".join(
        f"<p><b>{html.escape(m.sender_type.title())}:</b> {html.escape(m.message)}</p>"
        for m in messages
    )
    topic = html.escape(session.topic or "Support chat")
    body = f"<p>Transcript of your chat about <b>{topic}</b>.</p>{lines or '<p>(no messages)</p>'}"
    return await send_email(
        to,
        f"Your chat transcript (#{session.id})",
        _layout("Chat transcript", body),
        "\n".join(f"{m.sender_type}: {m.message}" for m in messages),
    )


async def send_rfq_received(inquiry, product_name: str) -> bool:
    """Tell the sales inbox a new RFQ is waiting."""
    if not settings.sales_notification_email:
        return False
    body = (
        f"<p>New RFQ-{inquiry.id} from <b>{html.escape(inquiry.company_name or inquiry.contact_name or '-')}</b>"
        f" ({html.escape(inquiry.contact_email or '-')}).</p>"
        f"<p>{inquiry.quantity:,} x {html.escape(product_name)}</p>"
    )
    if inquiry.message:
        body += f"<blockquote>{html.escape(inquiry.message)}</blockquote>"
    return await send_email(
        settings.sales_notification_email,
        f"New RFQ-{inquiry.id}: {product_name}",
        _layout("New quote request", body),
    )

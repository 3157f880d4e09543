"""Stripe REST client — Checkout Sessions over the shared httpx client.

Stripe takes form-encoded bodies with bracketed keys
(``line_items[0][price_data][unit_amount]=1000``); ``encode_form`` flattens
nested dicts and lists into that shape.

Retries 429 / 5xx with exponential backoff. Any final failure is raised as
ProviderError; callers never see raw httpx errors.

Usage:
    from wholesale.services.stripe_client import StripeClient
    session = await StripeClient().create_checkout_session(params)
"""

import asyncio
import hashlib
import hmac
import json
import logging
import time

import httpx

from ..config import settings
from ..http_client import http
from .errors import InvalidInputError, ProviderError

log = logging.getLogger("wholesale.stripe")

MAX_RETRIES = 2
BACKOFF_BASE = 1  # seconds, doubled per retry


def encode_form(data: dict, prefix: str = "") -> list[tuple[str, str]]:
    """Flatten nested params into Stripe's bracketed form keys."""
    pairs: list[tuple[str, str]] = []
    for key, value in data.items():
        name = f"{prefix}[{key}]" if prefix else str(key)
        if value is None:
            continue
        if isinstance(value, dict):
            pairs.extend(encode_form(value, name))
        elif isinstance(value, (list, tuple)):
            for i, item in enumerate(value):
                if isinstance(item, dict):
                    pairs.extend(encode_form(item, f"{name}[{i}]"))
                else:
                    pairs.append((f"{name}[{i}]", str(item)))
        elif isinstance(value, bool):
            pairs.append((name, "true" if value else "false"))
        else:
            pairs.append((name, str(value)))
    return pairs


class StripeClient:
    """Thin wrapper around the Stripe API with retry."""

    def __init__(self, secret_key: str | None = None, api_base: str | None = None):
        self.secret_key = secret_key if secret_key is not None else settings.stripe_secret_key
        self.api_base = (api_base or settings.stripe_api_base).rstrip("/")

    async def create_checkout_session(self, params: dict) -> dict:
        return await self._post("/v1/checkout/sessions", params)

    async def _post(self, path: str, params: dict) -> dict:
        if not self.secret_key:
            raise ProviderError("Payment provider is not configured")

        url = f"{self.api_base}{path}"
        headers = {"Authorization": f"Bearer {self.secret_key}"}
        body = dict(encode_form(params))
        last_error: str = ""

        for attempt in range(MAX_RETRIES + 1):
            try:
                resp = await http.post(url, data=body, headers=headers, timeout=20)
            except httpx.HTTPError as e:
                last_error = str(e)
                log.warning("Stripe %s attempt %d failed: %s", path, attempt + 1, e)
            else:
                if resp.status_code < 300:
                    return resp.json()
                last_error = f"HTTP {resp.status_code}"
                if resp.status_code != 429 and resp.status_code < 500:
                    log.error("Stripe %s rejected: %s %s", path, resp.status_code, resp.text[:300])
                    break
                log.warning("Stripe %s attempt %d: HTTP %s", path, attempt + 1, resp.status_code)

            if attempt < MAX_RETRIES:
                await asyncio.sleep(BACKOFF_BASE * (2 ** attempt))

        raise ProviderError("Payment provider request failed", reason=last_error)


def verify_webhook(payload: bytes, sig_header: str | None, secret: str | None = None,
                   tolerance: int | None = None, now: float | None = None) -> dict:
    """Check a Stripe-Signature header and return the parsed event.

    Header format: ``t=<unix>,v1=<hex hmac-sha256 of "t.payload">``.
    """
    secret = secret if secret is not None else settings.stripe_webhook_secret
    tolerance = settings.stripe_webhook_tolerance_seconds if tolerance is None else tolerance
    if not secret:
        raise InvalidInputError("Webhook secret not configured")
    if not sig_header:
        raise InvalidInputError("Missing Stripe-Signature header")

    parts = {}
    signatures = []
    for item in sig_header.split(","):
        key, _, value = item.strip().partition("=")
        if key == "v1":
            signatures.append(value)
        else:
            parts[key] = value
    try:
        timestamp = int(parts.get("t", ""))
    except ValueError:
        raise InvalidInputError("Malformed Stripe-Signature header")

    now = time.time() if now is None else now
    if abs(now - timestamp) > tolerance:
        raise InvalidInputError("Webhook timestamp outside tolerance")

    signed = f"{timestamp}.".encode() + payload
    expected = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    if not any(hmac.compare_digest(expected, sig) for sig in signatures):
        raise InvalidInputError("Invalid webhook signature")

    try:
        return json.loads(payload)
    except ValueError:
        raise InvalidInputError("Webhook body is not JSON")


def sign_payload(payload: bytes, secret: str, timestamp: int) -> str:
    """Build a Stripe-Signature header value (used by tests and local tooling)."""
    digest = hmac.new(secret.encode(), f"{timestamp}.".encode() + payload, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"

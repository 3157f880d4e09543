"""Social sharing helpers — share links, meta tags and message templates for a product.

Product links are built from settings.public_base_url. Share tracking is
log-only (no analytics store).
"""

import html
import logging
from urllib.parse import quote, urlencode

from ..config import settings
from ..models import Product

log = logging.getLogger("wholesale.sharing")

DEFAULT_DESCRIPTION = "Premium surplus goods"
PLATFORMS = ("facebook", "twitter", "linkedin", "whatsapp", "telegram", "email")


def _base_url(base_url: str | None = None) -> str:
    return (base_url or settings.public_base_url).rstrip("/")


def product_url(product: Product, base_url: str | None = None) -> str:
    return f"{_base_url(base_url)}/products/{product.slug}"


def _price(product: Product) -> str:
    return f"{product.base_price / 100:.2f}"


def generate_share_urls(product: Product, base_url: str | None = None) -> dict:
    url = quote(product_url(product, base_url), safe="")
    title = quote(f"Check out: {product.name}", safe="")
    desc = quote(product.description or f"Wholesale {product.name} - {product.sku}", safe="")
    return {
        "facebook": f"https://www.facebook.com/sharer/sharer.php?u={url}",
        "twitter": f"https://twitter.com/intent/tweet?url={url}&text={title}&hashtags=wholesale,B2B,surplus",
        "linkedin": f"https://www.linkedin.com/sharing/share-offsite/?url={url}",
        "whatsapp": f"https://wa.me/?text={title}%20{url}",
        "telegram": f"https://t.me/share/url?url={url}&text={title}",
        "email": f"mailto:?subject={title}&body={desc}%0A%0A{url}",
    }


def generate_meta_tags(product: Product, base_url: str | None = None) -> dict:
    images = product.images or []
    image = images[0] if images else f"{_base_url(base_url)}/default-product.jpg"
    description = product.description or DEFAULT_DESCRIPTION
    return {
        "og:title": product.name,
        "og:description": description,
        "og:url": product_url(product, base_url),
        "og:image": image,
        "og:type": "product",
        "og:price:amount": _price(product),
        "og:price:currency": settings.default_currency.upper(),
        "twitter:card": "summary_large_image",
        "twitter:title": product.name,
        "twitter:description": description,
        "twitter:image": image,
    }


def generate_email_template(product: Product, base_url: str | None = None) -> dict:
    url = product_url(product, base_url)
    description = product.description or DEFAULT_DESCRIPTION
    subject = f"Wholesale Opportunity: {product.name}"
    body = (
        "Hi,\n\n"
        "I wanted to share this wholesale product with you:\n\n"
        f"Product: {product.name}\n"
        f"SKU: {product.sku}\n"
        f"Price: ${_price(product)}\n"
        f"Description: {description}\n\n"
        f"View Product: {url}\n\n"
        "Best regards,\n"
        f"{settings.notification_from_name}"
    )
    html_body = (
        "<div style=\"font-family:Arial,sans-serif;max-width:600px;margin:0 auto\">"
        "<h1 style=\"background:#0052CC;color:#fff;padding:20px\">Wholesale Product Opportunity</h1>"
        "<p>Hi,</p><p>I wanted to share this wholesale product with you:</p>"
        f"<h3>{html.escape(product.name)}</h3>"
        f"<p><strong>SKU:</strong> {html.escape(product.sku)}</p>"
        f"<p><strong>Price:</strong> ${_price(product)}</p>"
        f"<p><strong>Description:</strong> {html.escape(description)}</p>"
        f"<a href=\"{html.escape(url)}\">View Product Details</a>"
        "</div>"
    )
    return {"subject": subject, "body": body, "html_body": html_body}


def generate_tracking_url(share_url: str, platform: str, product_id: int) -> str:
    params = urlencode(
        {"utm_source": platform, "utm_medium": "social", "utm_campaign": f"product_{product_id}"}
    )
    sep = "&" if "?" in share_url else "?"
    return f"{share_url}{sep}{params}"


def generate_whatsapp_template(product: Product, base_url: str | None = None) -> str:
    return (
        f"*{product.name}*\n\n"
        f"SKU: {product.sku}\n"
        f"Price: ${_price(product)}\n\n"
        f"{product.description or DEFAULT_DESCRIPTION}\n\n"
        f"View Details: {product_url(product, base_url)}\n\n"
        "#wholesale #B2B #surplus"
    )


def generate_linkedin_template(product: Product, base_url: str | None = None) -> str:
    return (
        "Exciting wholesale opportunity!\n\n"
        "We're offering premium surplus goods at competitive prices.\n\n"
        f"Product: {product.name}\n"
        f"SKU: {product.sku}\n"
        f"Price: ${_price(product)}\n\n"
        f"{product.description or DEFAULT_DESCRIPTION}\n\n"
        "Interested in bulk orders? Visit our platform for more details:\n"
        f"{product_url(product, base_url)}\n\n"
        "#wholesale #B2B #supplychain #sourcing"
    )


def track_share(product_id: int, platform: str, user_id: int | None = None) -> None:
    log.info("Product %s shared on %s (user=%s)", product_id, platform, user_id)

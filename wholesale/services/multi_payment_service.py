"""
multi_payment_service.py — Region-aware payment method catalogue

Maps a buyer's country to a payment region, lists the methods offered there,
and prices gateway fees. Only Stripe is wired to a live provider
(services/stripe_client.py); the rest are presented for selection and
produce an initialization payload for manual processing.

Business Rules:
- Unknown countries fall back to the americas region
- Amounts are integer cents; fees round half-up to the cent
- Each gateway has a min/max amount; out-of-range amounts are rejected
- Recommended methods are ordered by lowest fee

Called by: routers/multi_payments.py
"""

from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal

from .errors import InvalidInputError

DEFAULT_REGION = "americas"


@dataclass(frozen=True)
class RegionConfig:
    region: str
    supported_methods: tuple
    primary_method: str
    currency: str
    countries: tuple


@dataclass(frozen=True)
class GatewayConfig:
    name: str
    display_name: str
    description: str
    min_amount: int  # cents
    max_amount: int  # cents
    fees: Decimal  # percent
    processing_time: str
    supported_currencies: tuple


REGION_PAYMENT_CONFIG = {
    "americas": RegionConfig(
        "americas", ("stripe", "paypal", "mercado_pago"), "stripe", "USD",
        ("US", "CA", "MX", "BR", "AR", "CL", "CO", "PE"),
    ),
    "europe": RegionConfig(
        "europe", ("stripe", "paypal"), "stripe", "EUR",
        ("GB", "DE", "FR", "IT", "ES", "NL", "BE", "AT", "CH", "SE", "NO", "DK", "PL"),
    ),
    "middle_east": RegionConfig(
        "middle_east", ("checkout", "cod", "bank_transfer"), "checkout", "AED",
        ("AE", "SA", "KW", "QA", "BH", "OM", "JO", "EG"),
    ),
    "asia_pacific": RegionConfig(
        "asia_pacific", ("stripe", "paypal"), "stripe", "USD",
        ("CN", "JP", "SG", "HK", "TW", "TH", "MY", "PH", "ID", "VN", "AU", "NZ"),
    ),
}

PAYMENT_GATEWAYS = {
    "stripe": GatewayConfig(
        "stripe", "Credit/Debit Card (Stripe)", "Secure payment with major credit and debit cards",
        100, 99_999_900, Decimal("2.9"), "Instant", ("USD", "EUR", "GBP", "JPY", "AUD", "CAD"),
    ),
    "paypal": GatewayConfig(
        "paypal", "PayPal", "Fast and secure payment with PayPal",
        100, 99_999_900, Decimal("3.49"), "Instant", ("USD", "EUR", "GBP", "JPY", "AUD", "CAD", "CNY"),
    ),
    "checkout": GatewayConfig(
        "checkout", "Checkout.com", "Global payment processing for Middle East",
        100, 99_999_900, Decimal("2.5"), "1-2 hours", ("AED", "SAR", "KWD", "QAR"),
    ),
    "mercado_pago": GatewayConfig(
        "mercado_pago", "Mercado Pago", "Leading payment solution in Latin America",
        100, 99_999_900, Decimal("3.99"), "1-3 business days", ("BRL", "ARS", "CLP", "COP", "MXN"),
    ),
    "cod": GatewayConfig(
        "cod", "Cash on Delivery", "Pay when your order arrives",
        100, 5_000_000, Decimal("0"), "Upon delivery", ("AED", "SAR", "KWD", "QAR"),
    ),
    "bank_transfer": GatewayConfig(
        "bank_transfer", "Bank Transfer", "Direct bank transfer for wholesale orders",
        100_000, 999_999_900, Decimal("0"), "2-5 business days", ("USD", "EUR", "GBP", "AED", "CNY"),
    ),
}


def detect_region(country_code: str) -> str:
    code = (country_code or "").upper()
    for name, config in REGION_PAYMENT_CONFIG.items():
        if code in config.countries:
            return name
    return DEFAULT_REGION


def get_gateway(method: str) -> GatewayConfig:
    gateway = PAYMENT_GATEWAYS.get(method)
    if gateway is None:
        raise InvalidInputError(f"Invalid payment method: {method}")
    return gateway


def get_payment_methods_for_region(region: str) -> list[str]:
    return list(REGION_PAYMENT_CONFIG[region].supported_methods)


def get_primary_payment_method(region: str) -> str:
    return REGION_PAYMENT_CONFIG[region].primary_method


def get_currency_for_region(region: str) -> str:
    return REGION_PAYMENT_CONFIG[region].currency


def calculate_total_with_fees(amount: int, method: str) -> dict:
    gateway = get_gateway(method)
    fees = int((Decimal(amount) * gateway.fees / 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))
    return {"subtotal": amount, "fees": fees, "total": amount + fees}


def validate_payment_amount(amount: int, method: str) -> None:
    gateway = get_gateway(method)
    if amount < gateway.min_amount:
        raise InvalidInputError(f"Minimum amount is {gateway.min_amount} cents", method=method)
    if amount > gateway.max_amount:
        raise InvalidInputError(f"Maximum amount is {gateway.max_amount} cents", method=method)


def get_payment_method_details(method: str) -> dict:
    details = asdict(get_gateway(method))
    details["fees"] = float(details["fees"])
    details["supported_currencies"] = list(details["supported_currencies"])
    return details


def get_recommended_payment_methods(region: str, amount: int) -> list[dict]:
    """Methods for a region priced for amount, cheapest fee first."""
    recommended = []
    for method in get_payment_methods_for_region(region):
        gateway = PAYMENT_GATEWAYS[method]
        breakdown = calculate_total_with_fees(amount, method)
        recommended.append(
            {
                "method": method,
                "display_name": gateway.display_name,
                "fees": breakdown["fees"],
                "total_amount": breakdown["total"],
                "processing_time": gateway.processing_time,
            }
        )
    recommended.sort(key=lambda r: r["fees"])
    return recommended


def get_region_and_currency(country_code: str) -> dict:
    region = detect_region(country_code)
    return {
        "region": region,
        "currency": get_currency_for_region(region),
        "methods": get_payment_methods_for_region(region),
    }


def generate_payment_payload(
    order_id: str, amount: int, currency: str, method: str, customer_email: str
) -> dict:
    gateway = get_gateway(method)
    return {
        "order_id": order_id,
        "amount": amount,
        "currency": currency,
        "method": method,
        "gateway": gateway.name,
        "customer_email": customer_email,
        "description": f"B2B Wholesale Order #{order_id}",
        "metadata": {"order_type": "wholesale", "platform": "b2b_wholesale"},
    }

"""
tariff_service.py — Import duty and tax estimates by destination country

Static rate table (simplified; not a customs database). All amounts are
integer cents.

Business Rules:
- duty = value * duty% ; vat = (value + duty) * vat% ;
  additional = (value + duty + vat) * additional%
- Each component is rounded half-up to a cent before feeding the next, so
  the breakdown always sums to total_tax exactly
- Unknown country codes raise InvalidInputError, except in compare where they
  are skipped
- Delivery estimate falls back to 14 days

Called by: routers/tariffs.py
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from .errors import InvalidInputError

DEFAULT_DELIVERY_DAYS = 14


@dataclass(frozen=True)
class TariffRate:
    country_code: str
    country_name: str
    duty_rate: Decimal
    vat: Decimal
    additional_taxes: Decimal
    description: str


def _rate(code, name, duty, vat, additional, description) -> TariffRate:
    return TariffRate(code, name, Decimal(str(duty)), Decimal(str(vat)), Decimal(str(additional)), description)


TARIFF_RATES = {
    r.country_code: r
    for r in (
        # Americas
        _rate("US", "United States", 5.5, 0, 0, "US tariff rate for electronics and consumer goods"),
        _rate("CA", "Canada", 6.5, 5, 0, "Canadian tariff and GST"),
        _rate("MX", "Mexico", 7, 16, 0, "Mexican tariff and IVA"),
        _rate("BR", "Brazil", 12, 18, 5, "Brazilian tariff, ICMS, and additional fees"),
        _rate("AR", "Argentina", 10, 21, 0, "Argentine tariff and IVA"),
        # Europe
        _rate("GB", "United Kingdom", 4, 20, 0, "UK tariff and VAT"),
        _rate("DE", "Germany", 3.5, 19, 0, "German tariff and VAT"),
        _rate("FR", "France", 3.5, 20, 0, "French tariff and VAT"),
        _rate("IT", "Italy", 3.5, 22, 0, "Italian tariff and VAT"),
        _rate("ES", "Spain", 3.5, 21, 0, "Spanish tariff and VAT"),
        _rate("NL", "Netherlands", 3.5, 21, 0, "Dutch tariff and VAT"),
        # Middle East
        _rate("AE", "United Arab Emirates", 5, 5, 0, "UAE tariff and VAT"),
        _rate("SA", "Saudi Arabia", 5, 15, 0, "Saudi Arabia tariff and VAT"),
        _rate("KW", "Kuwait", 4, 0, 0, "Kuwaiti tariff (no VAT)"),
        _rate("QA", "Qatar", 4, 0, 0, "Qatari tariff (no VAT)"),
        # Asia Pacific
        _rate("JP", "Japan", 3, 10, 0, "Japanese tariff and consumption tax"),
        _rate("SG", "Singapore", 0, 8, 0, "Singapore GST (minimal tariffs)"),
        _rate("HK", "Hong Kong", 0, 0, 0, "Hong Kong (free port, no tariffs)"),
        _rate("AU", "Australia", 5, 10, 0, "Australian tariff and GST"),
        _rate("NZ", "New Zealand", 5, 15, 0, "New Zealand tariff and GST"),
    )
}

DELIVERY_DAYS = {
    "US": 5, "CA": 7, "MX": 8, "BR": 12, "AR": 14,
    "GB": 4, "DE": 3, "FR": 4, "IT": 5, "ES": 5, "NL": 3,
    "AE": 6, "SA": 7, "KW": 7, "QA": 7,
    "JP": 5, "SG": 3, "HK": 2, "AU": 8, "NZ": 10,
}


def _pct(amount: int, rate: Decimal) -> int:
    return int((Decimal(amount) * rate / 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def get_tariff_rate(country_code: str) -> TariffRate | None:
    return TARIFF_RATES.get((country_code or "").upper())


def _require_rate(country_code: str) -> TariffRate:
    rate = get_tariff_rate(country_code)
    if rate is None:
        raise InvalidInputError(f"Tariff information not available for country: {country_code}")
    return rate


def delivery_days(country_code: str) -> int:
    return DELIVERY_DAYS.get((country_code or "").upper(), DEFAULT_DELIVERY_DAYS)


def calculate_tariff(product_value: int, country_code: str, currency: str = "USD") -> dict:
    if product_value < 0:
        raise InvalidInputError("product_value must be non-negative cents")
    rate = _require_rate(country_code)
    duty = _pct(product_value, rate.duty_rate)
    vat = _pct(product_value + duty, rate.vat)
    additional = _pct(product_value + duty + vat, rate.additional_taxes)
    total_tax = duty + vat + additional
    return {
        "product_value": product_value,
        "currency": currency,
        "country_code": rate.country_code,
        "country_name": rate.country_name,
        "duty_amount": duty,
        "vat_amount": vat,
        "additional_taxes": additional,
        "total_tax": total_tax,
        "total_cost": product_value + total_tax,
        "breakdown": {
            "product_value": product_value,
            "duty": duty,
            "vat": vat,
            "additional": additional,
        },
        "estimated_delivery_days": delivery_days(rate.country_code),
        "notes": rate.description,
    }


def calculate_bulk_tariff(items: list[dict], country_code: str, currency: str = "USD") -> dict:
    total_value = sum(item["product_value"] * item["quantity"] for item in items)
    result = calculate_tariff(total_value, country_code, currency)
    result["item_count"] = len(items)
    return result


def get_available_countries() -> list[dict]:
    return [
        {
            "code": r.country_code,
            "name": r.country_name,
            "duty_rate": float(r.duty_rate),
            "vat": float(r.vat),
        }
        for r in TARIFF_RATES.values()
    ]


def compare_tariffs(product_value: int, country_codes: list[str], currency: str = "USD") -> list[dict]:
    """Cheapest destination first; unknown codes are dropped."""
    results = [
        calculate_tariff(product_value, code, currency)
        for code in country_codes
        if get_tariff_rate(code) is not None
    ]
    results.sort(key=lambda r: r["total_cost"])
    for rank, result in enumerate(results, start=1):
        result["rank"] = rank
    return results


def get_tariff_summary(country_code: str) -> dict:
    rate = _require_rate(country_code)
    return {
        "country": rate.country_name,
        "duty_rate": f"{rate.duty_rate.normalize():f}%",
        "vat_rate": f"{rate.vat.normalize():f}%",
        "estimated_delivery": delivery_days(rate.country_code),
        "description": rate.description,
    }


def estimate_final_price(
    product_value: int, country_code: str, shipping_cost: int = 0, currency: str = "USD"
) -> dict:
    calc = calculate_tariff(product_value, country_code, currency)
    return {
        "product_value": product_value,
        "shipping_cost": shipping_cost,
        "subtotal": product_value + shipping_cost,
        "taxes": calc["total_tax"],
        "final_price": calc["total_cost"] + shipping_cost,
        "currency": currency,
    }

"""
tariffs.py — Import duty and tax estimates (values in cents)

Called by: main.py (router mount)
Depends on: services/tariff_service
"""

from fastapi import APIRouter

from ..schemas.tariffs import BulkTariffRequest, FinalPriceRequest, TariffCompareRequest, TariffRequest
from ..services import tariff_service as tariffs

router = APIRouter(tags=["tariffs"])


@router.post("/api/tariffs/calculate")
def calculate(body: TariffRequest):
    return tariffs.calculate_tariff(body.product_value, body.country_code, body.currency)


@router.post("/api/tariffs/bulk")
def calculate_bulk(body: BulkTariffRequest):
    return tariffs.calculate_bulk_tariff(
        [item.model_dump() for item in body.items], body.country_code, body.currency
    )


@router.get("/api/tariffs/countries")
def countries():
    return tariffs.get_available_countries()


@router.post("/api/tariffs/compare")
def compare(body: TariffCompareRequest):
    return tariffs.compare_tariffs(body.product_value, body.country_codes, body.currency)


@router.get("/api/tariffs/summary/{country_code}")
def summary(country_code: str):
    return tariffs.get_tariff_summary(country_code)


@router.post("/api/tariffs/estimate")
def estimate(body: FinalPriceRequest):
    return tariffs.estimate_final_price(
        body.product_value, body.country_code, body.shipping_cost, body.currency
    )

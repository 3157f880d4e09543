"""
schemas/tariffs.py — Tariff calculator payloads (values in cents)

Called by: routers/tariffs.py
Depends on: pydantic
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class TariffRequest(BaseModel):
    product_value: int = Field(ge=0)
    country_code: str = Field(min_length=2, max_length=2)
    currency: str = "USD"


class BulkTariffItem(BaseModel):
    product_value: int = Field(ge=0)
    quantity: int = Field(ge=1)


class BulkTariffRequest(BaseModel):
    items: list[BulkTariffItem] = Field(min_length=1)
    country_code: str = Field(min_length=2, max_length=2)
    currency: str = "USD"


class TariffCompareRequest(BaseModel):
    product_value: int = Field(ge=0)
    country_codes: list[str] = Field(min_length=1)
    currency: str = "USD"


class FinalPriceRequest(BaseModel):
    product_value: int = Field(ge=0)
    country_code: str = Field(min_length=2, max_length=2)
    shipping_cost: int = Field(default=0, ge=0)
    currency: str = "USD"

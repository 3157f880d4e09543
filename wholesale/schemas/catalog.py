"""
schemas/catalog.py — Pricing tiers and buyer profile

Business Rules:
- Tier bounds: min_quantity >= 1, max_quantity NULL or >= min_quantity
- Tier price is integer cents, non-negative
- Country is an ISO-3166 alpha-2 code

Called by: routers/pricing.py, routers/profile.py
Depends on: pydantic
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator


class PricingTierCreate(BaseModel):
    product_id: int
    min_quantity: int = Field(ge=1)
    max_quantity: int | None = None
    price: int = Field(ge=0)

    @model_validator(mode="after")
    def bounds_ordered(self):
        if self.max_quantity is not None and self.max_quantity < self.min_quantity:
            raise ValueError("max_quantity must be >= min_quantity")
        return self


class ProfileUpdate(BaseModel):
    company_name: str | None = Field(default=None, max_length=255)
    company_type: str | None = Field(default=None, max_length=100)
    country: str | None = None
    phone: str | None = Field(default=None, max_length=50)
    address: str | None = None
    business_license: str | None = Field(default=None, max_length=255)
    tax_id: str | None = Field(default=None, max_length=100)

    @field_validator("country")
    @classmethod
    def iso_country(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip().upper()
        if len(v) != 2 or not v.isalpha():
            raise ValueError("country must be a 2-letter ISO code")
        return v

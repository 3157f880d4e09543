"""
schemas/quotes.py — Pydantic models for the quote engine

Business Rules:
- A quote has at least one line
- Line quantity >= 1, unit_price >= 0 cents, discount 0..100 percent
- Status updates only name a real quote status

Called by: routers/quotes.py
Depends on: pydantic
"""

from __future__ import annotations

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class QuoteLine(BaseModel):
    product_id: int
    quantity: int = Field(ge=1)
    unit_price: int = Field(ge=0)
    discount: Decimal = Field(default=Decimal(0), ge=0, le=100)
    notes: str | None = None


class QuoteCreate(BaseModel):
    inquiry_id: int
    items: list[QuoteLine]
    valid_days: int | None = Field(default=None, ge=1, le=365)
    notes: str | None = None
    terms: str | None = None
    currency: str = "usd"

    @field_validator("items")
    @classmethod
    def at_least_one(cls, v: list[QuoteLine]) -> list[QuoteLine]:
        if not v:
            raise ValueError("A quote needs at least one line item")
        return v

    @field_validator("currency")
    @classmethod
    def lower_currency(cls, v: str) -> str:
        return v.strip().lower()


class QuoteStatusUpdate(BaseModel):
    status: Literal["draft", "sent", "accepted", "rejected", "expired"]
    notes: str | None = None

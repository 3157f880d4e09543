"""
schemas/orders.py — Checkout and multi-region payment payloads

Business Rules:
- Checkout needs at least one item; quantities positive
- Prices are never accepted from the client; the server prices every line
- Amounts for the multi-payment helpers are integer cents

Called by: routers/payments.py, routers/multi_payments.py
Depends on: pydantic
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class CheckoutItem(BaseModel):
    product_id: int
    quantity: int = Field(ge=1)


class CheckoutCreate(BaseModel):
    items: list[CheckoutItem]
    shipping_address: dict | None = None
    notes: str | None = None
    customer_email: str | None = Field(default=None, max_length=320)
    customer_name: str | None = None

    @field_validator("items")
    @classmethod
    def not_empty(cls, v: list[CheckoutItem]) -> list[CheckoutItem]:
        if not v:
            raise ValueError("Cart is empty")
        return v


class PayOrder(BaseModel):
    order_id: int


class FeeRequest(BaseModel):
    amount: int = Field(ge=0)
    method: str


class PaymentInit(BaseModel):
    order_id: str
    amount: int = Field(ge=0)
    currency: str
    method: str
    customer_email: str = Field(max_length=320)

"""
schemas/cart.py — Cart payloads

Called by: routers/cart.py
Depends on: pydantic
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class CartAdd(BaseModel):
    product_id: int
    quantity: int = Field(ge=1)
    selected_moq: int | None = Field(default=None, ge=1)


class CartUpdate(BaseModel):
    quantity: int = Field(ge=1)

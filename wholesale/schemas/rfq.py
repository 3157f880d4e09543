"""
schemas/rfq.py — RFQ submission and inquiry notification payloads

Business Rules:
- Quantity must be positive (MOQ is checked against the product in the service)
- Message is capped at 5000 chars

Called by: routers/rfq.py, routers/inquiries.py
Depends on: pydantic
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class RfqSubmit(BaseModel):
    product_id: int
    quantity: int = Field(ge=1)
    company_name: str | None = Field(default=None, max_length=255)
    contact_name: str | None = Field(default=None, max_length=255)
    contact_email: str | None = Field(default=None, max_length=320)
    contact_phone: str | None = Field(default=None, max_length=50)
    message: str | None = Field(default=None, max_length=5000)

    @field_validator("contact_email")
    @classmethod
    def looks_like_email(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip().lower()
        if "@" not in v or v.startswith("@") or v.endswith("@"):
            raise ValueError("Invalid email address")
        return v


class InquiryNotify(BaseModel):
    inquiry_id: int
    send_email: bool = True
    send_sms: bool = False

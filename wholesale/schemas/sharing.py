"""
schemas/sharing.py — Share tracking payload

Called by: routers/sharing.py
Depends on: pydantic
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class ShareTrack(BaseModel):
    product_id: int
    platform: Literal["facebook", "twitter", "linkedin", "whatsapp", "telegram", "email"]

"""
schemas/faq.py — FAQ admin payloads and feedback

Called by: routers/faq.py
Depends on: pydantic
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class FaqCategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    icon: str | None = Field(default=None, max_length=50)
    sort_order: int = 0


class FaqItemCreate(BaseModel):
    category_id: int
    question: str = Field(min_length=1)
    answer: str = Field(min_length=1)
    sort_order: int = 0


class FaqFeedback(BaseModel):
    helpful: bool = True

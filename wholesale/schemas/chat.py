"""
schemas/chat.py — Support chat payloads

Business Rules:
- Messages are 1..5000 chars after trimming

Called by: routers/chat.py
Depends on: pydantic
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class ChatStart(BaseModel):
    topic: str | None = Field(default=None, max_length=255)


class ChatMessageCreate(BaseModel):
    message: str = Field(max_length=5000)
    attachment_url: str | None = Field(default=None, max_length=500)

    @field_validator("message")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Message must not be blank")
        return v

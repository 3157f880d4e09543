"""Live chat models: support agents, sessions, messages."""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from ..database import UTCDateTime
from .base import Base, utcnow


class SupportAgent(Base):
    """current_chats is only ever changed by conditional UPDATEs in chat_service."""

    __tablename__ = "support_agents"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True)
    name = Column(String(255), nullable=False)
    email = Column(String(320))
    status = Column(String(20), nullable=False, default="offline")
    max_chats = Column(Integer, nullable=False, default=5)
    current_chats = Column(Integer, nullable=False, default=0)
    created_at = Column(UTCDateTime, default=utcnow)

    __table_args__ = (
        CheckConstraint(
            "current_chats >= 0 AND current_chats <= max_chats",
            name="ck_support_agents_capacity",
        ),
        Index("ix_support_agents_status", "status", "current_chats"),
    )


class ChatSession(Base):
    __tablename__ = "chat_sessions"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    agent_id = Column(Integer, ForeignKey("support_agents.id"))
    status = Column(String(20), nullable=False, default="waiting")
    topic = Column(String(255))
    started_at = Column(UTCDateTime, default=utcnow)
    closed_at = Column(UTCDateTime)

    user = relationship("User")
    agent = relationship("SupportAgent")
    messages = relationship(
        "ChatMessage",
        back_populates="session",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ChatMessage.id",
    )

    __table_args__ = (
        Index("ix_chat_sessions_user", "user_id", "status"),
        Index("ix_chat_sessions_agent", "agent_id"),
    )


class ChatMessage(Base):
    __tablename__ = "chat_messages"
    id = Column(Integer, primary_key=True)
    session_id = Column(
        Integer, ForeignKey("chat_sessions.id", ondelete="CASCADE"), nullable=False
    )
    sender_id = Column(Integer)
    sender_type = Column(String(20), nullable=False)  # customer | agent | system
    message = Column(Text, nullable=False)
    attachment_url = Column(String(500))
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(UTCDateTime, default=utcnow)

    session = relationship("ChatSession", back_populates="messages")

    __table_args__ = (Index("ix_chat_messages_session", "session_id"),)

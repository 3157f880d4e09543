"""
chat_service.py — Live chat sessions and support agent assignment

Business Rules:
- An agent takes a chat only through one conditional UPDATE:
  current_chats + 1 WHERE status = 'online' AND current_chats < max_chats.
  rowcount 0 means someone else filled the slot first; try the next agent.
- Release decrements in SQL and clamps at zero
- The counter increment and the session becoming active commit together
- No agent free: the session stays waiting and assignment is retried each
  time the customer polls the session or its messages
- Reading messages marks the other side's messages read
- Closing releases the agent and commits before the transcript email goes out

Called by: routers/chat.py
Depends on: models, database.transaction, config (chat_assign_attempts)
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import case, or_, update
from sqlalchemy.orm import Session

from ..config import settings
from ..database import transaction
from ..models import ChatMessage, ChatSession, SupportAgent, User
from .errors import InvalidInputError, NotFoundError, PermissionDeniedError, storage_errors

log = logging.getLogger("wholesale.chat")

AGENT_STATUSES = ("online", "away", "offline")
DEFAULT_TOPIC = "General Inquiry"


# ── Agent capacity ───────────────────────────────────────────────────


def _candidate_agent_ids(db: Session) -> list[int]:
    rows = (
        db.query(SupportAgent.id)
        .filter(
            SupportAgent.status == "online",
            SupportAgent.current_chats < SupportAgent.max_chats,
        )
        .order_by(SupportAgent.current_chats, SupportAgent.id)
        .all()
    )
    return [r.id for r in rows]


def claim_agent_slot(db: Session, agent_id: int) -> bool:
    """Atomically take one chat slot on an agent. False if it is full or offline."""
    result = db.execute(
        update(SupportAgent)
        .where(
            SupportAgent.id == agent_id,
            SupportAgent.status == "online",
            SupportAgent.current_chats < SupportAgent.max_chats,
        )
        .values(current_chats=SupportAgent.current_chats + 1)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def release_chat_from_agent(db: Session, agent_id: int) -> None:
    """Give back one slot, never going below zero. Caller commits."""
    db.execute(
        update(SupportAgent)
        .where(SupportAgent.id == agent_id)
        .values(
            current_chats=case(
                (SupportAgent.current_chats > 0, SupportAgent.current_chats - 1),
                else_=0,
            )
        )
        .execution_options(synchronize_session=False)
    )


def _activate_session(db: Session, session_id: int, agent_id: int) -> bool:
    """Flip a waiting session to active. False if another request got there first."""
    result = db.execute(
        update(ChatSession)
        .where(ChatSession.id == session_id, ChatSession.status == "waiting")
        .values(status="active", agent_id=agent_id)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def assign_chat_to_agent(db: Session, session_id: int) -> SupportAgent | None:
    """Attach a waiting session to the least-loaded online agent with room.

    The slot claim and the session flip share one transaction. A session that
    some other request already activated gives its claimed slot straight back,
    so the agent's counter only moves for the request that won.
    """
    chat = db.get(ChatSession, session_id)
    if not chat:
        raise NotFoundError("Chat session not found", session_id=session_id)
    if chat.status != "waiting":
        return chat.agent

    assigned_id = None
    lost_race = False
    for _ in range(max(1, settings.chat_assign_attempts)):
        candidates = _candidate_agent_ids(db)
        if not candidates:
            break
        with storage_errors("assigning chat"), transaction(db):
            for agent_id in candidates:
                if not claim_agent_slot(db, agent_id):
                    continue
                if _activate_session(db, chat.id, agent_id):
                    assigned_id = agent_id
                else:
                    release_chat_from_agent(db, agent_id)
                    lost_race = True
                break
        if assigned_id or lost_race:
            break

    db.refresh(chat)
    if lost_race:
        log.info("Chat %s was already %s; slot returned", chat.id, chat.status)
        return db.get(SupportAgent, chat.agent_id) if chat.agent_id else None
    if not assigned_id:
        log.info("No agent free for chat %s; left waiting", chat.id)
        return None

    agent = db.get(SupportAgent, assigned_id)
    db.refresh(agent)
    with transaction(db):
        chat.messages.append(
            ChatMessage(sender_type="system", message=f"{agent.name} has joined the chat.")
        )
    log.info("Chat %s assigned to agent %s (%s/%s)", chat.id, agent.id, agent.current_chats, agent.max_chats)
    return agent


def set_agent_status(db: Session, agent_id: int, status: str) -> SupportAgent:
    if status not in AGENT_STATUSES:
        raise InvalidInputError(f"Unknown agent status: {status}")
    agent = db.get(SupportAgent, agent_id)
    if not agent:
        raise NotFoundError("Agent not found", agent_id=agent_id)
    with transaction(db):
        agent.status = status
    return agent


# ── Sessions ─────────────────────────────────────────────────────────


def _get_session(db: Session, session_id: int, user: User) -> ChatSession:
    chat = db.get(ChatSession, session_id)
    if not chat:
        raise NotFoundError("Chat session not found", session_id=session_id)
    if chat.user_id != user.id and user.role != "admin":
        raise PermissionDeniedError("Not your chat session")
    return chat


def start_session(db: Session, user: User, topic: str | None = None) -> ChatSession:
    with transaction(db):
        chat = ChatSession(user_id=user.id, status="waiting", topic=topic or DEFAULT_TOPIC)
        db.add(chat)
    assign_chat_to_agent(db, chat.id)
    return chat


def get_session(db: Session, session_id: int, user: User) -> ChatSession:
    chat = _get_session(db, session_id, user)
    if chat.status == "waiting":
        assign_chat_to_agent(db, chat.id)
    return chat


def get_user_session(db: Session, user: User) -> ChatSession | None:
    """The user's most recent open session, if any."""
    return (
        db.query(ChatSession)
        .filter(ChatSession.user_id == user.id, ChatSession.status != "closed")
        .order_by(ChatSession.started_at.desc(), ChatSession.id.desc())
        .first()
    )


def send_message(
    db: Session, session_id: int, user: User, message: str, attachment_url: str | None = None
) -> ChatMessage:
    chat = _get_session(db, session_id, user)
    if chat.status == "closed":
        raise InvalidInputError("Chat session is closed")
    with transaction(db):
        msg = ChatMessage(
            sender_id=user.id,
            sender_type="customer",
            message=message,
            attachment_url=attachment_url,
        )
        chat.messages.append(msg)
    return msg


def agent_reply(db: Session, session_id: int, staff: User, message: str) -> ChatMessage:
    chat = db.get(ChatSession, session_id)
    if not chat:
        raise NotFoundError("Chat session not found", session_id=session_id)
    if chat.status != "active":
        raise InvalidInputError(f"Cannot reply to a {chat.status} chat")
    with transaction(db):
        msg = ChatMessage(sender_id=staff.id, sender_type="agent", message=message)
        chat.messages.append(msg)
    return msg


def get_messages(db: Session, session_id: int, user: User) -> list[ChatMessage]:
    """Messages oldest first; marks the other side's messages as read."""
    chat = _get_session(db, session_id, user)
    if chat.status == "waiting":
        assign_chat_to_agent(db, chat.id)
    with transaction(db):
        db.query(ChatMessage).filter(
            ChatMessage.session_id == chat.id,
            ChatMessage.is_read.is_(False),
            or_(ChatMessage.sender_id.is_(None), ChatMessage.sender_id != user.id),
        ).update({"is_read": True}, synchronize_session="fetch")
    return (
        db.query(ChatMessage)
        .filter(ChatMessage.session_id == chat.id)
        .order_by(ChatMessage.id)
        .all()
    )


def close_session(db: Session, session_id: int, user: User) -> ChatSession:
    chat = _get_session(db, session_id, user)
    if chat.status == "closed":
        raise InvalidInputError("Chat session is already closed")
    with storage_errors("closing chat"), transaction(db):
        result = db.execute(
            update(ChatSession)
            .where(ChatSession.id == chat.id, ChatSession.status != "closed")
            .values(status="closed", closed_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise InvalidInputError("Chat session is already closed")
        # only the request that closed the row gives the slot back
        db.refresh(chat)
        if chat.agent_id:
            release_chat_from_agent(db, chat.agent_id)
    log.info("Chat %s closed by user %s", chat.id, user.id)
    return chat


# ── Serializers ──────────────────────────────────────────────────────


def session_to_dict(chat: ChatSession) -> dict:
    return {
        "id": chat.id,
        "user_id": chat.user_id,
        "agent_id": chat.agent_id,
        "agent_name": chat.agent.name if chat.agent else None,
        "status": chat.status,
        "topic": chat.topic,
        "started_at": chat.started_at.isoformat() if chat.started_at else None,
        "closed_at": chat.closed_at.isoformat() if chat.closed_at else None,
    }


def message_to_dict(msg: ChatMessage) -> dict:
    return {
        "id": msg.id,
        "session_id": msg.session_id,
        "sender_id": msg.sender_id,
        "sender_type": msg.sender_type,
        "message": msg.message,
        "attachment_url": msg.attachment_url,
        "is_read": msg.is_read,
        "created_at": msg.created_at.isoformat() if msg.created_at else None,
    }


def agent_to_dict(agent: SupportAgent) -> dict:
    return {
        "id": agent.id,
        "name": agent.name,
        "status": agent.status,
        "current_chats": agent.current_chats,
        "max_chats": agent.max_chats,
    }

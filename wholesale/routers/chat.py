"""
chat.py — Live support chat

Buyers start a session, poll it, send messages and close it. Staff reply to
active sessions. Closing emails the transcript after the close has committed.

Called by: main.py (router mount)
Depends on: services/chat_service, services/notification_service
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..dependencies import require_admin, require_user
from ..models import User
from ..rate_limit import limiter
from ..schemas.chat import ChatMessageCreate, ChatStart
from ..services import chat_service as chat
from ..services import notification_service

router = APIRouter(tags=["chat"])


@router.post("/api/chat/sessions")
def start_chat(body: ChatStart, user: User = Depends(require_user), db: Session = Depends(get_db)):
    return chat.session_to_dict(chat.start_session(db, user, body.topic))


@router.get("/api/chat/sessions/mine")
def my_chat_session(user: User = Depends(require_user), db: Session = Depends(get_db)):
    session = chat.get_user_session(db, user)
    return chat.session_to_dict(session) if session else None


@router.get("/api/chat/sessions/{session_id}")
def get_chat(session_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)):
    return chat.session_to_dict(chat.get_session(db, session_id, user))


@router.post("/api/chat/sessions/{session_id}/messages")
@limiter.limit(settings.rate_limit_submit)
def send_chat_message(
    request: Request,
    session_id: int,
    body: ChatMessageCreate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    msg = chat.send_message(db, session_id, user, body.message, body.attachment_url)
    return chat.message_to_dict(msg)


@router.get("/api/chat/sessions/{session_id}/messages")
def get_chat_messages(
    session_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    return [chat.message_to_dict(m) for m in chat.get_messages(db, session_id, user)]


@router.post("/api/chat/sessions/{session_id}/close")
async def close_chat(session_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)):
    session = chat.close_session(db, session_id, user)
    messages = sorted(session.messages, key=lambda m: m.id)
    transcript_sent = await notification_service.send_chat_transcript(user.email, session, messages)
    return {**chat.session_to_dict(session), "transcript_sent": transcript_sent}


@router.post("/api/chat/sessions/{session_id}/reply")
def agent_reply(
    session_id: int,
    body: ChatMessageCreate,
    user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return chat.message_to_dict(chat.agent_reply(db, session_id, user, body.message))

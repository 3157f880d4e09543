"""
dependencies.py — Shared FastAPI dependencies

Authentication and authorization for every router. Login itself happens in
the external auth provider; this app only reads the signed session cookie.

Business Rules:
- Anonymous catalog browsing is allowed; get_user never raises
- A session pointing at a missing user is cleared and treated as anonymous
- Buyer routes need an active account (401 signed out, 403 deactivated)
- Seller staff carry role "admin" and alone may quote, upload or sweep

Called by: all routers
Depends on: models, database
"""

import logging

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from .database import get_db
from .models import User

log = logging.getLogger("wholesale.auth")


def get_user(request: Request, db: Session) -> User | None:
    """Session user, or None for anonymous visitors."""
    uid = request.session.get("user_id")
    if not uid:
        return None
    user = db.get(User, uid)
    if user is None:
        log.info("Dropping session for unknown user_id=%s", uid)
        request.session.clear()
    return user


def require_user(request: Request, db: Session = Depends(get_db)) -> User:
    """Signed-in, active buyer or staff member."""
    user = get_user(request, db)
    if not user:
        raise HTTPException(401, "Not authenticated")
    if not user.is_active:
        log.warning("Deactivated user %s attempted %s", user.id, request.url.path)
        request.session.clear()
        raise HTTPException(403, "Account deactivated, contact support")
    return user


def is_admin(user: User) -> bool:
    return user.role == "admin"


def require_admin(request: Request, db: Session = Depends(get_db)) -> User:
    """Seller staff only."""
    user = require_user(request, db)
    if not is_admin(user):
        raise HTTPException(403, "Admin access required")
    return user

"""
auth.py — Session identity endpoints

Login is handled by the external identity provider, which writes user_id into
the signed session cookie. These endpoints read and clear it.

Called by: main.py (router mount)
Depends on: dependencies, database
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_user
from ..services.membership_service import membership_to_dict
from ..services.pricing_service import get_current_membership

router = APIRouter(tags=["auth"])


@router.get("/api/auth/me")
def me(request: Request, db: Session = Depends(get_db)):
    """Current user, or null when signed out."""
    user = get_user(request, db)
    if not user or not user.is_active:
        return {"user": None}
    membership = get_current_membership(db, user.id)
    return {
        "user": {
            "id": user.id,
            "email": user.email,
            "name": user.name,
            "role": user.role,
            "membership": membership_to_dict(membership) if membership else None,
        }
    }


@router.post("/api/auth/logout")
def logout(request: Request):
    request.session.clear()
    return {"success": True}

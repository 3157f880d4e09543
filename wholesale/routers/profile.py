"""
profile.py — Buyer company profile

Called by: main.py (router mount)
Depends on: services/profile_service
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_user
from ..models import User
from ..schemas.catalog import ProfileUpdate
from ..services import profile_service

router = APIRouter(tags=["profile"])


@router.get("/api/profile")
def get_profile(user: User = Depends(require_user), db: Session = Depends(get_db)):
    profile = profile_service.get_profile(db, user)
    return profile_service.profile_to_dict(profile) if profile else None


@router.put("/api/profile")
def update_profile(
    body: ProfileUpdate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    profile = profile_service.upsert_profile(db, user, body.model_dump(exclude_unset=True))
    return profile_service.profile_to_dict(profile)

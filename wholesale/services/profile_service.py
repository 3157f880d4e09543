"""Buyer company profile: read and upsert."""

from sqlalchemy.orm import Session

from ..database import transaction
from ..models import BuyerProfile, User

EDITABLE_FIELDS = (
    "company_name",
    "company_type",
    "country",
    "phone",
    "address",
    "business_license",
    "tax_id",
)


def get_profile(db: Session, user: User) -> BuyerProfile | None:
    return db.query(BuyerProfile).filter(BuyerProfile.user_id == user.id).first()


def upsert_profile(db: Session, user: User, data: dict) -> BuyerProfile:
    """Create the profile on first save, otherwise update the given fields.

    verification_status is staff-controlled and never taken from the buyer.
    """
    with transaction(db):
        profile = get_profile(db, user)
        if profile is None:
            profile = BuyerProfile(user_id=user.id)
            db.add(profile)
        for field in EDITABLE_FIELDS:
            if field in data:
                setattr(profile, field, data[field])
    return profile


def profile_to_dict(p: BuyerProfile) -> dict:
    return {
        "id": p.id,
        "user_id": p.user_id,
        **{f: getattr(p, f) for f in EDITABLE_FIELDS},
        "verification_status": p.verification_status,
        "updated_at": p.updated_at.isoformat() if p.updated_at else None,
    }

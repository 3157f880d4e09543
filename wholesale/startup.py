"""
startup.py — Schema sync and reference-data seeds (idempotent)

Tables and indexes come from the ORM models via create_all(checkfirst=True).
This file adds the rows the app cannot run without: membership tiers and
condition grades. Each seed row is inserted only if its natural key is missing,
so this is safe to run on every boot.

Called by: main.py lifespan
Depends on: database.Database, models
"""

import logging
import os
from decimal import Decimal

from sqlalchemy.orm import Session

from .database import Database, transaction
from .models import ConditionGrade, MembershipTier

log = logging.getLogger("wholesale.startup")

DEFAULT_TIERS = (
    {"name": "Bronze", "level": 0, "color": "#CD7F32", "discount_percentage": Decimal("0"),
     "min_annual_purchase": 0, "description": "Standard wholesale access",
     "additional_benefits": ["Quantity tier pricing"]},
    {"name": "Silver", "level": 1, "color": "#C0C0C0", "discount_percentage": Decimal("5"),
     "min_annual_purchase": 1_000_000, "description": "For repeat buyers",
     "additional_benefits": ["5% member discount", "Priority RFQ response"]},
    {"name": "Gold", "level": 2, "color": "#FFD700", "discount_percentage": Decimal("10"),
     "min_annual_purchase": 5_000_000, "description": "For high-volume buyers",
     "additional_benefits": ["10% member discount", "Dedicated account manager"]},
    {"name": "Platinum", "level": 3, "color": "#E5E4E2", "discount_percentage": Decimal("15"),
     "min_annual_purchase": 20_000_000, "description": "Strategic partners",
     "additional_benefits": ["15% member discount", "Free inspection reports", "Extended payment terms"]},
)

DEFAULT_GRADES = (
    {"grade": "A", "description": "New or like-new, original packaging", "price_multiplier": Decimal("1.00")},
    {"grade": "B", "description": "Open box or light cosmetic wear", "price_multiplier": Decimal("0.85")},
    {"grade": "C", "description": "Visible wear, fully functional", "price_multiplier": Decimal("0.70")},
)


def run_startup_migrations(database: Database) -> None:
    """Execute all idempotent startup operations. Safe to call on every app boot."""
    if os.environ.get("TESTING"):
        log.info("TESTING mode, skipping startup migrations")
        return

    database.create_all()
    log.info("ORM schema sync complete (create_all checkfirst=True)")

    db = database.session()
    try:
        seed_reference_data(db)
    finally:
        db.close()
    log.info("Startup migrations complete")


def seed_reference_data(db: Session) -> int:
    """Insert missing tiers and grades. Returns the number of rows added."""
    added = 0
    with transaction(db):
        existing_tiers = {name for (name,) in db.query(MembershipTier.name)}
        for row in DEFAULT_TIERS:
            if row["name"] not in existing_tiers:
                db.add(MembershipTier(**row))
                added += 1
        existing_grades = {grade for (grade,) in db.query(ConditionGrade.grade)}
        for row in DEFAULT_GRADES:
            if row["grade"] not in existing_grades:
                db.add(ConditionGrade(**row))
                added += 1
    if added:
        log.info("Seeded %d reference rows", added)
    return added

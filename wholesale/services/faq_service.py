"""FAQ browsing, search and feedback counters.

Counters (views, helpful, not_helpful) are incremented in SQL so concurrent
readers never lose an update. Search is a case-insensitive LIKE over question
and answer, which works on both PostgreSQL and SQLite.
"""

import logging

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from ..database import transaction
from ..models import FaqCategory, FaqItem
from .bulk_upload_service import slugify
from .errors import InvalidInputError, NotFoundError

log = logging.getLogger("wholesale.faq")

MIN_SEARCH_LENGTH = 2
SEARCH_LIMIT = 20


def get_categories(db: Session) -> list[FaqCategory]:
    return (
        db.query(FaqCategory)
        .filter(FaqCategory.is_active.is_(True))
        .order_by(FaqCategory.sort_order, FaqCategory.id)
        .all()
    )


def get_items_by_category(db: Session, category_id: int) -> list[FaqItem]:
    return (
        db.query(FaqItem)
        .filter(FaqItem.category_id == category_id, FaqItem.is_active.is_(True))
        .order_by(FaqItem.sort_order, FaqItem.id)
        .all()
    )


def get_item(db: Session, item_id: int) -> FaqItem:
    """Fetch an item and count the view."""
    item = db.get(FaqItem, item_id)
    if not item or not item.is_active:
        raise NotFoundError("FAQ item not found", item_id=item_id)
    with transaction(db):
        db.execute(
            update(FaqItem)
            .where(FaqItem.id == item_id)
            .values(views=FaqItem.views + 1)
            .execution_options(synchronize_session=False)
        )
    db.refresh(item)
    return item


def search(db: Session, query: str) -> list[FaqItem]:
    term = (query or "").strip()
    if len(term) < MIN_SEARCH_LENGTH:
        raise InvalidInputError(f"Search query must be at least {MIN_SEARCH_LENGTH} characters")
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    pattern = f"%{escaped}%"
    return (
        db.query(FaqItem)
        .filter(
            FaqItem.is_active.is_(True),
            or_(
                FaqItem.question.ilike(pattern, escape="\\"),
                FaqItem.answer.ilike(pattern, escape="\\"),
            ),
        )
        .order_by(FaqItem.helpful.desc(), FaqItem.id)
        .limit(SEARCH_LIMIT)
        .all()
    )


def mark_helpful(db: Session, item_id: int, helpful: bool) -> FaqItem:
    item = db.get(FaqItem, item_id)
    if not item:
        raise NotFoundError("FAQ item not found", item_id=item_id)
    column = FaqItem.helpful if helpful else FaqItem.not_helpful
    with transaction(db):
        db.execute(
            update(FaqItem)
            .where(FaqItem.id == item_id)
            .values({column: column + 1})
            .execution_options(synchronize_session=False)
        )
    db.refresh(item)
    return item


def create_category(
    db: Session, name: str, description: str | None = None, icon: str | None = None, sort_order: int = 0
) -> FaqCategory:
    with transaction(db):
        category = FaqCategory(
            name=name,
            slug=slugify(name),
            description=description,
            icon=icon,
            sort_order=sort_order,
        )
        db.add(category)
    return category


def create_item(db: Session, category_id: int, question: str, answer: str, sort_order: int = 0) -> FaqItem:
    if not db.get(FaqCategory, category_id):
        raise NotFoundError("FAQ category not found", category_id=category_id)
    with transaction(db):
        item = FaqItem(category_id=category_id, question=question, answer=answer, sort_order=sort_order)
        db.add(item)
    return item


def category_to_dict(c: FaqCategory) -> dict:
    return {
        "id": c.id,
        "name": c.name,
        "slug": c.slug,
        "description": c.description,
        "icon": c.icon,
        "sort_order": c.sort_order,
    }


def item_to_dict(i: FaqItem) -> dict:
    return {
        "id": i.id,
        "category_id": i.category_id,
        "question": i.question,
        "answer": i.answer,
        "views": i.views,
        "helpful": i.helpful,
        "not_helpful": i.not_helpful,
    }

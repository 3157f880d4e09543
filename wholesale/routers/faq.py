"""
faq.py — Help center FAQ

Called by: main.py (router mount)
Depends on: services/faq_service
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_admin
from ..models import User
from ..schemas.faq import FaqCategoryCreate, FaqFeedback, FaqItemCreate
from ..services import faq_service as faq

router = APIRouter(tags=["faq"])


@router.get("/api/faq/categories")
def faq_categories(db: Session = Depends(get_db)):
    return [faq.category_to_dict(c) for c in faq.get_categories(db)]


@router.get("/api/faq/categories/{category_id}/items")
def faq_items(category_id: int, db: Session = Depends(get_db)):
    return [faq.item_to_dict(i) for i in faq.get_items_by_category(db, category_id)]


@router.get("/api/faq/search")
def faq_search(q: str = Query(""), db: Session = Depends(get_db)):
    return [faq.item_to_dict(i) for i in faq.search(db, q)]


@router.get("/api/faq/items/{item_id}")
def faq_item(item_id: int, db: Session = Depends(get_db)):
    """Item detail; counts a view."""
    return faq.item_to_dict(faq.get_item(db, item_id))


@router.post("/api/faq/items/{item_id}/feedback")
def faq_feedback(item_id: int, body: FaqFeedback, db: Session = Depends(get_db)):
    return faq.item_to_dict(faq.mark_helpful(db, item_id, body.helpful))


@router.post("/api/faq/categories")
def create_faq_category(
    body: FaqCategoryCreate,
    user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return faq.category_to_dict(faq.create_category(db, **body.model_dump()))


@router.post("/api/faq/items")
def create_faq_item(
    body: FaqItemCreate,
    user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return faq.item_to_dict(faq.create_item(db, **body.model_dump()))

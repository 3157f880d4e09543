"""
sharing.py — Social share links for product pages

Called by: main.py (router mount)
Depends on: services/sharing_service, services/catalog_service
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_user
from ..schemas.sharing import ShareTrack
from ..services import sharing_service as sharing
from ..services.catalog_service import get_product

router = APIRouter(tags=["sharing"])


@router.get("/api/sharing/product/{product_id}")
def share_links(product_id: int, db: Session = Depends(get_db)):
    product = get_product(db, product_id)
    urls = sharing.generate_share_urls(product)
    return {
        "url": sharing.product_url(product),
        "share_urls": urls,
        "tracked_urls": {
            platform: sharing.generate_tracking_url(url, platform, product.id)
            for platform, url in urls.items()
        },
        "meta_tags": sharing.generate_meta_tags(product),
        "whatsapp": sharing.generate_whatsapp_template(product),
        "linkedin": sharing.generate_linkedin_template(product),
    }


@router.get("/api/sharing/product/{product_id}/email")
def share_email_template(product_id: int, db: Session = Depends(get_db)):
    return sharing.generate_email_template(get_product(db, product_id))


@router.post("/api/sharing/track")
def track_share(body: ShareTrack, request: Request, db: Session = Depends(get_db)):
    get_product(db, body.product_id)
    user = get_user(request, db)
    sharing.track_share(body.product_id, body.platform, user.id if user else None)
    return {"success": True}

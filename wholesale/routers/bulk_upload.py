"""
bulk_upload.py — CSV product import for staff

Called by: main.py (router mount)
Depends on: services/bulk_upload_service
"""

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_admin
from ..models import User
from ..services import bulk_upload_service as bulk

router = APIRouter(tags=["bulk-upload"])


@router.post("/api/bulk-upload/products")
async def upload_products(
    file: UploadFile = File(...),
    category_id: int | None = Form(None),
    condition_grade: str = Form("A"),
    user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    content = await file.read()
    error = bulk.validate_csv_file(file.filename, file.content_type, len(content))
    if error:
        raise HTTPException(400, error)
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(400, "CSV file must be UTF-8 encoded")
    return bulk.import_products(db, text, category_id, condition_grade)


@router.get("/api/bulk-upload/template", response_class=PlainTextResponse)
def csv_template():
    return PlainTextResponse(
        bulk.generate_csv_template(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="product_template.csv"'},
    )


@router.post("/api/bulk-upload/validate")
async def validate_file(
    file: UploadFile = File(...),
    user: User = Depends(require_admin),
):
    content = await file.read()
    error = bulk.validate_csv_file(file.filename, file.content_type, len(content))
    return {"valid": error is None, "error": error}

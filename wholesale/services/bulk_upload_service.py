"""
bulk_upload_service.py — CSV product import for seller staff

Business Rules:
- Header row plus at least one data row; name and sku columns are required
- Rows missing name or sku are skipped silently (not counted as failures)
- Per-row validation: name <= 255 chars, sku <= 100, condition in A/B/C,
  price and stock non-negative
- Price column is in currency units (e.g. 25.50) and stored as cents
- Each row is inserted in its own SAVEPOINT; a bad row (duplicate SKU etc.)
  is reported and the rest of the batch still commits
- Certification names in the row link to existing certifications; unknown
  names are ignored
- Upload files: max settings.max_upload_size_mb, csv/excel MIME or .csv name

Called by: routers/bulk_upload.py
Depends on: models, config
"""

import csv
import io
import logging
import re
import uuid
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import settings
from ..models import Certification, ConditionGrade, Product, ProductCertification
from .errors import InvalidInputError

log = logging.getLogger("wholesale.bulk_upload")

REQUIRED_FIELDS = ("name", "sku")
CONDITIONS = ("A", "B", "C")
TEMPLATE_HEADERS = [
    "name", "sku", "category", "description", "specifications",
    "condition", "stock", "basePrice", "images", "certifications",
]
ALLOWED_MIME_TYPES = (
    "text/csv",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
)


def parse_csv_content(csv_content: str) -> list[dict]:
    """Rows as dicts keyed by lowercased header. Each dict carries its file row number."""
    text = csv_content.lstrip("\ufeff").strip()
    reader = csv.DictReader(io.StringIO(text))
    if not reader.fieldnames:
        raise InvalidInputError("CSV file must contain at least a header row and one data row")
    reader.fieldnames = [h.strip().lower() for h in reader.fieldnames]
    missing = [f for f in REQUIRED_FIELDS if f not in reader.fieldnames]
    if missing:
        raise InvalidInputError(f"Missing required fields: {', '.join(missing)}")

    rows = []
    saw_data = False
    for row in reader:
        saw_data = True
        clean = {k: (v or "").strip() for k, v in row.items() if k}
        if not clean.get("name") or not clean.get("sku"):
            continue
        clean["_row"] = reader.line_num
        rows.append(clean)
    if not saw_data:
        raise InvalidInputError("CSV file must contain at least a header row and one data row")
    return rows


def _parse_price(raw: str) -> Decimal | None:
    if not raw:
        return None
    try:
        return Decimal(raw)
    except InvalidOperation:
        return Decimal(-1)


def _parse_stock(raw: str) -> int | None:
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return -1


def validate_row(row: dict) -> str | None:
    """Return an error message for a bad row, or None."""
    n = row.get("_row")
    name, sku = row.get("name", ""), row.get("sku", "")
    if not name:
        return f"Row {n}: Product name is required"
    if not sku:
        return f"Row {n}: Product SKU is required"
    if len(name) > 255:
        return f"Row {n}: Product name must not exceed 255 characters"
    if len(sku) > 100:
        return f"Row {n}: Product SKU must not exceed 100 characters"
    condition = row.get("condition", "")
    if condition and condition.upper() not in CONDITIONS:
        return f"Row {n}: Product condition must be A, B, or C"
    price = _parse_price(row.get("baseprice") or row.get("price", ""))
    if price is not None and price < 0:
        return f"Row {n}: Product price cannot be negative"
    stock = _parse_stock(row.get("stock", ""))
    if stock is not None and stock < 0:
        return f"Row {n}: Product stock cannot be negative"
    return None


def slugify(name: str) -> str:
    slug = re.sub(r"[^\w\s-]", "", name.lower())
    slug = re.sub(r"[\s_]+", "-", slug)
    return re.sub(r"-+", "-", slug).strip("-")


def _split(raw: str) -> list[str]:
    return [part.strip() for part in (raw or "").split(",") if part.strip()]


def row_to_product(row: dict, category_id: int | None, condition_grade_id: int | None) -> Product:
    price = _parse_price(row.get("baseprice") or row.get("price", "")) or Decimal(0)
    specs = row.get("specifications")
    return Product(
        name=row["name"],
        sku=row["sku"],
        slug=f"{slugify(row['name'])}-{uuid.uuid4().hex[:8]}",
        category_id=category_id,
        condition_grade_id=condition_grade_id,
        description=row.get("description") or None,
        specifications={"summary": specs} if specs else {},
        stock=_parse_stock(row.get("stock", "")) or 0,
        base_price=int((price * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP)),
        images=_split(row.get("images", "")),
        active=True,
    )


def import_products(db: Session, csv_content: str, category_id: int | None, condition_grade: str) -> dict:
    rows = parse_csv_content(csv_content)
    grade = db.query(ConditionGrade).filter_by(grade=condition_grade.upper()).first()
    certs = {c.name.lower(): c.id for c in db.query(Certification).all()}
    result = {"success": 0, "failed": 0, "errors": [], "products": []}

    for row in rows:
        error = validate_row(row)
        if error:
            result["failed"] += 1
            result["errors"].append({"row": row["_row"], "error": error})
            continue
        product = row_to_product(row, category_id, grade.id if grade else None)
        try:
            with db.begin_nested():
                db.add(product)
                db.flush()
                for cert_name in _split(row.get("certifications", "")):
                    cert_id = certs.get(cert_name.lower())
                    if cert_id:
                        db.add(ProductCertification(product_id=product.id, certification_id=cert_id))
                db.flush()
        except IntegrityError as e:
            result["failed"] += 1
            result["errors"].append(
                {"row": row["_row"], "error": f"Database error: duplicate or invalid value ({e.orig})"}
            )
            continue
        result["success"] += 1
        result["products"].append({"id": product.id, "name": product.name, "sku": product.sku})

    db.commit()
    log.info("Bulk upload: %d created, %d failed", result["success"], result["failed"])
    return result


def generate_csv_template() -> str:
    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow(TEMPLATE_HEADERS)
    writer.writerow([
        "Wireless Bluetooth Speaker", "WBS-001", "Electronics", "High-quality portable speaker",
        "Power: 10W, Battery: 8 hours", "A", "100", "25.50",
        "https://example.com/image1.jpg,https://example.com/image2.jpg", "CE,FCC",
    ])
    return out.getvalue()


def validate_csv_file(filename: str, content_type: str | None, size: int) -> str | None:
    """Return an error message if the upload is unacceptable, else None."""
    max_bytes = settings.max_upload_size_mb * 1024 * 1024
    if size > max_bytes:
        return f"File size exceeds maximum limit of {settings.max_upload_size_mb}MB"
    if (content_type or "") not in ALLOWED_MIME_TYPES and not (filename or "").lower().endswith(".csv"):
        return "Invalid file format. Please upload a CSV or Excel file"
    return None

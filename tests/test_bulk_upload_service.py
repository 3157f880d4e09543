"""
test_bulk_upload_service.py — CSV product import

Business Rules tested:
- Rows without name/sku are skipped, not failed
- A bad row is reported by its file row number and the rest still import
- Duplicate SKUs fail inside their own savepoint
- Prices are converted from currency units to cents

Called by: pytest
Depends on: wholesale/services/bulk_upload_service.py, conftest.py
"""

import pytest

from wholesale.models import Certification, ConditionGrade, Product, ProductCertification
from wholesale.services.bulk_upload_service import (
    generate_csv_template,
    import_products,
    parse_csv_content,
    slugify,
    validate_csv_file,
    validate_row,
)
from wholesale.services.errors import InvalidInputError

HEADER = "name,sku,description,condition,stock,basePrice,images,certifications\n"


class TestParse:
    def test_header_only_rejected(self):
        with pytest.raises(InvalidInputError, match="header row and one data row"):
            parse_csv_content(HEADER)

    def test_missing_required_column(self):
        with pytest.raises(InvalidInputError, match="Missing required fields: sku"):
            parse_csv_content("name,price\nWidget,1.00\n")

    def test_bom_and_header_case(self):
        rows = parse_csv_content("\ufeffName,SKU\nWidget,W-1\n")
        assert rows == [{"name": "Widget", "sku": "W-1", "_row": 2}]

    def test_rows_without_identity_skipped(self):
        rows = parse_csv_content("name,sku\nWidget,W-1\n,W-2\nNo Sku,\nGadget,G-1\n")
        assert [r["sku"] for r in rows] == ["W-1", "G-1"]
        assert rows[1]["_row"] == 5


class TestValidateRow:
    @pytest.mark.parametrize(
        "row,message",
        [
            ({"name": "x" * 256, "sku": "A"}, "name must not exceed"),
            ({"name": "A", "sku": "s" * 101}, "SKU must not exceed"),
            ({"name": "A", "sku": "B", "condition": "D"}, "must be A, B, or C"),
            ({"name": "A", "sku": "B", "baseprice": "-1"}, "price cannot be negative"),
            ({"name": "A", "sku": "B", "baseprice": "abc"}, "price cannot be negative"),
            ({"name": "A", "sku": "B", "stock": "-3"}, "stock cannot be negative"),
        ],
    )
    def test_bad_rows(self, row, message):
        assert message in validate_row({**row, "_row": 7})
        assert validate_row({**row, "_row": 7}).startswith("Row 7:")

    def test_good_row(self):
        assert validate_row({"name": "A", "sku": "B", "condition": "b", "stock": "0", "baseprice": "0"}) is None


class TestImportProducts:
    def test_imports_and_converts_price(self, db_session, test_category):
        db_session.add(ConditionGrade(grade="A", price_multiplier=1))
        db_session.add(Certification(name="CE"))
        db_session.commit()
        csv_text = HEADER + 'Speaker,SP-1,Loud,A,100,25.50,"https://a/1.jpg,https://a/2.jpg","CE,UNKNOWN"\n'

        result = import_products(db_session, csv_text, test_category.id, "a")

        assert result["success"] == 1
        product = db_session.query(Product).filter_by(sku="SP-1").one()
        assert product.base_price == 2550
        assert product.stock == 100
        assert product.images == ["https://a/1.jpg", "https://a/2.jpg"]
        assert product.slug.startswith("speaker-")
        assert product.condition_grade.grade == "A"
        links = db_session.query(ProductCertification).filter_by(product_id=product.id).all()
        assert len(links) == 1

    def test_duplicate_sku_isolated(self, db_session, test_product):
        csv_text = "name,sku\nFirst,NEW-1\nClash,WS-001\nLast,NEW-2\n"
        result = import_products(db_session, csv_text, None, "A")

        assert result["success"] == 2
        assert result["failed"] == 1
        assert result["errors"][0]["row"] == 3
        assert "duplicate" in result["errors"][0]["error"]
        skus = {p.sku for p in db_session.query(Product).all()}
        assert skus == {"WS-001", "NEW-1", "NEW-2"}

    def test_validation_failure_reported(self, db_session):
        result = import_products(db_session, "name,sku,stock\nOk,OK-1,5\nBad,BAD-1,-5\n", None, "A")
        assert result["success"] == 1
        assert result["errors"] == [{"row": 3, "error": "Row 3: Product stock cannot be negative"}]


def test_template_has_header_and_example():
    lines = generate_csv_template().splitlines()
    assert lines[0].startswith("name,sku,category")
    assert "WBS-001" in lines[1]
    assert len(parse_csv_content(generate_csv_template())) == 1


def test_validate_csv_file():
    assert validate_csv_file("products.csv", "application/octet-stream", 100) is None
    assert validate_csv_file("products.txt", "text/csv", 100) is None
    assert "Invalid file format" in validate_csv_file("products.pdf", "application/pdf", 100)
    assert "exceeds" in validate_csv_file("products.csv", "text/csv", 50 * 1024 * 1024)


def test_slugify():
    assert slugify("  Wireless Speaker -- Pro!  ") == "wireless-speaker-pro"

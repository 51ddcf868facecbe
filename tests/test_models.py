"""Tests for the receipt data model."""

import pytest
from pydantic import ValidationError

from app.exceptions import InvalidImageError
from app.models.receipt import ExtractionResult, ReceiptImage


class TestReceiptImage:

    def test_valid_image(self, png_bytes):
        image = ReceiptImage(content=png_bytes, media_type="image/png")
        assert image.size == len(png_bytes)
        assert image.filename is None

    def test_empty_content_rejected(self):
        with pytest.raises(InvalidImageError) as exc_info:
            ReceiptImage(content=b"", media_type="image/jpeg")
        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize("media_type", ["text/plain", "application/pdf", "", None])
    def test_non_image_media_type_rejected(self, png_bytes, media_type):
        with pytest.raises(InvalidImageError):
            ReceiptImage(content=png_bytes, media_type=media_type)

    def test_media_type_check_is_case_insensitive(self, png_bytes):
        assert ReceiptImage(content=png_bytes, media_type="IMAGE/JPEG").media_type == "IMAGE/JPEG"

    def test_immutable(self, receipt_image):
        with pytest.raises(AttributeError):
            receipt_image.content = b"other"


class TestExtractionResult:

    def test_to_dict_uses_camel_case(self):
        result = ExtractionResult(merchant_name="Cafe", total=1200, transaction_date="2024-03-01")
        assert result.to_dict() == {"merchantName": "Cafe", "total": 1200, "transactionDate": "2024-03-01"}

    def test_absent_fields_are_omitted(self):
        result = ExtractionResult(merchant_name="Cafe")
        assert result.total is None
        assert result.to_dict() == {"merchantName": "Cafe"}

    def test_accepts_aliases(self):
        result = ExtractionResult.model_validate({"merchantName": "Cafe", "transactionDate": "2024-03-01"})
        assert result.merchant_name == "Cafe"
        assert result.transaction_date == "2024-03-01"


    @pytest.mark.parametrize("total", [True, False])
    def test_boolean_total_rejected(self, total):
        with pytest.raises(ValidationError):
            ExtractionResult(total=total)

    @pytest.mark.parametrize("total", [float("nan"), float("inf"), "NaN", "-Infinity"])
    def test_non_finite_total_rejected(self, total):
        with pytest.raises(ValidationError):
            ExtractionResult(total=total)

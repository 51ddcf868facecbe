"""Tests for the receipt upload endpoint with the OCR service mocked out."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from app.api.core.config import Settings
from app.api.deps import get_ocr_service
from app.exceptions import ConfigurationError, EmptyResultError, UpstreamResponseError
from app.main import app
from app.models.receipt import ExtractionResult


@pytest.fixture
def ocr_service():
    service = MagicMock()
    service.extract = AsyncMock(return_value=ExtractionResult(
        merchant_name="株式会社サンプル商事", total=367500, transaction_date="2024-01-15",
    ))
    return service


@pytest.fixture
def client(ocr_service):
    app.dependency_overrides[get_ocr_service] = lambda: ocr_service
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestExtractEndpoint:

    def test_success(self, client, ocr_service, png_bytes):
        response = client.post(
            "/api/receipts/extract",
            files={"image": ("receipt.png", png_bytes, "image/png")},
            data={"ocrService": "openai", "fileId": "file-1"},
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "fileId": "file-1",
            "result": {"merchantName": "株式会社サンプル商事", "total": 367500, "transactionDate": "2024-01-15"},
        }
        image = ocr_service.extract.await_args.args[0]
        assert image.content == png_bytes
        assert image.media_type == "image/png"
        assert ocr_service.extract.await_args.kwargs["backend"] == "openai"

    def test_absent_fields_are_omitted(self, client, ocr_service, png_bytes):
        ocr_service.extract.return_value = ExtractionResult(merchant_name="Cafe")

        response = client.post("/api/receipts/extract", files={"image": ("r.jpg", png_bytes, "image/jpeg")})

        assert response.status_code == 200
        assert response.json()["result"] == {"merchantName": "Cafe"}
        assert ocr_service.extract.await_args.kwargs["backend"] is None

    def test_empty_file_rejected_before_extraction(self, client, ocr_service):
        response = client.post(
            "/api/receipts/extract",
            files={"image": ("receipt.png", b"", "image/png")},
            data={"fileId": "file-2"},
        )

        assert response.status_code == 400
        assert response.json() == {"success": False, "fileId": "file-2", "error": "No file was selected."}
        ocr_service.extract.assert_not_awaited()

    def test_non_image_rejected_before_extraction(self, client, ocr_service):
        response = client.post("/api/receipts/extract", files={"image": ("notes.txt", b"hello", "text/plain")})

        assert response.status_code == 400
        assert response.json()["error"] == "Please select an image file."
        ocr_service.extract.assert_not_awaited()

    def test_missing_file(self, client, ocr_service):
        response = client.post("/api/receipts/extract", data={"ocrService": "openai"})

        assert response.status_code == 400
        assert response.json()["error"] == "No file was selected."
        ocr_service.extract.assert_not_awaited()

    def test_empty_result(self, client, ocr_service, png_bytes):
        ocr_service.extract.side_effect = EmptyResultError()

        response = client.post("/api/receipts/extract", files={"image": ("r.png", png_bytes, "image/png")})

        assert response.status_code == 502
        body = response.json()
        assert body["success"] is False
        assert "No receipt was detected" in body["error"]
        assert "result" not in body

    def test_upstream_error_message(self, client, ocr_service, png_bytes):
        ocr_service.extract.side_effect = UpstreamResponseError("Access denied.", code="401")

        response = client.post("/api/receipts/extract", files={"image": ("r.png", png_bytes, "image/png")})

        assert response.status_code == 502
        assert response.json()["error"] == "File processing failed: Access denied."

    def test_unexpected_error(self, client, ocr_service, png_bytes):
        ocr_service.extract.side_effect = RuntimeError("boom")

        response = client.post("/api/receipts/extract", files={"image": ("r.png", png_bytes, "image/png")})

        assert response.status_code == 500
        assert response.json()["error"] == "An unexpected error occurred: boom"


class TestApplication:

    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_startup_fails_without_configuration(self):
        settings = Settings(_env_file=None, AZURE_API_KEY=None, AZURE_ENDPOINT=None, OCR_BACKENDS=["document-analysis"])

        with patch("app.main.settings", settings):
            with pytest.raises(ConfigurationError):
                with TestClient(app):
                    pass

    def test_startup_builds_service(self, full_settings):
        with patch("app.main.settings", full_settings):
            with TestClient(app) as client:
                assert set(client.app.state.ocr_service.extractors) == {"document-analysis", "vision-language-model"}

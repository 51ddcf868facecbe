import pytest

from app.api.core.config import Settings
from app.models.receipt import ReceiptImage

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"receipt-image-bytes"


@pytest.fixture
def png_bytes():
    return PNG_BYTES


@pytest.fixture
def receipt_image():
    return ReceiptImage(content=PNG_BYTES, media_type="image/png", filename="receipt.png")


@pytest.fixture
def full_settings():
    """Settings with every backend configured, ignoring any local .env file."""
    return Settings(
        _env_file=None,
        AZURE_API_KEY="di-key",
        AZURE_ENDPOINT="https://di.example.com/",
        AZURE_OPENAI_API_KEY="aoai-key",
        AZURE_OPENAI_ENDPOINT="https://aoai.example.com",
        AZURE_OPENAI_API_VERSION="2024-10-21",
        AZURE_OPENAI_DEPLOYMENT_NAME="gpt-4o",
    )

import base64

from fastapi import UploadFile

from app.models.receipt import ReceiptImage


def to_base64(image: ReceiptImage) -> str:
    """Base64 text of the full image payload."""
    return base64.b64encode(image.content).decode("utf-8")


def to_data_url(image: ReceiptImage) -> str:
    return f"data:{image.media_type};base64,{to_base64(image)}"


async def read_upload(file: UploadFile) -> ReceiptImage:
    """Reads an upload into memory. Raises InvalidImageError for empty or non-image files."""
    content = await file.read()
    return ReceiptImage(content=content, media_type=file.content_type or "", filename=file.filename)

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import JSONResponse

from app.api.deps import get_ocr_service
from app.exceptions import InvalidImageError, OCRError
from app.models.receipt import ExtractionResponse
from app.services.encoding import read_upload
from app.services.ocr_service import OcrService

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/extract", response_model=ExtractionResponse, response_model_exclude_none=True)
async def extract_receipt(
    image: Optional[UploadFile] = File(None),
    backend: Optional[str] = Form(None, alias="ocrService"),
    file_id: Optional[str] = Form(None, alias="fileId"),
    ocr_service: OcrService = Depends(get_ocr_service)
):
    """Uploads a receipt image and returns its merchant name, total and transaction date."""
    try:
        if image is None:
            raise InvalidImageError("No file was selected.")
        receipt = await read_upload(image)
        result = await ocr_service.extract(receipt, backend=backend)
        return ExtractionResponse(success=True, file_id=file_id, result=result.to_dict()).to_dict()
    except InvalidImageError as e:
        return _error_response(e.status_code, e.message, file_id)
    except OCRError as e:
        logger.warning(f"Receipt extraction failed: {e.message}")
        return _error_response(e.status_code, f"File processing failed: {e.message}", file_id)
    except Exception as e:
        logger.exception("Unexpected error during receipt extraction")
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            f"An unexpected error occurred: {str(e)}",
            file_id,
        )


def _error_response(status_code: int, message: str, file_id: Optional[str]) -> JSONResponse:
    body = ExtractionResponse(success=False, file_id=file_id, error=message)
    return JSONResponse(status_code=status_code, content=body.to_dict())

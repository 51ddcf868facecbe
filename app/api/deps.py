from fastapi import Request

from app.services.ocr_service import OcrService


def get_ocr_service(request: Request) -> OcrService:
    # Built once in the application lifespan so missing configuration fails at startup
    return request.app.state.ocr_service

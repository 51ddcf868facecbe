import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.core.config import settings
from app.api.main import api_router
from app.logging_config import setup_logging
from app.services.ocr_service import OcrService

setup_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Missing backend configuration raises ConfigurationError here and aborts startup
    app.state.ocr_service = OcrService.from_settings(settings)
    logger.info("Receipt OCR service started")
    yield
    await app.state.ocr_service.close()


app = FastAPI(title="Receipt OCR", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)

@app.get("/api/health")
async def health_check():
    return {"status": "healthy"}

import logging
from enum import Enum
from typing import Dict, Iterable, Optional, Protocol

from app.api.core.config import Settings
from app.exceptions import ConfigurationError
from app.models.receipt import ExtractionResult, ReceiptImage
from app.services.document_analysis import DocumentAnalysisExtractor
from app.services.vision_language import VisionLanguageExtractor

logger = logging.getLogger(__name__)


class OcrBackend(str, Enum):
    DOCUMENT_ANALYSIS = "document-analysis"
    VISION_LANGUAGE_MODEL = "vision-language-model"

    @classmethod
    def resolve(cls, value: Optional[str]) -> "OcrBackend":
        """Maps a caller's preference to a backend; unknown values fall back to document analysis."""
        if isinstance(value, cls):
            return value
        key = (value or "").strip().lower()
        return _BACKEND_ALIASES.get(key, cls.DOCUMENT_ANALYSIS)


# Form values sent by the web page are accepted alongside the canonical names
_BACKEND_ALIASES = {
    OcrBackend.DOCUMENT_ANALYSIS.value: OcrBackend.DOCUMENT_ANALYSIS,
    "document-intelligence": OcrBackend.DOCUMENT_ANALYSIS,
    OcrBackend.VISION_LANGUAGE_MODEL.value: OcrBackend.VISION_LANGUAGE_MODEL,
    "openai": OcrBackend.VISION_LANGUAGE_MODEL,
}


class Extractor(Protocol):
    async def analyze(self, image: ReceiptImage) -> ExtractionResult:
        ...


class OcrService:
    """Routes a receipt image to one configured extractor."""

    def __init__(self, extractors: Dict[OcrBackend, Extractor]):
        self.extractors = dict(extractors)

    @classmethod
    def from_settings(cls, settings: Settings) -> "OcrService":
        """Builds every enabled backend. Raises ConfigurationError on missing settings."""
        builders = {
            OcrBackend.DOCUMENT_ANALYSIS: DocumentAnalysisExtractor.from_settings,
            OcrBackend.VISION_LANGUAGE_MODEL: VisionLanguageExtractor.from_settings,
        }
        extractors = {}
        for backend in _enabled_backends(settings.OCR_BACKENDS):
            extractors[backend] = builders[backend](settings)
            logger.info(f"OCR backend enabled: {backend.value}")
        if not extractors:
            raise ConfigurationError("OCR_BACKENDS does not name any known backend.")
        return cls(extractors)

    async def extract(self, image: ReceiptImage, backend: Optional[str] = None) -> ExtractionResult:
        """Extracts merchant name, total and date. Adapter errors propagate unchanged."""
        selected = OcrBackend.resolve(backend)
        extractor = self.extractors.get(selected)
        if extractor is None:
            raise ConfigurationError(f"OCR backend '{selected.value}' is not enabled.")
        logger.info(f"Extracting receipt with {selected.value}")
        return await extractor.analyze(image)

    async def close(self):
        for extractor in self.extractors.values():
            close = getattr(extractor, "close", None)
            if close is not None:
                await close()


def _enabled_backends(names: Iterable[str]):
    seen = []
    for name in names:
        backend = _BACKEND_ALIASES.get(name.strip().lower())
        if backend is None:
            logger.warning(f"Ignoring unknown OCR backend in OCR_BACKENDS: {name}")
        elif backend not in seen:
            seen.append(backend)
    return seen

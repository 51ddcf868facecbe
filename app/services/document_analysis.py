"""
Azure Document Intelligence backend.

Submits the image to the prebuilt receipt model and waits on the SDK's
long-running operation poller, which follows the service's Retry-After
hints. MerchantName, Total and TransactionDate are read from the first
detected document.
"""

import asyncio
import logging
from typing import Any, Optional

from azure.ai.documentintelligence.aio import DocumentIntelligenceClient
from azure.ai.documentintelligence.models import AnalyzeDocumentRequest
from azure.core.credentials import AzureKeyCredential
from azure.core.exceptions import HttpResponseError

from app.api.core.config import Settings
from app.exceptions import (
    ConfigurationError,
    EmptyResultError,
    PollingTimeoutError,
    UpstreamResponseError,
)
from app.models.receipt import ExtractionResult, ReceiptImage

logger = logging.getLogger(__name__)


class DocumentAnalysisExtractor:
    """Receipt extraction through the prebuilt-receipt analysis model."""

    MODEL_ID = "prebuilt-receipt"

    def __init__(
        self,
        api_key: Optional[str],
        endpoint: Optional[str],
        api_version: str = "2024-11-30",
        poll_interval: float = 1.0,
        poll_timeout: Optional[float] = 300.0,
        http_timeout: float = 30.0,
        client: Optional[DocumentIntelligenceClient] = None,
    ):
        missing = [name for name, value in (("AZURE_API_KEY", api_key), ("AZURE_ENDPOINT", endpoint)) if not value]
        if missing:
            raise ConfigurationError(
                f"Set the environment variables {' and '.join(missing)} to use document analysis."
            )
        self.poll_interval = poll_interval
        self.poll_timeout = poll_timeout
        self.client = client or DocumentIntelligenceClient(
            endpoint=endpoint,
            credential=AzureKeyCredential(api_key),
            api_version=api_version,
            connection_timeout=http_timeout,
            read_timeout=http_timeout,
        )

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "DocumentAnalysisExtractor":
        return cls(
            api_key=settings.AZURE_API_KEY,
            endpoint=settings.AZURE_ENDPOINT,
            api_version=settings.AZURE_DOCUMENT_INTELLIGENCE_API_VERSION,
            poll_interval=settings.DOCUMENT_ANALYSIS_POLL_INTERVAL,
            poll_timeout=settings.DOCUMENT_ANALYSIS_POLL_TIMEOUT,
            http_timeout=settings.HTTP_TIMEOUT,
            **kwargs,
        )

    async def analyze(self, image: ReceiptImage) -> ExtractionResult:
        logger.info(f"Submitting receipt to document analysis ({image.size} bytes)")
        try:
            result = await asyncio.wait_for(self._analyze_document(image), timeout=self.poll_timeout)
        except asyncio.TimeoutError as e:
            raise PollingTimeoutError(
                f"Document analysis did not finish within {self.poll_timeout:g} seconds"
            ) from e
        except HttpResponseError as e:
            logger.warning(f"Document analysis failed: {e.message}")
            raise _upstream_error(e) from e

        documents = result.documents or []
        if not documents:
            raise EmptyResultError()

        # Only the first detected receipt is read
        extraction = ExtractionResult(
            merchant_name=merchant_name(documents[0]),
            total=total(documents[0]),
            transaction_date=transaction_date(documents[0]),
        )
        logger.info("Document analysis completed")
        return extraction

    async def _analyze_document(self, image: ReceiptImage):
        poller = await self.client.begin_analyze_document(
            self.MODEL_ID,
            AnalyzeDocumentRequest(bytes_source=image.content),
            polling_interval=self.poll_interval,
        )
        logger.debug("Document analysis accepted, polling for the result")
        return await poller.result()

    async def close(self):
        await self.client.close()


def _upstream_error(error: HttpResponseError) -> UpstreamResponseError:
    """Carries the service's reported error code and message."""
    odata = error.error
    if odata is None:
        return UpstreamResponseError(error.message or "Unexpected response from document analysis")
    return UpstreamResponseError(
        message=odata.message or error.message,
        code=odata.code,
        details={"code": odata.code, "message": odata.message},
    )


def _field(document: Any, name: str) -> Any:
    fields = document.fields or {}
    return fields.get(name)


def merchant_name(document: Any) -> Optional[str]:
    field = _field(document, "MerchantName")
    return field.content if field else None


def total(document: Any) -> Optional[float]:
    field = _field(document, "Total")
    if field is None or field.value_currency is None:
        return None
    return field.value_currency.amount


def transaction_date(document: Any) -> Optional[str]:
    field = _field(document, "TransactionDate")
    value = field.value_date if field else None
    if value is None:
        return None
    # The SDK deserializes valueDate to datetime.date
    return value.isoformat() if hasattr(value, "isoformat") else str(value)

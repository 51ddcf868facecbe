from typing import Any, Dict, Optional


class OCRError(Exception):
    """Base exception for receipt extraction errors."""
    def __init__(self, message: str, status_code: int = 502):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ConfigurationError(OCRError):
    """Raised at startup when a backend is missing required settings."""
    def __init__(self, message: str):
        super().__init__(message, status_code=503)


class InvalidImageError(OCRError):
    """Raised when the upload is empty or is not an image."""
    def __init__(self, message: str = "Please select an image file."):
        super().__init__(message, status_code=400)


class UpstreamResponseError(OCRError):
    """Raised when the document analysis service answers outside its contract."""
    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 502,
    ):
        self.code = code
        self.details = details or {}
        super().__init__(message, status_code=status_code)

    @classmethod
    def from_payload(cls, payload: Any, fallback: str) -> "UpstreamResponseError":
        """Build from a service body of the form {"error": {"code", "message", ...}}."""
        error = payload.get("error") if isinstance(payload, dict) else None
        if not isinstance(error, dict):
            return cls(fallback)
        return cls(
            message=error.get("message") or fallback,
            code=error.get("code"),
            details=error,
        )


class PollingTimeoutError(UpstreamResponseError):
    def __init__(self, message: str):
        super().__init__(message, code="Timeout", status_code=504)


class EmptyResultError(OCRError):
    """Raised when analysis succeeds but no receipt was detected."""
    def __init__(self, message: str = "No receipt was detected in the image."):
        super().__init__(message)


class InvalidModelResponseError(OCRError):
    """Raised when the vision model returns no usable content."""
    def __init__(self, message: str = "Invalid response from the vision model."):
        super().__init__(message)


class ResponseFormatError(InvalidModelResponseError):
    """Raised when the vision model's content is not the expected JSON object."""

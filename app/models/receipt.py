import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.exceptions import InvalidImageError


@dataclass(frozen=True)
class ReceiptImage:
    """An uploaded receipt image, consumed by exactly one extraction call."""
    content: bytes
    media_type: str
    filename: Optional[str] = None

    def __post_init__(self):
        if not self.content:
            raise InvalidImageError("No file was selected.")
        if not (self.media_type or "").lower().startswith("image/"):
            raise InvalidImageError("Please select an image file.")

    @property
    def size(self) -> int:
        return len(self.content)


class ExtractionResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra='ignore')

    merchant_name: Optional[str] = Field(None, description="Name of the merchant or issuer", alias="merchantName")
    total: Optional[Union[int, float]] = Field(None, description="Total amount of the receipt")
    transaction_date: Optional[str] = Field(None, description="Transaction date as YYYY-MM-DD", alias="transactionDate")

    def to_dict(self) -> Dict[str, Any]:
        """Output contract: camelCase keys, absent fields omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)

    @field_validator("total", mode="before")
    @classmethod
    def reject_boolean_total(cls, value: Any) -> Any:
        # bool is an int subclass; true must not become an amount of 1
        if isinstance(value, bool):
            raise ValueError("total must be a number, not a boolean")
        return value

    @field_validator("total")
    @classmethod
    def require_finite_total(cls, value: Optional[Union[int, float]]) -> Optional[Union[int, float]]:
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError("total must be a finite number")
        return value


class ExtractionResponse(BaseModel):
    """Body returned by the upload endpoint."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    file_id: Optional[str] = Field(None, description="Caller's correlation token, echoed back", alias="fileId")
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

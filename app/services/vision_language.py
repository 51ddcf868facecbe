import json
import logging
from typing import Optional

from openai import AsyncAzureOpenAI
from pydantic import ValidationError

from app.api.core.config import Settings
from app.exceptions import ConfigurationError, InvalidModelResponseError, ResponseFormatError
from app.models.receipt import ExtractionResult, ReceiptImage
from app.services.encoding import to_data_url

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """あなたは領収書の内容を読み取るアシスタントです。
画像の領収書から次の項目を抽出してください。
- transactionDate: 取引日。西暦のYYYY-MM-DD形式
- total: 合計金額。数値で回答
- merchantName: 発行元（店舗・会社）の名称

回答は transactionDate、total、merchantName の3つのキーだけを持つJSONオブジェクトにしてください。"""


class VisionLanguageExtractor:
    """Receipt extraction through an Azure OpenAI multimodal chat deployment."""

    def __init__(
        self,
        api_key: Optional[str],
        endpoint: Optional[str],
        api_version: Optional[str],
        deployment: Optional[str],
        max_tokens: int = 1000,
        client: Optional[AsyncAzureOpenAI] = None,
    ):
        required = (
            ("AZURE_OPENAI_API_KEY", api_key),
            ("AZURE_OPENAI_ENDPOINT", endpoint),
            ("AZURE_OPENAI_API_VERSION", api_version),
            ("AZURE_OPENAI_DEPLOYMENT_NAME", deployment),
        )
        missing = [name for name, value in required if not value]
        if missing:
            raise ConfigurationError(
                f"Set the environment variables {', '.join(missing)} to use the vision model."
            )
        self.deployment = deployment
        self.max_tokens = max_tokens
        self.client = client or AsyncAzureOpenAI(
            api_key=api_key,
            azure_endpoint=endpoint,
            api_version=api_version,
        )

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "VisionLanguageExtractor":
        return cls(
            api_key=settings.AZURE_OPENAI_API_KEY,
            endpoint=settings.AZURE_OPENAI_ENDPOINT,
            api_version=settings.AZURE_OPENAI_API_VERSION,
            deployment=settings.AZURE_OPENAI_DEPLOYMENT_NAME,
            max_tokens=settings.VISION_MAX_TOKENS,
            **kwargs,
        )

    def build_messages(self, image: ReceiptImage) -> list:
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": [
                    {"type": "image_url", "image_url": {"url": to_data_url(image)}},
                ],
            },
        ]

    async def analyze(self, image: ReceiptImage) -> ExtractionResult:
        logger.info(f"Sending receipt to vision deployment {self.deployment} ({image.size} bytes)")
        response = await self.client.chat.completions.create(
            model=self.deployment,
            messages=self.build_messages(image),
            max_tokens=self.max_tokens,
            response_format={"type": "json_object"},
        )

        content = response.choices[0].message.content if response.choices else None
        if not content:
            logger.warning("Vision model returned no content")
            raise InvalidModelResponseError()

        result = self.parse_content(content)
        logger.info("Vision model extraction completed")
        return result

    @staticmethod
    def parse_content(content: str) -> ExtractionResult:
        """Strict JSON parse of the model reply. No heuristic recovery."""
        try:
            parsed = json.loads(content, parse_constant=_reject_constant)
        except json.JSONDecodeError as e:
            raise ResponseFormatError(f"Invalid response from the vision model: not JSON ({e.msg})") from e

        if not isinstance(parsed, dict):
            raise ResponseFormatError("Invalid response from the vision model: expected a JSON object")

        try:
            return ExtractionResult.model_validate(parsed)
        except ValidationError as e:
            fields = ", ".join(dict.fromkeys(str(err["loc"][0]) for err in e.errors() if err["loc"]))
            raise ResponseFormatError(f"Invalid response from the vision model: bad value for {fields}") from e

    async def close(self):
        await self.client.close()


def _reject_constant(token: str):
    # json.loads accepts NaN and Infinity, which are not JSON
    raise ResponseFormatError(f"Invalid response from the vision model: {token} is not a JSON value")

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional

class Settings(BaseSettings):
    # Load settings from a .env file
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra='ignore')

    # Azure Document Intelligence - required when "document-analysis" is enabled
    AZURE_API_KEY: Optional[str] = None
    AZURE_ENDPOINT: Optional[str] = None
    AZURE_DOCUMENT_INTELLIGENCE_API_VERSION: str = "2024-11-30"

    # Azure OpenAI - required when "vision-language-model" is enabled
    AZURE_OPENAI_API_KEY: Optional[str] = None
    AZURE_OPENAI_ENDPOINT: Optional[str] = None
    AZURE_OPENAI_API_VERSION: Optional[str] = None
    AZURE_OPENAI_DEPLOYMENT_NAME: Optional[str] = None

    # Backends built at startup
    OCR_BACKENDS: List[str] = ["document-analysis", "vision-language-model"]

    DOCUMENT_ANALYSIS_POLL_INTERVAL: float = 1.0
    DOCUMENT_ANALYSIS_POLL_TIMEOUT: float = 300.0
    HTTP_TIMEOUT: float = 30.0
    VISION_MAX_TOKENS: int = 1000

    CORS_ORIGINS: List[str] = ["http://localhost:3000"]
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

# Create a single, importable instance of the settings
settings = Settings()

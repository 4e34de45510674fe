"""Application configuration"""

from typing import List, Union
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=False,  # Don't validate defaults, allow empty strings
    )

    # Application
    APP_NAME: str = "Valuation Report Service"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # Azure Storage (all JSON documents and binary assets live in one container)
    AZURE_STORAGE_CONNECTION_STRING: str = ""
    AZURE_STORAGE_CONTAINER_NAME: str = "valuation-reports"

    # Google Maps geocoding (drafts are de-duplicated by place id)
    GOOGLE_MAPS_API_KEY: str = ""
    GEOCODE_API_URL: str = "https://maps.googleapis.com/maps/api/geocode/json"

    # Generative AI
    GEMINI_API_KEY: str = ""

    # Google Custom Search (statutory valuation lookup)
    GOOGLE_API_KEY: str = ""
    SEARCH_ENGINE_ID: str = ""
    CUSTOM_SEARCH_API_URL: str = "https://www.googleapis.com/customsearch/v1"
    STATUTORY_SEARCH_SITE: str = "*.aucklandcouncil.govt.nz"

    # Outbound HTTP
    HTTP_TIMEOUT_SECONDS: float = 30.0

    # Rendering
    DEFAULT_IMAGE_WIDTH: int = 300
    DEFAULT_IMAGE_HEIGHT: int = 200

    # CORS - can be set via environment variable as comma-separated string
    CORS_ORIGINS: Union[List[str], str] = Field(
        default=[
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ],
        validate_default=False
    )

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    # Validation constraints
    MAX_TEMPLATE_SIZE_MB: int = 50
    MAX_IMAGE_SIZE_MB: int = 20

    @property
    def storage_configured(self) -> bool:
        """Whether an Azure Storage connection string is available"""
        return bool(self.AZURE_STORAGE_CONNECTION_STRING)


# Create settings instance
settings = Settings()

"""
Central configuration. Database, catalog and image-generation settings in one place.
"""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # --- Environment ---
    env: str = Field(default="development", alias="ENV")
    log_level: str = Field(default="info", alias="LOG_LEVEL")
    debug: bool = Field(default=False, alias="DEBUG")

    # --- Database ---
    database_url: str = Field(
        default="sqlite+aiosqlite:///./lookstudio.db",
        alias="DATABASE_URL",
    )

    # --- Gemini (image synthesis) ---
    gemini_api_key: str = Field(default="", alias="GEMINI_API_KEY")
    gemini_image_model: str = Field(default="gemini-2.5-flash-image", alias="GEMINI_IMAGE_MODEL")
    image_fetch_timeout: float = Field(default=30.0, alias="IMAGE_FETCH_TIMEOUT")

    # --- Product catalog ---
    catalog_base_url: str = Field(
        default="https://www.ounass.ae/product/findbysku",
        alias="CATALOG_BASE_URL",
    )
    catalog_media_base_url: str = Field(
        default="https://ounass-ae.atgcdn.ae/pub/media/catalog/product",
        alias="CATALOG_MEDIA_BASE_URL",
    )
    catalog_timeout: float = Field(default=15.0, alias="CATALOG_TIMEOUT")

    # --- Lookboards ---
    public_id_length: int = Field(default=8, alias="PUBLIC_ID_LENGTH")
    public_id_max_attempts: int = Field(default=5, alias="PUBLIC_ID_MAX_ATTEMPTS")

    # --- API ---
    api_host: str = Field(default="0.0.0.0", alias="API_HOST")
    api_port: int = Field(default=8000, alias="API_PORT")
    cors_origins: str = Field(default="*", alias="CORS_ORIGINS")


@lru_cache
def get_settings() -> Settings:
    return Settings()

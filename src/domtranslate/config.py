"""Application configuration handling."""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_DISCOVERY_URL = "https://meity-auth.ulcacontrib.org/ulca/apis/v0/model/getModelsPipeline"
DEFAULT_PIPELINE_ID = "64392f96daac500b55c543cd"


class Settings(BaseSettings):
    """Central configuration for the DOM translation service."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_env: str = "development"
    log_level: str = "INFO"
    cors_origins: List[str] = ["http://localhost:5173"]

    ulca_api_key: Optional[str] = None
    ulca_user_id: Optional[str] = None
    discovery_url: str = DEFAULT_DISCOVERY_URL
    pipeline_id: str = DEFAULT_PIPELINE_ID

    batch_size: int = 20
    max_failures: int = 10
    request_timeout: float = 30.0

    ignore_tags: List[str] = ["script", "style", "img"]
    pad_translations: bool = True


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()

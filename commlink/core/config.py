"""Runtime settings for the CommLink API, read from the environment and ``.env``."""
from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Application
    PROJECT_NAME: str = "CommLink Link Budget API"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s"
    LOG_DIR: Optional[str] = None

    # Link model
    DEFAULT_SCENARIO: str = "normal"
    PACKET_LENGTH_BITS: int = Field(8000, gt=0)
    MAX_SWEEP_POINTS: int = Field(2000, gt=0)

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()


def get_settings() -> Settings:
    return settings


# FastAPI dependency
get_settings_dep = lru_cache(get_settings)

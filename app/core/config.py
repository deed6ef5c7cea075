from functools import lru_cache
from typing import List, Literal, Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # APP
    APP_NAME: str = "Daily Sales Tracker API"
    ENV: str = "development"
    DEBUG: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = False
    LOG_FILE_PATH: Optional[str] = None

    # CORS (comma-separated string in .env)
    CORS_ORIGINS: Optional[str] = None

    # HTTP cache for analytics JSON
    CACHE_MAX_AGE: int = 0
    CACHE_SWR: int = 30

    # Sales store
    STORE_BACKEND: Literal["memory", "file"] = "file"
    STORE_PATH: str = ".sales-store"
    LEDGER_KEY: str = "dailySalesData"

    # Report formatting
    CURRENCY_SYMBOL: str = "₦"

    # Headless rendering
    RENDER_VIEWPORT_WIDTH: int = 1280
    RENDER_VIEWPORT_HEIGHT: int = 800
    RENDER_DEVICE_SCALE: float = 2.0
    RENDER_PAGE_LOAD_TIMEOUT: int = 30
    CHROME_BINARY: Optional[str] = None
    CHROMEDRIVER_PATH: Optional[str] = None

    @field_validator("RENDER_DEVICE_SCALE")
    @classmethod
    def _scale_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("RENDER_DEVICE_SCALE must be positive.")
        return v

    @field_validator("RENDER_VIEWPORT_WIDTH", "RENDER_VIEWPORT_HEIGHT")
    @classmethod
    def _viewport_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Viewport dimensions must be positive.")
        return v

    @property
    def CORS_ORIGINS_LIST(self) -> List[str]:
        v = self.CORS_ORIGINS
        if not v:
            return []
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()

settings = get_settings()

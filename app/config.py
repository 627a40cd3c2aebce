from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import List, Optional, Union

from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    # App
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: Union[str, List[str]] = "*"
    # Absolute links (QR target, zip/qr/photo URLs). Falls back to the request host.
    PUBLIC_BASE_URL: Optional[str] = None

    # Storage
    STORAGE_DIR: str = "./uploads"
    FRONTEND_DIR: str = "./frontend"

    # Uploads
    MAX_FILE_SIZE: int = 50 * 1024 * 1024
    MAX_FILES_PER_UPLOAD: int = 50
    MAX_CUSTOMER_NAME_LENGTH: int = 200
    UPLOAD_RATE_LIMIT: str = "30/minute"

    # Monitoring
    SENTRY_DSN: Optional[str] = None

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(',') if origin.strip()]
        return v

    @field_validator('PUBLIC_BASE_URL', mode='before')
    @classmethod
    def strip_base_url(cls, v):
        if isinstance(v, str):
            v = v.strip().rstrip("/")
            return v or None
        return v

    @property
    def albums_dir(self) -> Path:
        return Path(self.STORAGE_DIR) / "albums"

    # Pydantic v2 config
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()

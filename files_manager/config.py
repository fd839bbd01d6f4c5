#config.py
import os
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict
from typing import Optional, List
from functools import lru_cache

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")
    # Application Settings
    APP_NAME: str = "Files Manager API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    DOCS_ENABLED: bool = True

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = int(os.environ.get("PORT", 5000))

    # Metadata store
    DATABASE_URL: str = "sqlite:///./files_manager.db"

    # Session cache and job queue
    REDIS_URL: Optional[str] = "redis://localhost:6379/0"
    SESSION_BACKEND: str = "redis"  # redis | memory
    SESSION_TTL_SECONDS: int = 24 * 60 * 60
    # memory: in-process, lost on restart. redis: durable, at-least-once via the worker
    JOB_QUEUE_BACKEND: str = "memory"  # memory | redis
    JOB_QUEUE_NAME: str = "fileQueue"
    JOB_QUEUE_MAXSIZE: int = 1000
    THUMBNAIL_WORKERS: int = 2
    THUMBNAIL_WIDTHS: List[int] = [500, 250, 100]

    # Blob storage
    FOLDER_PATH: str = "/tmp/files_manager"
    # Pending rows older than this are treated as abandoned uploads
    PENDING_GRACE_SECONDS: int = 15 * 60

    # Listing
    PAGE_SIZE: int = 20

    # CORS Settings (accept comma-separated strings to avoid JSON parsing in env)
    ALLOWED_ORIGINS: str = "*"

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    def _split_csv(self, value: str) -> List[str]:
        if value is None:
            return []
        value = value.strip()
        if value == "":
            return []
        return [item.strip() for item in value.split(",")]

    @property
    def allowed_origins_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_ORIGINS)


@lru_cache()
def get_settings() -> Settings:
    return Settings()

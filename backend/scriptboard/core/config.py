import os
from typing import Optional

from pydantic_settings import BaseSettings

from dotenv import load_dotenv
load_dotenv()


class Settings(BaseSettings):
    PROJECT_NAME: str = "Scriptboard API"
    API_V1_PREFIX: str = "/api/v1"

    # For local dev you can use sqlite:
    # SQLALCHEMY_DATABASE_URI: str = "sqlite:///./scriptboard.db"
    SQLALCHEMY_DATABASE_URI: str = os.getenv(
        "DATABASE_URL", "sqlite:///./scriptboard.db"
    )

    # Realtime fan-out between processes; in-process websockets only when unset
    REDIS_URL: Optional[str] = os.getenv("REDIS_URL")

    LOG_LEVEL: str = "INFO"

    # Persistence client (editor side)
    API_BASE_URL: str = "http://localhost:8000/api/v1"
    HTTP_TIMEOUT_SECONDS: float = 10.0

    # Autosave
    SAVE_DEBOUNCE_SECONDS: float = 1.0
    SAVE_MAX_RETRIES: int = 3
    SAVE_RETRY_BACKOFF_SECONDS: float = 0.5

    # Realtime subscriber
    REALTIME_RECONNECT_ATTEMPTS: int = 10
    REALTIME_RECONNECT_INTERVAL_SECONDS: float = 3.0

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()

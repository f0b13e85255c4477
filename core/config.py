"""
Application configuration using Pydantic Settings
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Loader settings with environment variable support"""

    # Logging
    LOG_LEVEL: str = "INFO"

    # Checkpoints
    WORK_DIR: Optional[str] = None

    # Target store
    TARGET_HOST: str = "http://127.0.0.1:8080"
    TARGET_GRAPH: str = "hugegraph"
    REQUEST_TIMEOUT: float = 60.0

    # Loading
    LOAD_BATCH_SIZE: int = 500
    LOAD_WORKERS: int = 4

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()

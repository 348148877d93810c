# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    DATABASE_URL: str = "sqlite:///./database_shipdesk.db"
    FRONTEND_URL: str = "http://localhost:3000"

    # Cooldown after a box removal before another removal is accepted (ms)
    DRAFT_REMOVAL_COOLDOWN_MS: int = 100
    DEFAULT_PAGE_SIZE: int = 20

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"

settings = Settings()

"""Application settings and configuration."""

import os
import secrets
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # --- FastAPI Configuration ---
    app_title: str = "Unixora Auth Service"
    app_description: str = "Signup, login and token verification for the Unixora student assistant."
    app_version: str = "1.0.0"

    # CORS settings
    cors_origins: List[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000"
    ]

    # Server settings
    host: str = "0.0.0.0"
    port: int = int(os.getenv("PORT", "3000"))

    # --- Authentication Configuration ---
    # JWT Secret key - should be set in environment for production
    secret_key: str = os.getenv("JWT_SECRET", secrets.token_urlsafe(32))
    algorithm: str = "HS256"
    access_token_expire_days: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", "7"))

    # Database settings
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./unixora.db")

    # --- Client Configuration ---
    auth_api_url: str = os.getenv("AUTH_API_URL", "http://localhost:3000")
    query_api_url: str = os.getenv("RAG_API_URL", "http://localhost:8000")
    match_api_url: str = os.getenv("RAG_API_URL", "http://localhost:8000")
    query_top_k: int = 5
    # None keeps httpx from timing out, matching the browser fetch behavior
    request_timeout: Optional[float] = None

    # Chat history
    history_limit: int = 10
    title_max_chars: int = 40
    source_preview_chars: int = 200

    # Client-local key-value storage (token + user profile)
    client_storage_path: str = str(Path.home() / ".unixora" / "storage.json")

    # --- Logging Configuration ---
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    class Config:
        env_file = ".env"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

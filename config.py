from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List


def _normalize_db_url(url: str) -> str:
    # Render sometimes hands out postgres://; normalize to postgresql://
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    # Force psycopg3 driver if using Postgres
    if url.startswith("postgresql://") and "+psycopg" not in url:
        url = url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def _split_origins(raw: str) -> List[str]:
    return [o.strip() for o in raw.split(",") if o.strip()]


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///./practice.db"
    google_api_key: str = ""
    google_api_base_url: str = "https://generativelanguage.googleapis.com"
    google_api_version: str = "v1beta"
    google_model_name: str = "models/gemini-2.0-flash"
    google_api_timeout: float = 30.0
    cors_origins: List[str] = field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"]
    )
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Read settings from the environment. Unset variables keep their defaults."""
    defaults = Settings()
    origins = os.getenv("CORS_ORIGINS")
    return Settings(
        database_url=_normalize_db_url(os.getenv("DATABASE_URL", defaults.database_url)),
        google_api_key=os.getenv("GOOGLE_API_KEY", ""),
        google_api_base_url=os.getenv("GOOGLE_API_BASE_URL", defaults.google_api_base_url).rstrip(
            "/"
        ),
        google_api_version=os.getenv("GOOGLE_API_VERSION", defaults.google_api_version),
        google_model_name=os.getenv("GOOGLE_MODEL_NAME", defaults.google_model_name),
        google_api_timeout=float(os.getenv("GOOGLE_API_TIMEOUT", defaults.google_api_timeout)),
        cors_origins=_split_origins(origins) if origins else defaults.cors_origins,
        log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Loaded once per process
    return load_settings()

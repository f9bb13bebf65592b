# app/core/config.py - Consolidated

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings.
    Loads values from environment variables (.env file)
    """
    # Database settings
    DATABASE_URL: str = ""

    # Supabase auth (identity verification for user-facing endpoints)
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: str = ""

    # Shared secret for internal/scheduler endpoints
    INTERNAL_SECRET: str = ""

    # YouTube / Google OAuth
    YOUTUBE_CLIENT_ID: str = ""
    YOUTUBE_CLIENT_SECRET: str = ""
    YOUTUBE_API_BASE_URL: str = "https://www.googleapis.com/youtube/v3"
    GOOGLE_TOKEN_URL: str = "https://oauth2.googleapis.com/token"
    YOUTUBE_HTTP_TIMEOUT: float = 15.0

    # Retry sweeper
    SYNC_RETRY_MAX_ATTEMPTS: int = 5
    SYNC_RETRY_INTERVAL_SECONDS: int = 300
    SYNC_RETRY_BATCH_LIMIT: int = 50
    SYNC_RETRY_CONCURRENCY: int = 1
    SYNC_RETRY_SCHEDULE_ENABLED: bool = False
    SYNC_RETRY_SCHEDULE: str = "*/5 * * * *"  # every 5 minutes

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    model_config = ConfigDict(
        env_file=os.environ.get('ENV_FILE', '.env') if os.path.exists('.env') else None,
        case_sensitive=True,
        extra="ignore",
    )


@dataclass(frozen=True)
class SyncRetryConfig:
    """Tunables for the sync executor and retry sweeper."""

    max_attempts: int = 5
    retry_interval_seconds: int = 300
    batch_limit: int = 50
    concurrency: int = 1

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "SyncRetryConfig":
        settings = settings or get_settings()
        return cls(
            max_attempts=settings.SYNC_RETRY_MAX_ATTEMPTS,
            retry_interval_seconds=settings.SYNC_RETRY_INTERVAL_SECONDS,
            batch_limit=settings.SYNC_RETRY_BATCH_LIMIT,
            concurrency=max(1, settings.SYNC_RETRY_CONCURRENCY),
        )


@lru_cache()
def get_settings():
    """Cached settings to avoid loading .env file for every request"""
    return Settings()

def get_sync_retry_config() -> SyncRetryConfig:
    return SyncRetryConfig.from_settings(get_settings())

def get_internal_secret():
    """Get the shared secret guarding internal endpoints"""
    return get_settings().INTERNAL_SECRET

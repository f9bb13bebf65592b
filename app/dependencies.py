from typing import AsyncGenerator
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, SyncRetryConfig, get_settings, get_sync_retry_config
from app.database import async_session
from app.services.youtube.auth import YouTubeAuthManager
from app.services.youtube.client import YouTubeClient


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions."""
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()


def get_session_factory():
    """Session factory used by components that open their own sessions (the sweeper)."""
    return async_session


def get_youtube_client(settings: Settings = Depends(get_settings)) -> YouTubeClient:
    return YouTubeClient(
        base_url=settings.YOUTUBE_API_BASE_URL,
        timeout=settings.YOUTUBE_HTTP_TIMEOUT,
    )


def get_youtube_auth_manager(settings: Settings = Depends(get_settings)) -> YouTubeAuthManager:
    return YouTubeAuthManager(settings=settings)


def get_retry_config() -> SyncRetryConfig:
    return get_sync_retry_config()

"""
Access to the per-workspace YouTube credentials stored in ``youtube_accounts``.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.youtube_account import YouTubeAccount
from app.services.youtube.auth import RefreshedToken, YouTubeAuthManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class YouTubeCredential:
    account_id: int
    workspace_id: str
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None


class CredentialStore:
    """
    Reads a workspace's newest YouTube connection and writes back refreshed tokens.
    """

    def __init__(self, db: AsyncSession, auth_manager: YouTubeAuthManager):
        self.db = db
        self.auth_manager = auth_manager

    async def get_credential(self, workspace_id: str) -> Optional[YouTubeCredential]:
        """Latest connected account for the workspace, or None if there is no usable token"""
        stmt = (
            select(YouTubeAccount)
            .where(YouTubeAccount.workspace_id == workspace_id)
            .order_by(YouTubeAccount.created_at.desc(), YouTubeAccount.id.desc())
            .limit(1)
        )
        account = (await self.db.execute(stmt)).scalar_one_or_none()

        if account is None or not account.access_token:
            logger.info(f"No YouTube account connected for workspace {workspace_id}")
            return None

        return YouTubeCredential(
            account_id=account.id,
            workspace_id=workspace_id,
            access_token=account.access_token,
            refresh_token=account.refresh_token,
            expires_at=account.token_expires_at,
        )

    async def refresh(self, refresh_token: str) -> RefreshedToken:
        """Raises CredentialRefreshError on failure"""
        return await self.auth_manager.refresh_access_token(refresh_token)

    async def update_access_token(
        self,
        account_id: int,
        access_token: str,
        expires_in: Optional[int] = None,
    ) -> None:
        """Persist a refreshed access token on the connection whose refresh token produced it"""
        expires_at = (
            datetime.now(timezone.utc) + timedelta(seconds=expires_in) if expires_in else None
        )
        await self.db.execute(
            update(YouTubeAccount)
            .where(YouTubeAccount.id == account_id)
            .values(access_token=access_token, token_expires_at=expires_at)
        )
        await self.db.commit()
        logger.info(f"Stored refreshed YouTube access token for account {account_id}")

"""
YouTube (Google OAuth) token refresh.

The authorization-code exchange lives in the OAuth connect flow; this module only
trades a stored refresh token for a fresh access token.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from app.core.config import Settings, get_settings
from app.core.exceptions import CredentialRefreshError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RefreshedToken:
    access_token: str
    expires_in: Optional[int] = None


class YouTubeAuthManager:
    """
    Manages Google OAuth token refreshes for YouTube connections
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.client_id = self.settings.YOUTUBE_CLIENT_ID
        self.client_secret = self.settings.YOUTUBE_CLIENT_SECRET
        self.token_refresh_url = self.settings.GOOGLE_TOKEN_URL
        self.timeout = self.settings.YOUTUBE_HTTP_TIMEOUT
        self._transport = transport

        logger.debug("YouTubeAuthManager initialized")

    async def refresh_access_token(self, refresh_token: str) -> RefreshedToken:
        """
        Exchange a refresh token for a new access token.

        Raises:
            CredentialRefreshError: missing client credentials, rejected grant,
                or a network failure talking to the token endpoint
        """
        if not self.client_id or not self.client_secret:
            raise CredentialRefreshError("YouTube client credentials are not configured")
        if not refresh_token:
            raise CredentialRefreshError("No refresh token available")

        refresh_data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.token_refresh_url,
                    data=refresh_data,
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
        except httpx.RequestError as e:
            logger.error(f"Network error refreshing token: {str(e)}")
            raise CredentialRefreshError(f"Network error refreshing access token: {str(e)}")

        try:
            token_data = response.json()
        except ValueError:
            token_data = {}

        if response.status_code != 200 or token_data.get("error") or not token_data.get("access_token"):
            error_text = response.text[:500]
            logger.error(f"Token refresh failed ({response.status_code}): {error_text}")

            if "invalid_grant" in error_text:
                raise CredentialRefreshError(
                    "Invalid refresh token. The YouTube account must be reconnected."
                )
            raise CredentialRefreshError(f"Failed to refresh access token: {error_text}")

        expires_in = token_data.get("expires_in")
        logger.info("Successfully refreshed YouTube access token")
        return RefreshedToken(
            access_token=token_data["access_token"],
            expires_in=int(expires_in) if expires_in else None,
        )

import logging
from typing import Dict, Optional

import httpx

from app.core.exceptions import YouTubeAPIError, YouTubeUnauthorizedError

logger = logging.getLogger(__name__)

# Enough of an error body to diagnose a failure without bloating the ledger row
MAX_ERROR_DETAIL_CHARS = 1000


class YouTubeClient:
    """
    Asynchronous client for the YouTube Data API (v3) rating endpoint.

    Only ``videos.rate`` is needed by the sync subsystem. Every call runs under
    an httpx timeout; timeouts and transport errors surface as YouTubeAPIError
    exactly like non-2xx responses so callers can treat them uniformly.

    Documentation: https://developers.google.com/youtube/v3/docs/videos/rate
    """

    DEFAULT_BASE_URL = "https://www.googleapis.com/youtube/v3"
    VALID_RATINGS = ("like", "dislike", "none")

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url: API root, defaults to the public googleapis endpoint
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _get_headers(self, access_token: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json",
        }

    async def rate_video(self, video_id: str, rating: str, access_token: str) -> None:
        """
        Set the authenticated channel's rating on a video.

        Raises:
            YouTubeUnauthorizedError: HTTP 401, the access token is expired or revoked
            YouTubeAPIError: any other non-2xx response, timeout or network error
        """
        if rating not in self.VALID_RATINGS:
            raise ValueError(f"Unsupported rating: {rating}")

        url = f"{self.base_url}/videos/rate"
        params = {"id": video_id, "rating": rating}

        logger.debug(f"Rating video {video_id} as '{rating}'")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, params=params, headers=self._get_headers(access_token))
        except httpx.TimeoutException as e:
            logger.warning(f"Timeout rating video {video_id}: {str(e)}")
            raise YouTubeAPIError(f"timeout: {str(e) or type(e).__name__}")
        except httpx.RequestError as e:
            logger.warning(f"Network error rating video {video_id}: {str(e)}")
            raise YouTubeAPIError(f"network_error: {str(e) or type(e).__name__}")

        if 200 <= response.status_code < 300:
            return None

        body = response.text[:MAX_ERROR_DETAIL_CHARS]
        detail = f"{response.status_code}: {body}"

        if response.status_code == 401:
            raise YouTubeUnauthorizedError("youtube_unauthorized", status_code=401, detail=detail)

        logger.error(f"YouTube API error rating video {video_id}: {detail}")
        raise YouTubeAPIError("youtube_api_error", status_code=response.status_code, detail=detail)

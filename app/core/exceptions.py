from typing import Optional


class BaseServiceError(Exception):
    """Base exception for all service-related errors."""
    pass

class PlatformServiceError(BaseServiceError):
    """Base exception for platform service errors."""
    pass

class YouTubeServiceError(PlatformServiceError):
    """Base exception for YouTube-specific errors."""
    pass

class YouTubeAPIError(YouTubeServiceError):
    """Raised when YouTube API calls fail (non-2xx, timeout or network error)."""

    def __init__(self, message: str, status_code: Optional[int] = None, detail: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail

class YouTubeUnauthorizedError(YouTubeAPIError):
    """Raised when YouTube rejects the access token (HTTP 401)."""
    pass

class CredentialError(BaseServiceError):
    """Base exception for stored platform credentials."""
    pass

class CredentialRefreshError(CredentialError):
    """Raised when an access token cannot be refreshed."""
    pass

class WorkspaceNotFoundError(BaseServiceError):
    """Raised when the caller owns no workspace."""
    pass

class DatabaseError(Exception):
    """Exception raised for database-related errors."""
    pass

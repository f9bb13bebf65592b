"""
Core module exports.
"""
from .enums import (
    PlatformName,
    SyncIntentStatus,
    SyncAction,
    AnalyticsEventType,
    AnalyticsEntityType,
)

from .exceptions import (
    BaseServiceError,
    PlatformServiceError,
    YouTubeServiceError,
    YouTubeAPIError,
    YouTubeUnauthorizedError,
    CredentialError,
    CredentialRefreshError,
    WorkspaceNotFoundError,
    DatabaseError,
)

"""
Shared enums and constants used across the application.
"""

from enum import Enum

class PlatformName(str, Enum):
    YOUTUBE = "youtube"
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    LINKEDIN = "linkedin"
    TWITTER = "twitter"
    TIKTOK = "tiktok"

    @classmethod
    def parse(cls, value):
        """Case-insensitive lookup, returns None for unknown platforms"""
        if not value:
            return None
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


class SyncIntentStatus(str, Enum):
    """Lifecycle of a ledger row"""
    PENDING = "pending"
    SYNCED = "synced"
    FAILED = "failed"


class SyncAction(str, Enum):
    """Actions that can be mirrored onto a YouTube video"""
    LIKE = "like"
    DISLIKE = "dislike"

    @property
    def rating(self) -> str:
        # videos.rate accepts like | dislike | none
        return self.value


class AnalyticsEventType(str, Enum):
    POST_LIKE = "post_like"


class AnalyticsEntityType(str, Enum):
    POST = "post"

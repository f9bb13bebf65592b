from .activity_log import ActivityLog
from .analytics_event import AnalyticsEvent
from .sync_intent import SyncIntent, SyncIntentMetadata
from .workspace import Workspace
from .youtube_account import YouTubeAccount

# This ensures all models are registered with SQLAlchemy
__all__ = [
    'ActivityLog',
    'AnalyticsEvent',
    'SyncIntent',
    'SyncIntentMetadata',
    'Workspace',
    'YouTubeAccount',
]

"""
Schema exports for the application.
"""

# Base schemas
from .base import BaseSchema

# Sync schemas
from .sync import (
    LikeRequest,
    LikeResponse,
    IntentSyncRead,
    SyncIntentRequest,
    SyncIntentRead,
    SweepResponse,
    LedgerStatusResponse,
)

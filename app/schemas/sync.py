"""
Request/response schemas for likes and the YouTube sync ledger.

Request bodies accept the camelCase keys sent by the web client.
"""
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import AliasChoices, Field

from app.core.enums import SyncAction
from app.schemas.base import BaseSchema


class LikeRequest(BaseSchema):
    post_id: str = Field(..., alias="postId", min_length=1)
    platform: Optional[str] = None
    video_id: Optional[str] = Field(default=None, alias="videoId")


class IntentSyncRead(BaseSchema):
    intent_id: int
    is_new: bool
    status: str
    attempt_count: int
    last_error: Optional[str] = None


class LikeResponse(BaseSchema):
    ok: bool = True
    already_liked: bool
    youtube: Optional[IntentSyncRead] = None


class SyncIntentRequest(BaseSchema):
    """Body of the internal direct-sync endpoint"""
    video_id: str = Field(..., alias="videoId", min_length=1)
    workspace_id: str = Field(..., alias="workspaceId", min_length=1)
    user_id: str = Field(..., alias="userId", min_length=1)
    action: SyncAction = SyncAction.LIKE
    metadata: Dict[str, Any] = Field(default_factory=dict)


class SyncIntentRead(BaseSchema):
    id: int
    workspace_id: str
    user_id: str
    video_id: str
    action: str
    status: str
    attempt_count: int
    last_attempt_at: Optional[datetime] = None
    last_error: Optional[str] = None
    # ORM rows expose the column as metadata_
    metadata_: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("metadata_", "metadata"),
        serialization_alias="metadata",
    )
    created_at: Optional[datetime] = None


class SweepResponse(BaseSchema):
    ok: bool = True
    processed: int
    candidates: int = 0
    synced: int = 0
    failed: int = 0
    exhausted: int = 0
    skipped: int = 0
    errors: int = 0


class LedgerStatusResponse(BaseSchema):
    counts: Dict[str, int]
    exhausted: int
    max_attempts: int
    retry_interval_seconds: int
    batch_limit: int

# app/models/sync_intent.py
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict
from sqlalchemy import Column, Integer, String, DateTime, Text, JSON, UniqueConstraint, Index
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from app.database import Base
from app.core.enums import SyncIntentStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SyncIntentMetadata(BaseModel):
    """
    Audit payload carried on a ledger row.

    Known fields are typed; anything else a caller attaches is kept as-is.
    """
    model_config = ConfigDict(extra="allow")

    actor: Optional[str] = None
    source: Optional[str] = None
    post_id: Optional[str] = None

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class SyncIntent(Base):
    """
    One "apply action A to video V on behalf of user U in workspace W" obligation.

    The unique constraint on (workspace_id, user_id, video_id, action) is the only
    deduplication mechanism: at most one row per natural key, ever.
    Rows are retained after reaching a terminal state.
    """
    __tablename__ = "youtube_sync_logs"
    __table_args__ = (
        UniqueConstraint(
            "workspace_id", "user_id", "video_id", "action",
            name="uq_youtube_sync_logs_intent_key",
        ),
        Index("ix_youtube_sync_logs_retry", "status", "attempt_count", "last_attempt_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)

    # --- Natural key ---
    workspace_id = Column(String(64), nullable=False, index=True)
    user_id = Column(String(64), nullable=False)
    video_id = Column(String(64), nullable=False)
    action = Column(String(32), nullable=False, default="like")

    # --- Attempt lifecycle ---
    status = Column(String(16), nullable=False, default=SyncIntentStatus.PENDING.value)
    attempt_count = Column(Integer, nullable=False, default=0)
    last_attempt_at = Column(DateTime(timezone=True), nullable=True)
    last_error = Column(Text, nullable=True)

    # "metadata" is reserved on declarative classes
    metadata_ = Column("metadata", JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())

    @property
    def intent_metadata(self) -> SyncIntentMetadata:
        return SyncIntentMetadata.model_validate(self.metadata_ or {})

    def is_exhausted(self, max_attempts: int) -> bool:
        return self.status == SyncIntentStatus.FAILED.value and self.attempt_count >= max_attempts

    def __repr__(self):
        return (f"<SyncIntent(id={self.id}, workspace='{self.workspace_id}', user='{self.user_id}', "
                f"video='{self.video_id}', action='{self.action}', status='{self.status}', "
                f"attempts={self.attempt_count})>")

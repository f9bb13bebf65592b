# app/models/analytics_event.py
from sqlalchemy import Column, Integer, String, DateTime, JSON, Index
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from app.database import Base


class AnalyticsEvent(Base):
    """
    A user-facing engagement fact (e.g. a post like) recorded for analytics.
    """
    __tablename__ = "analytics_events"
    __table_args__ = (
        Index("ix_analytics_events_lookup", "workspace_id", "entity_type", "entity_id", "event_type", "user_id"),
    )

    id = Column(Integer, primary_key=True)
    workspace_id = Column(String(64), nullable=False, index=True)
    user_id = Column(String(64), nullable=True)
    session_id = Column(String(64), nullable=True)

    event_type = Column(String(50), nullable=False)   # 'post_like', ...
    entity_type = Column(String(50), nullable=False)  # 'post'
    entity_id = Column(String(100), nullable=False)
    platform = Column(String(50), nullable=True)

    metadata_ = Column("metadata", JSON().with_variant(JSONB(), "postgresql"), nullable=True)
    occurred_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<AnalyticsEvent {self.event_type} {self.entity_type} {self.entity_id} user={self.user_id}>"

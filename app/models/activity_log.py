# app/models/activity_log.py
from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from sqlalchemy.dialects.postgresql import JSONB
from app.database import Base

class ActivityLog(Base):
    """
    Records significant sync activities for auditing and monitoring.

    This includes:
    - Retry sweep runs
    - Sync intents that exhausted their attempts
    """
    __tablename__ = "activity_log"

    id = Column(Integer, primary_key=True)
    action = Column(String(50), nullable=False, index=True)  # 'sync_sweep', 'sync_exhausted'
    entity_type = Column(String(50), nullable=False, index=True)  # 'sync_intent', 'system'
    entity_id = Column(String(100), nullable=False, index=True)  # ID of the affected entity
    platform = Column(String(50), nullable=True, index=True)  # Platform name if applicable

    # Store additional details in JSON format
    details = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=True)

    # Supabase user ids are UUID strings
    user_id = Column(String(64), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    def __repr__(self):
        return f"<ActivityLog {self.action} {self.entity_type} {self.entity_id}>"

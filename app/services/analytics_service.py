# app/services/analytics_service.py
"""
Analytics Fact Store

Records engagement facts (post likes) in ``analytics_events``. The
exists-then-insert pair is what keeps a repeated like from producing a second
fact; it protects the audit log only, external side effects are deduplicated by
the sync ledger.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import AnalyticsEntityType, AnalyticsEventType
from app.models.analytics_event import AnalyticsEvent

logger = logging.getLogger(__name__)


@dataclass
class AnalyticsFact:
    workspace_id: str
    user_id: str
    entity_id: str
    event_type: str = AnalyticsEventType.POST_LIKE.value
    entity_type: str = AnalyticsEntityType.POST.value
    platform: Optional[str] = None
    session_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    occurred_at: Optional[datetime] = None


class AnalyticsService:
    """Reads and writes engagement facts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def exists(
        self,
        workspace_id: str,
        entity_id: str,
        user_id: str,
        event_type: str = AnalyticsEventType.POST_LIKE.value,
        entity_type: str = AnalyticsEntityType.POST.value,
    ) -> bool:
        stmt = (
            select(AnalyticsEvent.id)
            .where(
                AnalyticsEvent.workspace_id == workspace_id,
                AnalyticsEvent.entity_type == entity_type,
                AnalyticsEvent.entity_id == entity_id,
                AnalyticsEvent.event_type == event_type,
                AnalyticsEvent.user_id == user_id,
            )
            .limit(1)
        )
        return (await self.db.execute(stmt)).first() is not None

    async def insert(self, fact: AnalyticsFact) -> AnalyticsEvent:
        event = AnalyticsEvent(
            workspace_id=fact.workspace_id,
            user_id=fact.user_id,
            session_id=fact.session_id,
            event_type=fact.event_type,
            entity_type=fact.entity_type,
            entity_id=fact.entity_id,
            platform=fact.platform,
            metadata_=fact.metadata,
            occurred_at=fact.occurred_at or datetime.now(timezone.utc),
        )
        self.db.add(event)
        await self.db.commit()
        logger.debug(
            f"Recorded {fact.event_type} on {fact.entity_type} {fact.entity_id} "
            f"by user {fact.user_id} in workspace {fact.workspace_id}"
        )
        return event

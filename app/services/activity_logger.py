# app/services/activity_logger.py
import logging
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import PlatformName
from app.models.activity_log import ActivityLog
from app.models.sync_intent import SyncIntent

logger = logging.getLogger(__name__)

class ActivityLogger:
    """
    Service for logging activities throughout the application.

    This provides a consistent way to record system activities
    for auditing, monitoring, and reporting purposes.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def log_activity(
        self,
        action: str,
        entity_type: str,
        entity_id: str,
        platform: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        user_id: Optional[str] = None
    ) -> Optional[ActivityLog]:
        """
        Log an activity in the system.

        Args:
            action: The action performed (sync_sweep, sync_exhausted)
            entity_type: The type of entity affected (sync_intent, system)
            entity_id: The ID of the affected entity
            platform: Optional platform name (youtube, ...)
            details: Optional additional details as a dictionary
            user_id: Optional ID of the user the activity concerns

        Returns:
            The created ActivityLog instance, or None if it could not be written
        """
        try:
            log_entry = ActivityLog(
                action=action,
                entity_type=entity_type,
                entity_id=str(entity_id),  # Convert to string for consistency
                platform=platform,
                details=details,
                user_id=user_id,
                created_at=datetime.now(timezone.utc)
            )

            self.db.add(log_entry)
            await self.db.flush()  # Get the ID without committing transaction

            logger.debug(
                f"Activity logged: {action} {entity_type} {entity_id} "
                f"(platform: {platform or 'N/A'})"
            )

            return log_entry

        except Exception as e:
            logger.error(f"Error logging activity: {str(e)}")
            await self.db.rollback()
            # Don't raise, as logging should not interrupt the main flow
            return None

    async def log_sync_exhausted(self, intent: SyncIntent) -> Optional[ActivityLog]:
        """
        Record a sync intent that will not be retried again.
        """
        return await self.log_activity(
            action="sync_exhausted",
            entity_type="sync_intent",
            entity_id=intent.id,
            platform=PlatformName.YOUTUBE.value,
            details={
                "workspace_id": intent.workspace_id,
                "video_id": intent.video_id,
                "action": intent.action,
                "attempt_count": intent.attempt_count,
                "last_error": intent.last_error,
                "actor": intent.intent_metadata.actor,
                "timestamp": datetime.now(timezone.utc).isoformat()
            },
            user_id=intent.user_id
        )

    async def log_sweep(
        self,
        platform: str,
        details: Dict[str, Any]
    ) -> Optional[ActivityLog]:
        """
        Log a retry sweep run.

        Args:
            platform: The platform whose ledger was swept
            details: Counts for the run (processed, synced, failed, exhausted)
        """
        return await self.log_activity(
            action="sync_sweep",
            entity_type="system",
            entity_id="retry_sweeper",
            platform=platform,
            details={
                "processed": details.get("processed", 0),
                "synced": details.get("synced", 0),
                "failed": details.get("failed", 0),
                "exhausted": details.get("exhausted", 0),
                "skipped": details.get("skipped", 0),
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        )

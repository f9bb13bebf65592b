"""
Idempotency ledger for cross-platform sync intents.

Deduplication is delegated entirely to the unique constraint on the natural key.
``create_intent`` uses the dialect's ``INSERT ... ON CONFLICT DO NOTHING RETURNING``
so a duplicate shows up as "no row returned" rather than as an exception, and
``record_outcome`` is a single keyed UPDATE so concurrent attempts cannot lose an
increment.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from sqlalchemy import func, or_, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import SyncAction, SyncIntentStatus
from app.core.exceptions import DatabaseError
from app.models.sync_intent import SyncIntent, SyncIntentMetadata

logger = logging.getLogger(__name__)

INTENT_KEY_COLUMNS = ["workspace_id", "user_id", "video_id", "action"]
RETRYABLE_STATUSES = (SyncIntentStatus.PENDING.value, SyncIntentStatus.FAILED.value)


@dataclass(frozen=True)
class SyncOutcome:
    """Result of one external attempt"""
    status: SyncIntentStatus
    error: Optional[str] = None

    @classmethod
    def synced(cls) -> "SyncOutcome":
        return cls(status=SyncIntentStatus.SYNCED)

    @classmethod
    def failed(cls, error: str) -> "SyncOutcome":
        return cls(status=SyncIntentStatus.FAILED, error=error or "unknown_error")

    @property
    def ok(self) -> bool:
        return self.status == SyncIntentStatus.SYNCED


MetadataInput = Union[SyncIntentMetadata, Mapping[str, Any], None]


def _metadata_json(metadata: MetadataInput) -> Dict[str, Any]:
    if metadata is None:
        return {}
    if isinstance(metadata, SyncIntentMetadata):
        return metadata.to_json()
    return SyncIntentMetadata.model_validate(dict(metadata)).to_json()


class SyncLedger:
    """Durable store of sync intents, one row per (workspace, user, video, action)"""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _insert(self):
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            return pg_insert(SyncIntent)
        if dialect == "sqlite":
            return sqlite_insert(SyncIntent)
        raise DatabaseError(f"Conflict-aware insert is not supported for dialect '{dialect}'")

    async def create_intent(
        self,
        workspace_id: str,
        user_id: str,
        video_id: str,
        action: Union[SyncAction, str] = SyncAction.LIKE,
        metadata: MetadataInput = None,
    ) -> Tuple[SyncIntent, bool]:
        """
        Record a new pending intent, or detect that one already exists.

        Returns:
            (intent, is_new) - is_new is False when the natural key was already taken,
            in which case the existing row is returned untouched.
        """
        action_value = SyncAction(action).value

        stmt = (
            self._insert()
            .values(
                workspace_id=workspace_id,
                user_id=user_id,
                video_id=video_id,
                action=action_value,
                status=SyncIntentStatus.PENDING.value,
                attempt_count=0,
                metadata_=_metadata_json(metadata),
                created_at=datetime.now(timezone.utc),
            )
            .on_conflict_do_nothing(index_elements=INTENT_KEY_COLUMNS)
            .returning(SyncIntent.id)
        )
        inserted_id = (await self.db.execute(stmt)).scalar_one_or_none()
        await self.db.commit()

        if inserted_id is not None:
            logger.info(
                f"Created sync intent {inserted_id} ({action_value} video {video_id} "
                f"for user {user_id} in workspace {workspace_id})"
            )
            return await self.get_intent(inserted_id), True

        existing = await self.get_by_key(workspace_id, user_id, video_id, action_value)
        if existing is None:
            # Conflict reported but the row is gone; rows are never deleted here
            raise DatabaseError(
                f"Sync intent for ({workspace_id}, {user_id}, {video_id}, {action_value}) "
                f"conflicted but could not be read back"
            )
        logger.info(f"Sync intent {existing.id} already recorded; treating as duplicate")
        return existing, False

    async def get_intent(self, intent_id: int) -> Optional[SyncIntent]:
        stmt = (
            select(SyncIntent)
            .where(SyncIntent.id == intent_id)
            .execution_options(populate_existing=True)
        )
        return (await self.db.execute(stmt)).scalar_one_or_none()

    async def get_by_key(
        self, workspace_id: str, user_id: str, video_id: str, action: Union[SyncAction, str]
    ) -> Optional[SyncIntent]:
        stmt = (
            select(SyncIntent)
            .where(
                SyncIntent.workspace_id == workspace_id,
                SyncIntent.user_id == user_id,
                SyncIntent.video_id == video_id,
                SyncIntent.action == SyncAction(action).value,
            )
            .execution_options(populate_existing=True)
        )
        return (await self.db.execute(stmt)).scalar_one_or_none()

    async def record_outcome(
        self,
        intent_id: int,
        outcome: SyncOutcome,
        attempted_at: Optional[datetime] = None,
    ) -> Optional[SyncIntent]:
        """
        Apply the result of one attempt in a single UPDATE keyed by id.

        attempt_count is incremented in SQL, never from the in-memory row.
        """
        attempted_at = attempted_at or datetime.now(timezone.utc)
        stmt = (
            update(SyncIntent)
            .where(SyncIntent.id == intent_id)
            .values(
                status=outcome.status.value,
                attempt_count=SyncIntent.attempt_count + 1,
                last_attempt_at=attempted_at,
                last_error=None if outcome.ok else outcome.error,
            )
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(stmt)
        await self.db.commit()
        return await self.get_intent(intent_id)

    async def list_retry_candidates(
        self,
        max_attempts: int,
        retry_interval_seconds: int,
        limit: int,
        now: Optional[datetime] = None,
    ) -> List[SyncIntent]:
        """
        Pending/failed intents with attempts left whose last attempt is older than
        the retry interval, oldest first.
        """
        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(seconds=retry_interval_seconds)
        stmt = (
            select(SyncIntent)
            .where(
                SyncIntent.status.in_(RETRYABLE_STATUSES),
                SyncIntent.attempt_count < max_attempts,
                or_(
                    SyncIntent.last_attempt_at.is_(None),
                    SyncIntent.last_attempt_at < cutoff,
                ),
            )
            .order_by(SyncIntent.created_at.asc(), SyncIntent.id.asc())
            .limit(limit)
        )
        return list((await self.db.execute(stmt)).scalars().all())

    async def count_by_status(self) -> Dict[str, int]:
        stmt = select(SyncIntent.status, func.count(SyncIntent.id)).group_by(SyncIntent.status)
        counts = {status.value: 0 for status in SyncIntentStatus}
        for status, count in (await self.db.execute(stmt)).all():
            counts[status] = count
        return counts

    async def count_exhausted(self, max_attempts: int) -> int:
        stmt = select(func.count(SyncIntent.id)).where(
            SyncIntent.status == SyncIntentStatus.FAILED.value,
            SyncIntent.attempt_count >= max_attempts,
        )
        return (await self.db.execute(stmt)).scalar_one()

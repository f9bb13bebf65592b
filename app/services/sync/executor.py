import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import SyncRetryConfig
from app.core.enums import SyncAction
from app.core.exceptions import CredentialRefreshError, YouTubeAPIError, YouTubeUnauthorizedError
from app.models.sync_intent import SyncIntent
from app.services.activity_logger import ActivityLogger
from app.services.sync.ledger import SyncLedger, SyncOutcome
from app.services.youtube.client import YouTubeClient
from app.services.youtube.credential_store import CredentialStore

logger = logging.getLogger(__name__)

NO_ACCOUNT_ERROR = "no_youtube_account"


class SyncExecutor:
    """
    Performs exactly one external attempt for a sync intent and records the result.

    Every call to ``execute`` ends in ``SyncLedger.record_outcome``; failures of the
    external call (including credential problems) are recorded, never raised.
    """

    def __init__(
        self,
        db: AsyncSession,
        config: SyncRetryConfig,
        youtube_client: YouTubeClient,
        credential_store: CredentialStore,
        ledger: Optional[SyncLedger] = None,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self.db = db
        self.config = config
        self.youtube_client = youtube_client
        self.credential_store = credential_store
        self.ledger = ledger or SyncLedger(db)
        self.activity_logger = activity_logger or ActivityLogger(db)

    async def execute(self, intent: SyncIntent) -> SyncOutcome:
        intent_id = intent.id
        attempted_at = datetime.now(timezone.utc)

        try:
            outcome = await self._attempt(intent)
        except Exception as e:
            logger.exception(f"Unexpected error executing sync intent {intent_id}")
            outcome = SyncOutcome.failed(f"unexpected: {str(e)}")
            try:
                await self.db.rollback()
            except Exception as rollback_error:
                logger.error(f"Error rolling back session for sync intent {intent_id}: {str(rollback_error)}")

        updated = await self.ledger.record_outcome(intent_id, outcome, attempted_at)

        if outcome.ok:
            logger.info(f"Sync intent {intent_id} synced")
        else:
            attempts = updated.attempt_count if updated is not None else None
            logger.warning(f"Sync intent {intent_id} failed (attempt {attempts}): {outcome.error}")
            if updated is not None and updated.is_exhausted(self.config.max_attempts):
                await self._report_exhausted(updated)

        return outcome

    async def _attempt(self, intent: SyncIntent) -> SyncOutcome:
        credential = await self.credential_store.get_credential(intent.workspace_id)
        if credential is None:
            return SyncOutcome.failed(NO_ACCOUNT_ERROR)

        rating = SyncAction(intent.action).rating

        try:
            await self.youtube_client.rate_video(intent.video_id, rating, credential.access_token)
            return SyncOutcome.synced()
        except YouTubeUnauthorizedError as e:
            first_error = e.detail or str(e)
        except YouTubeAPIError as e:
            return SyncOutcome.failed(e.detail or str(e))

        # 401: one refresh, one retry
        if not credential.refresh_token:
            return SyncOutcome.failed(f"unauthorized, no refresh token: {first_error}")

        logger.info(f"Access token rejected for workspace {intent.workspace_id}; refreshing")
        try:
            refreshed = await self.credential_store.refresh(credential.refresh_token)
        except CredentialRefreshError as e:
            return SyncOutcome.failed(f"token_refresh_failed: {str(e)}")

        await self.credential_store.update_access_token(
            credential.account_id, refreshed.access_token, refreshed.expires_in
        )

        try:
            await self.youtube_client.rate_video(intent.video_id, rating, refreshed.access_token)
        except YouTubeAPIError as e:
            return SyncOutcome.failed(f"retry after refresh failed: {e.detail or str(e)}")
        return SyncOutcome.synced()

    async def _report_exhausted(self, intent: SyncIntent) -> None:
        logger.warning(
            f"Sync intent {intent.id} exhausted {intent.attempt_count} attempts "
            f"(workspace {intent.workspace_id}, video {intent.video_id}); giving up: {intent.last_error}"
        )
        await self.activity_logger.log_sync_exhausted(intent)
        await self.db.commit()

"""
Retry sweeper for the YouTube sync ledger.

Runs independently of request handling (scheduler job, internal endpoint or the
``scripts/run_youtube_retry.py`` cron script). The ledger row is the only thing
it shares with the request path.
"""

import asyncio
import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import SyncRetryConfig
from app.core.enums import PlatformName
from app.models.sync_intent import SyncIntent
from app.services.activity_logger import ActivityLogger
from app.services.sync.executor import SyncExecutor
from app.services.sync.ledger import RETRYABLE_STATUSES, SyncLedger, SyncOutcome
from app.services.youtube.auth import YouTubeAuthManager
from app.services.youtube.client import YouTubeClient
from app.services.youtube.credential_store import CredentialStore

logger = logging.getLogger(__name__)


@dataclass
class SweepReport:
    candidates: int = 0
    processed: int = 0
    synced: int = 0
    failed: int = 0
    exhausted: int = 0
    skipped: int = 0
    errors: int = 0

    def to_dict(self):
        return asdict(self)


class RetrySweeper:
    """
    Gives pending/failed intents further attempts, oldest first.

    Each intent is executed in its own session so a batch can run with bounded
    concurrency (``config.concurrency``) without sharing an AsyncSession.
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        config: SyncRetryConfig,
        youtube_client: YouTubeClient,
        auth_manager: YouTubeAuthManager,
    ):
        self.session_factory = session_factory
        self.config = config
        self.youtube_client = youtube_client
        self.auth_manager = auth_manager

    async def sweep(self, now: Optional[datetime] = None) -> int:
        """Run one sweep and return how many intents were processed"""
        report = await self.sweep_with_report(now=now)
        return report.processed

    async def sweep_with_report(self, now: Optional[datetime] = None) -> SweepReport:
        report = SweepReport()

        async with self.session_factory() as db:
            candidates = await SyncLedger(db).list_retry_candidates(
                max_attempts=self.config.max_attempts,
                retry_interval_seconds=self.config.retry_interval_seconds,
                limit=self.config.batch_limit,
                now=now,
            )
            candidate_ids = [intent.id for intent in candidates]

        report.candidates = len(candidate_ids)
        if not candidate_ids:
            logger.info("No sync intents eligible for retry")
            return report

        logger.info(f"Retrying {len(candidate_ids)} sync intents (concurrency={self.config.concurrency})")

        semaphore = asyncio.Semaphore(max(1, self.config.concurrency))

        async def run(intent_id: int) -> None:
            async with semaphore:
                await self._retry_one(intent_id, report)

        await asyncio.gather(*(run(intent_id) for intent_id in candidate_ids))

        logger.info(
            f"Retry sweep complete: processed={report.processed} synced={report.synced} "
            f"failed={report.failed} exhausted={report.exhausted} skipped={report.skipped} errors={report.errors}"
        )
        await self._log_sweep(report)
        return report

    async def _retry_one(self, intent_id: int, report: SweepReport) -> None:
        async with self.session_factory() as db:
            try:
                ledger = SyncLedger(db)
                intent = await ledger.get_intent(intent_id)
                if intent is None or not self._still_eligible(intent):
                    # Settled by another writer since the candidate list was read
                    logger.info(f"Skipping sync intent {intent_id}; no longer eligible for retry")
                    report.skipped += 1
                    return
                executor = SyncExecutor(
                    db,
                    self.config,
                    self.youtube_client,
                    CredentialStore(db, self.auth_manager),
                    ledger=ledger,
                )
                outcome = await executor.execute(intent)
            except Exception as e:
                # Never stop the batch for one intent
                logger.error(f"Error retrying sync intent {intent_id}: {str(e)}", exc_info=True)
                report.errors += 1
                return

            report.processed += 1
            self._tally(report, outcome, intent)

    def _still_eligible(self, intent: SyncIntent) -> bool:
        return (
            intent.status in RETRYABLE_STATUSES
            and intent.attempt_count < self.config.max_attempts
        )

    def _tally(self, report: SweepReport, outcome: SyncOutcome, intent: SyncIntent) -> None:
        if outcome.ok:
            report.synced += 1
            return
        report.failed += 1
        if intent.is_exhausted(self.config.max_attempts):
            report.exhausted += 1

    async def _log_sweep(self, report: SweepReport) -> None:
        async with self.session_factory() as db:
            await ActivityLogger(db).log_sweep(PlatformName.YOUTUBE.value, report.to_dict())
            await db.commit()

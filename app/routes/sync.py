# app/routes/sync.py
"""
Internal endpoints for the YouTube sync ledger.

All routes require the ``x-internal-secret`` header; they are called by other
backend functions and by the external scheduler, never by browsers.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import SyncRetryConfig
from app.core.enums import SyncIntentStatus
from app.core.security import require_internal_secret
from app.dependencies import (
    get_db,
    get_retry_config,
    get_session_factory,
    get_youtube_auth_manager,
    get_youtube_client,
)
from app.schemas.sync import LedgerStatusResponse, SweepResponse, SyncIntentRead, SyncIntentRequest
from app.services.sync.handler import LikeSyncHandler
from app.services.sync.ledger import SyncLedger
from app.services.sync.sweeper import RetrySweeper
from app.services.youtube.auth import YouTubeAuthManager
from app.services.youtube.client import YouTubeClient

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/api/sync/youtube",
    tags=["YouTube Sync"],
    dependencies=[Depends(require_internal_secret)],
)


@router.post("/like")
async def sync_youtube_action(
    body: SyncIntentRequest,
    db: AsyncSession = Depends(get_db),
    config: SyncRetryConfig = Depends(get_retry_config),
    youtube_client: YouTubeClient = Depends(get_youtube_client),
    auth_manager: YouTubeAuthManager = Depends(get_youtube_auth_manager),
):
    """Record an intent for (workspace, user, video, action) and attempt it once."""
    handler = LikeSyncHandler(db, config, youtube_client, auth_manager)
    result = await handler.sync_action(
        workspace_id=body.workspace_id,
        user_id=body.user_id,
        video_id=body.video_id,
        action=body.action,
        metadata=body.metadata,
    )

    if not result.is_new:
        return {"ok": True, "skipped": True, "reason": "already_synced", "intent_id": result.intent_id}

    return {
        "ok": True,
        "synced": result.status == SyncIntentStatus.SYNCED.value,
        "intent_id": result.intent_id,
        "status": result.status,
        "attempt_count": result.attempt_count,
        "last_error": result.last_error,
    }


@router.post("/retry", response_model=SweepResponse)
async def run_retry_sweep(
    config: SyncRetryConfig = Depends(get_retry_config),
    session_factory=Depends(get_session_factory),
    youtube_client: YouTubeClient = Depends(get_youtube_client),
    auth_manager: YouTubeAuthManager = Depends(get_youtube_auth_manager),
):
    """Trigger entry point for an external cron: one sweep of the ledger."""
    sweeper = RetrySweeper(session_factory, config, youtube_client, auth_manager)
    report = await sweeper.sweep_with_report()
    return SweepResponse(ok=True, **report.to_dict())


@router.get("/status", response_model=LedgerStatusResponse)
async def ledger_status(
    db: AsyncSession = Depends(get_db),
    config: SyncRetryConfig = Depends(get_retry_config),
):
    ledger = SyncLedger(db)
    return LedgerStatusResponse(
        counts=await ledger.count_by_status(),
        exhausted=await ledger.count_exhausted(config.max_attempts),
        max_attempts=config.max_attempts,
        retry_interval_seconds=config.retry_interval_seconds,
        batch_limit=config.batch_limit,
    )


@router.get("/intents/{intent_id}", response_model=SyncIntentRead)
async def get_intent(intent_id: int, db: AsyncSession = Depends(get_db)):
    intent = await SyncLedger(db).get_intent(intent_id)
    if intent is None:
        raise HTTPException(status_code=404, detail="Sync intent not found")
    return SyncIntentRead.from_orm_model(intent)

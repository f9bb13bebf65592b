# tests/unit/services/sync/test_sweeper.py
from dataclasses import replace
from datetime import timedelta

import pytest
from sqlalchemy import select

from app.core.enums import SyncIntentStatus
from app.models.activity_log import ActivityLog
from app.services.sync.executor import SyncExecutor
from app.services.sync.handler import LikeSyncHandler
from app.services.sync.ledger import SyncLedger, SyncOutcome
from app.services.sync.sweeper import RetrySweeper
from tests.mocks.db import connect_youtube, set_intent_state


@pytest.fixture
def sweeper(session_factory, sync_config, youtube_client, auth_manager):
    return RetrySweeper(session_factory, sync_config, youtube_client, auth_manager)


async def _failed_intent(db, video_id, attempts=1, last_attempt_at=None, created_at=None):
    intent, _ = await SyncLedger(db).create_intent("W1", "U1", video_id)
    await set_intent_state(db, intent.id, "failed", attempts, last_attempt_at, created_at)
    return intent


async def _reload(session_factory, intent_id):
    async with session_factory() as db:
        return await SyncLedger(db).get_intent(intent_id)

"""
1. Sweeping
"""

@pytest.mark.asyncio
async def test_sweep_without_candidates_returns_zero(sweeper, fake_youtube):
    assert await sweeper.sweep() == 0
    assert fake_youtube.rate_calls == []


@pytest.mark.asyncio
async def test_sweep_retries_failed_intent(db_session, session_factory, sweeper, workspace, utcnow, fake_youtube):
    """Test that an old failed intent is retried and marked synced"""
    await connect_youtube(db_session, workspace.id)
    intent = await _failed_intent(db_session, "V1", last_attempt_at=utcnow - timedelta(minutes=10))

    processed = await sweeper.sweep(now=utcnow)

    assert processed == 1
    row = await _reload(session_factory, intent.id)
    assert row.status == SyncIntentStatus.SYNCED.value
    assert row.attempt_count == 2
    assert len(fake_youtube.rate_calls) == 1


@pytest.mark.asyncio
async def test_sweep_skips_ineligible_intents(db_session, session_factory, sweeper, workspace, utcnow, fake_youtube):
    await connect_youtube(db_session, workspace.id)
    recent = await _failed_intent(db_session, "V-recent", last_attempt_at=utcnow - timedelta(seconds=30))
    exhausted = await _failed_intent(db_session, "V-exhausted", attempts=5, last_attempt_at=utcnow - timedelta(hours=1))
    synced, _ = await SyncLedger(db_session).create_intent("W1", "U1", "V-synced")
    await SyncLedger(db_session).record_outcome(synced.id, SyncOutcome.synced(), utcnow - timedelta(hours=1))

    assert await sweeper.sweep(now=utcnow) == 0
    assert fake_youtube.rate_calls == []

    row = await _reload(session_factory, recent.id)
    assert row.attempt_count == 1
    row = await _reload(session_factory, exhausted.id)
    assert row.attempt_count == 5


@pytest.mark.asyncio
async def test_sweep_respects_batch_limit_oldest_first(db_session, session_factory, sweeper, workspace, utcnow, fake_youtube):
    await connect_youtube(db_session, workspace.id)
    newest = await _failed_intent(db_session, "V3", last_attempt_at=utcnow - timedelta(minutes=10), created_at=utcnow - timedelta(minutes=10))
    oldest = await _failed_intent(db_session, "V1", last_attempt_at=utcnow - timedelta(minutes=30), created_at=utcnow - timedelta(minutes=30))
    middle = await _failed_intent(db_session, "V2", last_attempt_at=utcnow - timedelta(minutes=20), created_at=utcnow - timedelta(minutes=20))
    sweeper.config = replace(sweeper.config, batch_limit=2)

    assert await sweeper.sweep(now=utcnow) == 2

    assert sorted(call["video_id"] for call in fake_youtube.rate_calls) == ["V1", "V2"]
    assert (await _reload(session_factory, oldest.id)).status == SyncIntentStatus.SYNCED.value
    assert (await _reload(session_factory, middle.id)).status == SyncIntentStatus.SYNCED.value
    assert (await _reload(session_factory, newest.id)).status == SyncIntentStatus.FAILED.value


@pytest.mark.asyncio
async def test_sweep_with_concurrency_processes_all(db_session, sweeper, workspace, utcnow):
    await connect_youtube(db_session, workspace.id)
    for video_id in ("V1", "V2", "V3", "V4"):
        await _failed_intent(db_session, video_id, last_attempt_at=utcnow - timedelta(minutes=10))
    sweeper.config = replace(sweeper.config, concurrency=3)

    report = await sweeper.sweep_with_report(now=utcnow)

    assert report.candidates == 4
    assert report.processed == 4
    assert report.synced == 4


@pytest.mark.asyncio
async def test_sweep_report_counts_failures_and_exhaustion(db_session, sweeper, workspace, utcnow, fake_youtube):
    await connect_youtube(db_session, workspace.id)
    await _failed_intent(db_session, "V1", attempts=4, last_attempt_at=utcnow - timedelta(minutes=10))
    await _failed_intent(db_session, "V2", attempts=1, last_attempt_at=utcnow - timedelta(minutes=10))
    fake_youtube.default_rate_status = 500

    report = await sweeper.sweep_with_report(now=utcnow)

    assert report.processed == 2
    assert report.failed == 2
    assert report.exhausted == 1
    assert report.synced == 0


@pytest.mark.asyncio
async def test_one_broken_intent_does_not_stop_the_batch(db_session, sweeper, workspace, utcnow, mocker):
    await connect_youtube(db_session, workspace.id)
    await _failed_intent(db_session, "V1", last_attempt_at=utcnow - timedelta(minutes=10))
    await _failed_intent(db_session, "V2", last_attempt_at=utcnow - timedelta(minutes=10))
    mocker.patch.object(SyncExecutor, "execute", side_effect=[RuntimeError("boom"), SyncOutcome.synced()])

    report = await sweeper.sweep_with_report(now=utcnow)

    assert report.candidates == 2
    assert report.errors == 1
    assert report.processed == 1
    assert report.synced == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("settle", ["synced", "exhausted"])
async def test_sweep_skips_intent_settled_after_listing(
    db_session, session_factory, sweeper, workspace, utcnow, fake_youtube, mocker, settle
):
    """Test that a candidate settled by another writer mid-sweep is not attempted again"""
    await connect_youtube(db_session, workspace.id)
    intent = await _failed_intent(db_session, "V1", last_attempt_at=utcnow - timedelta(minutes=10))
    fake_youtube.default_rate_status = 500
    list_candidates = SyncLedger.list_retry_candidates

    async def list_then_settle(self, *args, **kwargs):
        candidates = await list_candidates(self, *args, **kwargs)
        async with session_factory() as other:
            if settle == "synced":
                await SyncLedger(other).record_outcome(intent.id, SyncOutcome.synced())
            else:
                await set_intent_state(other, intent.id, "failed", sweeper.config.max_attempts, utcnow)
        return candidates

    mocker.patch.object(SyncLedger, "list_retry_candidates", list_then_settle)

    report = await sweeper.sweep_with_report(now=utcnow)

    assert report.candidates == 1
    assert report.skipped == 1
    assert report.processed == 0
    assert fake_youtube.rate_calls == []

    row = await _reload(session_factory, intent.id)
    if settle == "synced":
        assert row.status == SyncIntentStatus.SYNCED.value
        assert row.attempt_count == 2
    else:
        assert row.status == SyncIntentStatus.FAILED.value
        assert row.attempt_count == sweeper.config.max_attempts


@pytest.mark.asyncio
async def test_sweep_writes_activity_log(db_session, session_factory, sweeper, workspace, utcnow):
    await connect_youtube(db_session, workspace.id)
    await _failed_intent(db_session, "V1", last_attempt_at=utcnow - timedelta(minutes=10))

    await sweeper.sweep(now=utcnow)

    async with session_factory() as db:
        entry = (
            await db.execute(select(ActivityLog).where(ActivityLog.action == "sync_sweep"))
        ).scalar_one()
    assert entry.platform == "youtube"
    assert entry.details["processed"] == 1
    assert entry.details["synced"] == 1

"""
2. End to end: failed inline sync healed by the sweeper
"""

@pytest.mark.asyncio
async def test_failed_like_is_synced_by_later_sweep(
    db_session, session_factory, sync_config, youtube_client, auth_manager, sweeper, user, workspace, utcnow, fake_youtube
):
    await connect_youtube(db_session, workspace.id)
    handler = LikeSyncHandler(db_session, sync_config, youtube_client, auth_manager)

    # YouTube is down for the inline attempt
    fake_youtube.rate_statuses = [500]
    first = await handler.sync_action(workspace.id, user.id, "V1")
    assert first.is_new is True
    assert first.status == SyncIntentStatus.FAILED.value
    assert first.attempt_count == 1

    # The user clicks again before the sweep
    duplicate = await handler.sync_action(workspace.id, user.id, "V1")
    assert duplicate.is_new is False
    assert len(fake_youtube.rate_calls) == 1

    six_minutes_later = utcnow + timedelta(minutes=6)

    assert await sweeper.sweep(now=six_minutes_later) == 1
    row = await _reload(session_factory, first.intent_id)
    assert row.status == SyncIntentStatus.SYNCED.value
    assert row.attempt_count == 2
    assert row.last_error is None

    assert await sweeper.sweep(now=six_minutes_later + timedelta(minutes=10)) == 0
    assert len(fake_youtube.rate_calls) == 2

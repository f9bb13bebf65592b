#!/usr/bin/env python3
"""
Run one YouTube sync retry sweep and exit. Intended for cron.

Usage:
    python scripts/run_youtube_retry.py
    python scripts/run_youtube_retry.py --max-attempts 3 --interval 600 --limit 20
    python scripts/run_youtube_retry.py --dry-run

Exit codes: 0 on success, 2 if the --dry-run lookup fails, 3 if the sweep fails.
"""

import asyncio
import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from app.core.config import SyncRetryConfig, get_settings
from app.core.logging_config import configure_logging
from app.database import async_session
from app.scheduler import build_retry_sweeper
from app.services.sync.ledger import SyncLedger

logger = logging.getLogger(__name__)


async def list_candidates(config: SyncRetryConfig) -> int:
    async with async_session() as session:
        candidates = await SyncLedger(session).list_retry_candidates(
            max_attempts=config.max_attempts,
            retry_interval_seconds=config.retry_interval_seconds,
            limit=config.batch_limit,
        )

    print(f"Found {len(candidates)} candidates")
    for intent in candidates:
        print(f"  {intent.id}: video={intent.video_id} workspace={intent.workspace_id} "
              f"status={intent.status} attempts={intent.attempt_count} last_error={intent.last_error}")
    return len(candidates)


async def main() -> int:
    parser = argparse.ArgumentParser(description='Retry failed/pending YouTube syncs')
    parser.add_argument('--max-attempts', type=int, help='Override SYNC_RETRY_MAX_ATTEMPTS')
    parser.add_argument('--interval', type=int, help='Override SYNC_RETRY_INTERVAL_SECONDS')
    parser.add_argument('--limit', type=int, help='Override SYNC_RETRY_BATCH_LIMIT')
    parser.add_argument('--concurrency', type=int, help='Override SYNC_RETRY_CONCURRENCY')
    parser.add_argument('--dry-run', action='store_true',
                        help='List the intents that would be retried without calling YouTube')
    args = parser.parse_args()

    configure_logging()
    settings = get_settings()

    sweeper = build_retry_sweeper(settings)
    overrides = {
        "max_attempts": args.max_attempts,
        "retry_interval_seconds": args.interval,
        "batch_limit": args.limit,
        "concurrency": args.concurrency,
    }
    sweeper.config = replace(sweeper.config, **{k: v for k, v in overrides.items() if v is not None})

    if args.dry_run:
        try:
            await list_candidates(sweeper.config)
        except Exception as e:
            logger.error(f"Lookup error: {e}")
            return 2
        return 0

    try:
        report = await sweeper.sweep_with_report()
    except Exception as e:
        logger.exception(f"Unexpected error during retry sweep: {e}")
        return 3

    print(f"Processed {report.processed} (synced={report.synced}, failed={report.failed}, "
          f"exhausted={report.exhausted}, errors={report.errors})")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))

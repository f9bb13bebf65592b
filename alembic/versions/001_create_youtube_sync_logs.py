"""Create youtube_sync_logs ledger and activity_log

Revision ID: 001_youtube_sync_logs
Revises:
Create Date: 2026-10-19

The unique constraint on (workspace_id, user_id, video_id, action) is what
deduplicates sync intents; inserts rely on ON CONFLICT against it.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import text
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "001_youtube_sync_logs"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def table_exists(table_name: str) -> bool:
    """Check if a table exists in the database."""
    conn = op.get_bind()
    result = conn.execute(
        text(
            "SELECT EXISTS (SELECT FROM information_schema.tables WHERE table_name = :table_name)"
        ),
        {"table_name": table_name},
    )
    return result.scalar()


def upgrade() -> None:
    if not table_exists("youtube_sync_logs"):
        op.create_table(
            "youtube_sync_logs",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("workspace_id", sa.String(64), nullable=False),
            sa.Column("user_id", sa.String(64), nullable=False),
            sa.Column("video_id", sa.String(64), nullable=False),
            sa.Column("action", sa.String(32), nullable=False, server_default="like"),
            sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
            sa.Column("attempt_count", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("last_attempt_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("last_error", sa.Text(), nullable=True),
            sa.Column(
                "metadata",
                postgresql.JSONB(astext_type=sa.Text()),
                nullable=False,
                server_default=text("'{}'::jsonb"),
            ),
            sa.Column(
                "created_at",
                sa.DateTime(timezone=True),
                server_default=sa.func.now(),
                nullable=False,
            ),
            sa.UniqueConstraint(
                "workspace_id", "user_id", "video_id", "action",
                name="uq_youtube_sync_logs_intent_key",
            ),
        )
        op.create_index("ix_youtube_sync_logs_workspace_id", "youtube_sync_logs", ["workspace_id"])
        op.create_index(
            "ix_youtube_sync_logs_retry",
            "youtube_sync_logs",
            ["status", "attempt_count", "last_attempt_at"],
        )

    if not table_exists("activity_log"):
        op.create_table(
            "activity_log",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("action", sa.String(50), nullable=False),
            sa.Column("entity_type", sa.String(50), nullable=False),
            sa.Column("entity_id", sa.String(100), nullable=False),
            sa.Column("platform", sa.String(50), nullable=True),
            sa.Column("details", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
            sa.Column("user_id", sa.String(64), nullable=True),
            sa.Column(
                "created_at",
                sa.DateTime(timezone=True),
                server_default=sa.func.now(),
                nullable=False,
            ),
        )
        for column in ("action", "entity_type", "entity_id", "platform", "created_at"):
            op.create_index(f"ix_activity_log_{column}", "activity_log", [column])


def downgrade() -> None:
    op.drop_table("activity_log")
    op.drop_index("ix_youtube_sync_logs_retry", table_name="youtube_sync_logs")
    op.drop_index("ix_youtube_sync_logs_workspace_id", table_name="youtube_sync_logs")
    op.drop_table("youtube_sync_logs")

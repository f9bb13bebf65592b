# app/models/youtube_account.py
from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy.sql import func

from app.database import Base


class YouTubeAccount(Base):
    """
    OAuth connection between a workspace and a YouTube channel.

    Rows are written by the OAuth connect flow; the sync subsystem only reads
    them and writes back refreshed access tokens.
    """
    __tablename__ = "youtube_accounts"

    id = Column(Integer, primary_key=True)
    workspace_id = Column(String(64), nullable=False, index=True)
    channel_id = Column(String(64), nullable=True)
    channel_title = Column(String(255), nullable=True)

    access_token = Column(Text, nullable=True)
    refresh_token = Column(Text, nullable=True)
    token_expires_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<YouTubeAccount(id={self.id}, workspace={self.workspace_id}, channel={self.channel_id})>"

# app/models/workspace.py
from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func

from app.database import Base


class Workspace(Base):
    """Read model over the externally managed workspaces table."""

    __tablename__ = "workspaces"

    id = Column(String(64), primary_key=True)
    owner_id = Column(String(64), nullable=False, index=True)
    name = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"<Workspace(id={self.id}, owner={self.owner_id})>"

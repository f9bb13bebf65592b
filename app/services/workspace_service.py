# app/services/workspace_service.py
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import WorkspaceNotFoundError
from app.models.workspace import Workspace

logger = logging.getLogger(__name__)


class WorkspaceService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_workspace_for_user(self, user_id: str) -> Optional[Workspace]:
        """First workspace owned by the user"""
        stmt = (
            select(Workspace)
            .where(Workspace.owner_id == user_id)
            .order_by(Workspace.created_at.asc())
            .limit(1)
        )
        return (await self.db.execute(stmt)).scalar_one_or_none()

    async def get_workspace_for_user(self, user_id: str) -> Workspace:
        workspace = await self.find_workspace_for_user(user_id)
        if workspace is None:
            raise WorkspaceNotFoundError(f"No workspace found for user {user_id}")
        return workspace

"""
Immediate sync: turns a user's like into an analytics fact plus, for YouTube
posts, a ledger intent that gets one inline attempt.

The user-visible action is complete once the analytics fact exists. External
propagation is best effort here; anything that fails is left on the ledger for
the retry sweeper.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import SyncRetryConfig
from app.core.enums import AnalyticsEventType, PlatformName, SyncAction
from app.core.security import AuthenticatedUser
from app.models.sync_intent import SyncIntentMetadata
from app.services.analytics_service import AnalyticsFact, AnalyticsService
from app.services.sync.executor import SyncExecutor
from app.services.sync.ledger import SyncLedger
from app.services.workspace_service import WorkspaceService
from app.services.youtube.auth import YouTubeAuthManager
from app.services.youtube.client import YouTubeClient
from app.services.youtube.credential_store import CredentialStore

logger = logging.getLogger(__name__)


@dataclass
class IntentSyncResult:
    intent_id: int
    is_new: bool
    status: str
    attempt_count: int
    last_error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "intent_id": self.intent_id,
            "is_new": self.is_new,
            "status": self.status,
            "attempt_count": self.attempt_count,
            "last_error": self.last_error,
        }


@dataclass
class LikeResult:
    workspace_id: str
    post_id: str
    already_liked: bool
    youtube: Optional[IntentSyncResult] = None


class LikeSyncHandler:
    def __init__(
        self,
        db: AsyncSession,
        config: SyncRetryConfig,
        youtube_client: YouTubeClient,
        auth_manager: YouTubeAuthManager,
    ):
        self.db = db
        self.config = config
        self.ledger = SyncLedger(db)
        self.analytics = AnalyticsService(db)
        self.workspaces = WorkspaceService(db)
        self.executor = SyncExecutor(
            db,
            config,
            youtube_client,
            CredentialStore(db, auth_manager),
            ledger=self.ledger,
        )

    async def record_like(
        self,
        user: AuthenticatedUser,
        post_id: str,
        platform: Optional[str] = None,
        video_id: Optional[str] = None,
    ) -> LikeResult:
        """
        Record a like and, the first time only, mirror it onto YouTube.

        Raises:
            WorkspaceNotFoundError: the caller owns no workspace
        """
        workspace = await self.workspaces.get_workspace_for_user(user.id)
        platform_name = PlatformName.parse(platform)

        already_liked = await self.analytics.exists(
            workspace.id, post_id, user.id, AnalyticsEventType.POST_LIKE.value
        )
        if already_liked:
            logger.info(f"User {user.id} already liked post {post_id}; skipping analytics insert")
        else:
            await self.analytics.insert(
                AnalyticsFact(
                    workspace_id=workspace.id,
                    user_id=user.id,
                    entity_id=post_id,
                    platform=platform_name.value if platform_name else platform,
                    metadata={"actor": user.display_identity},
                )
            )

        result = LikeResult(workspace_id=workspace.id, post_id=post_id, already_liked=already_liked)

        if not already_liked and platform_name == PlatformName.YOUTUBE and video_id:
            result.youtube = await self.sync_action(
                workspace_id=workspace.id,
                user_id=user.id,
                video_id=video_id,
                action=SyncAction.LIKE,
                metadata=SyncIntentMetadata(actor=user.display_identity, source="post_like", post_id=post_id),
            )

        return result

    async def sync_action(
        self,
        workspace_id: str,
        user_id: str,
        video_id: str,
        action: Union[SyncAction, str] = SyncAction.LIKE,
        metadata: Union[SyncIntentMetadata, Dict[str, Any], None] = None,
    ) -> IntentSyncResult:
        """
        Create the ledger intent and, if it is new, make one attempt inline.

        A failed attempt is not raised; the intent stays eligible for the sweeper.
        """
        intent, is_new = await self.ledger.create_intent(
            workspace_id, user_id, video_id, action, metadata
        )
        intent_id = intent.id

        if is_new:
            try:
                await self.executor.execute(intent)
            except Exception:
                logger.exception(f"Inline sync of intent {intent_id} did not complete; leaving it for the sweeper")
                await self.db.rollback()
            intent = await self.ledger.get_intent(intent_id) or intent

        return IntentSyncResult(
            intent_id=intent_id,
            is_new=is_new,
            status=intent.status,
            attempt_count=intent.attempt_count,
            last_error=intent.last_error,
        )

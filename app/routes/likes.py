# app/routes/likes.py
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import SyncRetryConfig
from app.core.exceptions import WorkspaceNotFoundError
from app.core.security import AuthenticatedUser, get_current_user
from app.dependencies import get_db, get_retry_config, get_youtube_auth_manager, get_youtube_client
from app.schemas.sync import IntentSyncRead, LikeRequest, LikeResponse
from app.services.sync.handler import LikeSyncHandler
from app.services.youtube.auth import YouTubeAuthManager
from app.services.youtube.client import YouTubeClient

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["Likes"])


@router.post("/likes", response_model=LikeResponse)
async def record_like(
    body: LikeRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    config: SyncRetryConfig = Depends(get_retry_config),
    youtube_client: YouTubeClient = Depends(get_youtube_client),
    auth_manager: YouTubeAuthManager = Depends(get_youtube_auth_manager),
):
    """
    Record a like on a post. For YouTube posts the like is also mirrored onto the
    video; that sync never fails the request.
    """
    handler = LikeSyncHandler(db, config, youtube_client, auth_manager)
    try:
        result = await handler.record_like(
            user=user,
            post_id=body.post_id,
            platform=body.platform,
            video_id=body.video_id,
        )
    except WorkspaceNotFoundError:
        raise HTTPException(status_code=400, detail="workspace_not_found")

    youtube = IntentSyncRead(**result.youtube.to_dict()) if result.youtube else None
    return LikeResponse(ok=True, already_liked=result.already_liked, youtube=youtube)

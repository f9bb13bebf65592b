# tests/test_routes/test_like_routes.py
import httpx
import pytest
from sqlalchemy import func, select

from app.core.security import AuthenticatedUser, get_current_user, verify_supabase_token
from app.main import app
from app.models.analytics_event import AnalyticsEvent
from app.models.sync_intent import SyncIntent
from tests.mocks.db import connect_youtube


@pytest.mark.asyncio
async def test_like_youtube_post(test_client, db_session, workspace, fake_youtube):
    """Test liking a YouTube post records it and syncs the like"""
    await connect_youtube(db_session, workspace.id)

    response = await test_client.post("/api/likes", json={"postId": "P1", "platform": "youtube", "videoId": "V1"})

    assert response.status_code == 200
    data = response.json()
    assert data["ok"] is True
    assert data["already_liked"] is False
    assert data["youtube"]["status"] == "synced"
    assert data["youtube"]["attempt_count"] == 1
    assert len(fake_youtube.rate_calls) == 1


@pytest.mark.asyncio
async def test_like_twice_reports_already_liked(test_client, db_session, workspace, fake_youtube):
    await connect_youtube(db_session, workspace.id)
    payload = {"postId": "P1", "platform": "youtube", "videoId": "V1"}

    await test_client.post("/api/likes", json=payload)
    response = await test_client.post("/api/likes", json=payload)

    assert response.status_code == 200
    assert response.json()["already_liked"] is True
    assert response.json()["youtube"] is None
    assert len(fake_youtube.rate_calls) == 1
    assert (await db_session.execute(select(func.count(AnalyticsEvent.id)))).scalar_one() == 1


@pytest.mark.asyncio
async def test_like_succeeds_when_youtube_is_down(test_client, db_session, workspace, fake_youtube):
    await connect_youtube(db_session, workspace.id)
    fake_youtube.rate_statuses = [503]

    response = await test_client.post("/api/likes", json={"postId": "P1", "platform": "youtube", "videoId": "V1"})

    assert response.status_code == 200
    assert response.json()["youtube"]["status"] == "failed"

    intent = (await db_session.execute(select(SyncIntent))).scalar_one()
    assert intent.status == "failed"
    assert intent.attempt_count == 1


@pytest.mark.asyncio
async def test_like_non_youtube_post(test_client, db_session, workspace):
    response = await test_client.post("/api/likes", json={"postId": "P1", "platform": "instagram"})

    assert response.status_code == 200
    assert response.json()["youtube"] is None
    assert (await db_session.execute(select(func.count(SyncIntent.id)))).scalar_one() == 0


@pytest.mark.asyncio
async def test_like_without_workspace(test_client):
    response = await test_client.post("/api/likes", json={"postId": "P1"})

    assert response.status_code == 400
    assert response.json()["detail"] == "workspace_not_found"


@pytest.mark.asyncio
async def test_like_requires_post_id(test_client, workspace):
    response = await test_client.post("/api/likes", json={"platform": "youtube"})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_like_without_token_is_rejected(test_client):
    del app.dependency_overrides[get_current_user]

    response = await test_client.post("/api/likes", json={"postId": "P1"})

    assert response.status_code == 401
    assert response.json()["detail"] == "missing_auth"


@pytest.mark.asyncio
async def test_like_with_rejected_token(test_client, mocker):
    del app.dependency_overrides[get_current_user]
    mocker.patch("app.core.security.verify_supabase_token", return_value=None)

    response = await test_client.post(
        "/api/likes", json={"postId": "P1"}, headers={"Authorization": "Bearer bad-token"}
    )

    assert response.status_code == 401
    assert response.json()["detail"] == "invalid_token"


@pytest.mark.asyncio
async def test_verify_supabase_token_resolves_user(mocker):
    """Test that a valid token is resolved through the auth server"""
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["authorization"] = request.headers["Authorization"]
        return httpx.Response(200, json={"id": "U1", "email": "u1@example.com"})

    real_client = httpx.AsyncClient
    mocker.patch(
        "httpx.AsyncClient",
        side_effect=lambda **kwargs: real_client(transport=httpx.MockTransport(handler), **kwargs),
    )

    user = await verify_supabase_token("good-token")

    assert user == AuthenticatedUser(id="U1", email="u1@example.com")
    assert seen["url"] == "https://supabase.test/auth/v1/user"
    assert seen["authorization"] == "Bearer good-token"

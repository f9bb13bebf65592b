"""
Request authentication for the social sync API.

User-facing endpoints carry a Supabase access token (``Authorization: Bearer``)
which is verified against the Supabase auth server. Internal endpoints used by
the scheduler and other functions are guarded by a shared ``x-internal-secret``.
"""

import logging
import secrets
from dataclasses import dataclass
from typing import Optional

import httpx
from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import get_settings, get_internal_secret

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthenticatedUser:
    id: str
    email: Optional[str] = None

    @property
    def display_identity(self) -> str:
        """Email when known, otherwise a short handle derived from the user id"""
        return self.email or f"@{self.id[:8]}"


async def verify_supabase_token(token: str, timeout: float = 10.0) -> Optional[AuthenticatedUser]:
    """
    Resolve a Supabase access token to its user.

    Returns None when the token is rejected or the auth server is unreachable.
    """
    settings = get_settings()
    if not settings.SUPABASE_URL:
        logger.error("SUPABASE_URL is not configured; cannot verify access tokens")
        return None

    url = f"{settings.SUPABASE_URL.rstrip('/')}/auth/v1/user"
    headers = {
        "Authorization": f"Bearer {token}",
        "apikey": settings.SUPABASE_ANON_KEY,
    }

    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.get(url, headers=headers)
    except httpx.RequestError as e:
        logger.error(f"Network error verifying access token: {str(e)}")
        return None

    if response.status_code != 200:
        logger.info(f"Access token rejected by auth server ({response.status_code})")
        return None

    data = response.json()
    user_id = data.get("id")
    if not user_id:
        return None
    return AuthenticatedUser(id=str(user_id), email=data.get("email"))


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthenticatedUser:
    """Dependency returning the verified caller, 401 otherwise"""
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="missing_auth",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = await verify_supabase_token(credentials.credentials)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid_token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_internal_secret(
    x_internal_secret: Optional[str] = Header(default=None),
    expected_secret: str = Depends(get_internal_secret),
) -> None:
    """
    Guard for internal endpoints. An unset INTERNAL_SECRET disables them entirely.
    """
    if not expected_secret or not x_internal_secret:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    if not secrets.compare_digest(
        x_internal_secret.encode("utf8"),
        expected_secret.encode("utf8"),
    ):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

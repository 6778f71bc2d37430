import asyncio
from typing import Any, Callable, Dict

from fastapi import Depends, Header, HTTPException, status
import httpx

from config import settings
from constants import ROLE_ADMIN, ROLE_STUDENT, ROLE_VENDOR, USER_STATUS_ACTIVE
from repositories.users_repository import fetch_user_by_auth_id
from supabase_client import get_supabase


async def _fetch_user(access_token: str) -> dict:
    headers = {
        "Authorization": f"Bearer {access_token}",
        "apikey": settings.supabase_service_role_key,
    }
    url = f"{settings.supabase_url}/auth/v1/user"
    async with httpx.AsyncClient(timeout=10) as client:
        response = await client.get(url, headers=headers)
    if response.status_code != 200:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid auth token"
        )
    return response.json()


async def get_current_user_id(
    authorization: str | None = Header(default=None, convert_underscores=False),
) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing auth token"
        )
    token = authorization.split(" ", 1)[1]
    user = await _fetch_user(token)
    user_id = user.get("id")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid user profile"
        )
    return user_id


async def get_app_user(
    auth_user_id: str = Depends(get_current_user_id),
    client=Depends(get_supabase),
) -> Dict[str, Any]:
    try:
        user = await asyncio.wait_for(
            asyncio.to_thread(fetch_user_by_auth_id, client, auth_user_id),
            timeout=settings.role_lookup_timeout_seconds,
        )
    except asyncio.TimeoutError as exc:
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail="Role lookup timed out"
        ) from exc
    if not user:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="No profile for this account"
        )
    if (user.get("status") or USER_STATUS_ACTIVE) != USER_STATUS_ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Account is not active"
        )
    return user


def require_role(*roles: str) -> Callable[..., Any]:
    async def _dependency(user: Dict[str, Any] = Depends(get_app_user)) -> Dict[str, Any]:
        if user.get("role") not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed for this role"
            )
        return user

    return _dependency


require_student = require_role(ROLE_STUDENT)
require_vendor = require_role(ROLE_VENDOR)
require_admin = require_role(ROLE_ADMIN)

from __future__ import annotations

from fastapi import Depends, Header, HTTPException

from backend.settings import get_settings


async def require_backend_token(
    x_backend_token: str | None = Header(default=None, alias="X-Backend-Token"),
) -> None:
    settings = get_settings()
    if not x_backend_token or x_backend_token != settings.backend_session_secret:
        raise HTTPException(status_code=401, detail="Invalid backend token")


async def require_user_email(
    x_user_email: str | None = Header(default=None, alias="X-User-Email"),
    _token: None = Depends(require_backend_token),
) -> str:
    if not x_user_email:
        raise HTTPException(status_code=401, detail="Missing user email")
    return x_user_email.strip().lower()


async def require_admin_email(user_email: str = Depends(require_user_email)) -> str:
    settings = get_settings()
    if user_email not in settings.admin_emails:
        raise HTTPException(status_code=403, detail="User not allowed to publish")
    return user_email

"""
Auth endpoints: dashboard password check.
"""
import logging

from fastapi import APIRouter, Request

from smartchat.core.config import settings
from smartchat.core.errors import UnauthorizedError
from smartchat.core.security import check_dashboard_password
from smartchat.schemas.schemas import AuthResponse, PasswordRequest

log = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


def _ip(request: Request) -> str | None:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


@router.post("", response_model=AuthResponse)
async def check_password(payload: PasswordRequest, request: Request):
    """Binary allow/deny against DASHBOARD_PASSWORD. No session is issued."""
    try:
        check_dashboard_password(payload.password, settings.DASHBOARD_PASSWORD)
    except UnauthorizedError:
        log.info(f"[Auth] Dashboard password rejected for {_ip(request)}")
        raise
    return AuthResponse(success=True)

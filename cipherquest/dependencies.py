"""
cipherquest/dependencies.py
FastAPI dependencies for the collaborators attached to app.state by create_app().
"""
import hmac
from typing import Optional

from fastapi import Depends, Header, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from cipherquest.config.settings import Settings
from cipherquest.database import get_db
from cipherquest.errors import ErrorCode, UnauthorizedError, ForbiddenError
from cipherquest.orm.team import Team
from cipherquest.services.auth_service import PasswordHasher, decode_access_token
from cipherquest.services.notifier import Notifier

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier


def get_hasher(request: Request) -> PasswordHasher:
    return request.app.state.hasher


async def get_current_team(
    token: Optional[str] = Depends(oauth2_scheme),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
) -> Team:
    """Team identified by the bearer token."""
    if not token:
        raise UnauthorizedError("Authentication required", code=ErrorCode.AUTH_REQUIRED)

    team_id = decode_access_token(token, settings)
    team = await db.get(Team, team_id)
    if not team:
        raise UnauthorizedError("Team not found", code=ErrorCode.AUTH_INVALID)
    return team


def ensure_same_team(current_team: Team, team_id: int):
    if current_team.id != team_id:
        raise ForbiddenError("You can only modify your own team", details={"team_id": team_id})


def require_judge(
    x_judge_token: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
):
    """Judging endpoints need the X-Judge-Token header to match JUDGE_TOKEN."""
    if not settings.judge_token:
        raise ForbiddenError("Judging is disabled: JUDGE_TOKEN is not configured")
    if not x_judge_token:
        raise UnauthorizedError("Judge token required", code=ErrorCode.AUTH_REQUIRED)
    if not hmac.compare_digest(x_judge_token, settings.judge_token):
        raise ForbiddenError("Invalid judge token")

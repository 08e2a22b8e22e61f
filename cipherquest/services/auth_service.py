"""
cipherquest/services/auth_service.py
Team registration, login, email verification and password reset.

Password hashing goes through a PasswordHasher built once in create_app();
bcrypt work runs in the default executor so it never blocks the event loop.
Tokens are HS256 JWTs with the team id as subject.
"""
import asyncio
import logging
import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from jose import JWTError, ExpiredSignatureError, jwt
from passlib.context import CryptContext
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from cipherquest.config.settings import Settings
from cipherquest.errors import (
    ErrorCode,
    BadRequestError,
    UnauthorizedError,
    ConflictError,
    DisqualifiedError,
    NotFoundError,
    validate_not_empty,
)
from cipherquest.orm.base import utcnow
from cipherquest.orm.team import Team, PasswordResetToken
from cipherquest.services.notifier import Notifier, NotificationKind

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
RESET_TOKEN_TTL = timedelta(hours=1)
FORGOT_PASSWORD_MESSAGE = "If that email is registered, a password reset link has been sent"


# ================= PASSWORDS =================

def normalize_password(password: str) -> str:
    """
    bcrypt only supports 72 bytes.
    Truncate after UTF-8 encoding so long passwords still verify.
    """
    encoded = password.encode("utf-8")
    if len(encoded) > 72:
        encoded = encoded[:72]
    return encoded.decode("utf-8", errors="ignore")


class PasswordHasher:
    """Opaque hash/verify capability over a passlib CryptContext."""

    def __init__(self, scheme: str = "bcrypt"):
        options = {"bcrypt__rounds": 10} if scheme == "bcrypt" else {}
        self.context = CryptContext(schemes=[scheme], deprecated="auto", **options)

    async def hash(self, password: str) -> str:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.context.hash, normalize_password(password))

    async def verify(self, password: str, password_hash: str) -> bool:
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(
                None, self.context.verify, normalize_password(password), password_hash
            )
        except ValueError:
            # Unrecognized or malformed hash
            return False


def validate_password(password: Optional[str]):
    validate_not_empty(password, "password")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise BadRequestError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            details={"field": "password"}
        )


# ================= TOKENS =================

def create_access_token(team: Team, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    expire = utcnow() + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    to_encode = {
        "sub": str(team.id),
        "team_name": team.team_name,
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings) -> int:
    """Return the team id carried by a valid access token."""
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        raise UnauthorizedError("Token has expired", code=ErrorCode.AUTH_EXPIRED)
    except JWTError:
        raise UnauthorizedError("Invalid or expired token", code=ErrorCode.AUTH_INVALID)

    subject = payload.get("sub")
    if not subject or payload.get("type") != "access":
        raise UnauthorizedError("Invalid token payload", code=ErrorCode.AUTH_INVALID)
    try:
        return int(subject)
    except ValueError:
        raise UnauthorizedError("Invalid token payload", code=ErrorCode.AUTH_INVALID)


def _new_token() -> str:
    return uuid.uuid4().hex


# ================= OPERATIONS =================

async def register_team(
    db: AsyncSession,
    hasher: PasswordHasher,
    notifier: Notifier,
    team_name: str,
    lead_email: str,
    password: str,
    team_members: Optional[List[str]] = None,
) -> Team:
    validate_not_empty(team_name, "team_name")
    validate_not_empty(lead_email, "lead_email")
    validate_password(password)

    team_name = team_name.strip()
    lead_email = lead_email.strip().lower()

    result = await db.execute(
        select(Team).where(or_(Team.team_name == team_name, Team.lead_email == lead_email))
    )
    existing = result.scalars().first()
    if existing:
        field = "team_name" if existing.team_name == team_name else "lead_email"
        logger.warning(f"Registration conflict on {field}: {team_name} / {lead_email}")
        raise ConflictError("Team name or email already registered", details={"field": field})

    team = Team(
        team_name=team_name,
        lead_email=lead_email,
        password_hash=await hasher.hash(password),
        team_members=[m.strip() for m in (team_members or []) if m and m.strip()],
        email_verified=False,
        verification_token=_new_token(),
    )
    db.add(team)
    await db.commit()
    await db.refresh(team)

    logger.info(f"Team registered: {team.team_name} (id={team.id})")

    await notifier.notify(
        NotificationKind.VERIFICATION,
        team.lead_email,
        {"team_name": team.team_name, "token": team.verification_token},
    )
    return team


async def login_team(
    db: AsyncSession,
    hasher: PasswordHasher,
    settings: Settings,
    email: str,
    password: str,
) -> Dict[str, Any]:
    validate_not_empty(email, "email")
    validate_not_empty(password, "password")

    result = await db.execute(select(Team).where(Team.lead_email == email.strip().lower()))
    team = result.scalar_one_or_none()

    if not team or not await hasher.verify(password, team.password_hash):
        logger.warning(f"Failed login for {email}")
        raise UnauthorizedError("Invalid email or password", code=ErrorCode.AUTH_INVALID)

    if not team.email_verified:
        raise UnauthorizedError(
            "Please verify your email before logging in",
            code=ErrorCode.EMAIL_NOT_VERIFIED,
            details={"email_verified": False}
        )

    if team.is_disqualified:
        raise DisqualifiedError()

    logger.info(f"Team {team.id} logged in")
    return {
        "access_token": create_access_token(team, settings),
        "token_type": "bearer",
        "team": team.to_dict(),
    }


async def verify_email(db: AsyncSession, token: str) -> Team:
    validate_not_empty(token, "token")

    result = await db.execute(select(Team).where(Team.verification_token == token))
    team = result.scalar_one_or_none()
    if not team:
        raise BadRequestError("Invalid or expired verification token", code=ErrorCode.INVALID_TOKEN)

    team.email_verified = True
    team.verification_token = None
    await db.commit()

    logger.info(f"Email verified for team {team.id}")
    return team


async def forgot_password(
    db: AsyncSession,
    notifier: Notifier,
    email: str,
    now: Optional[datetime] = None,
) -> str:
    """Always returns the same message so callers cannot tell which emails are registered."""
    validate_not_empty(email, "email")

    result = await db.execute(select(Team).where(Team.lead_email == email.strip().lower()))
    team = result.scalar_one_or_none()
    if not team:
        return FORGOT_PASSWORD_MESSAGE

    reset = PasswordResetToken(
        team_id=team.id,
        token=_new_token(),
        expires_at=(now or utcnow()) + RESET_TOKEN_TTL,
        used=False,
    )
    db.add(reset)
    await db.commit()

    await notifier.notify(
        NotificationKind.PASSWORD_RESET,
        team.lead_email,
        {"team_name": team.team_name, "token": reset.token},
    )
    return FORGOT_PASSWORD_MESSAGE


async def reset_password(
    db: AsyncSession,
    hasher: PasswordHasher,
    token: str,
    new_password: str,
    now: Optional[datetime] = None,
):
    validate_not_empty(token, "token")
    validate_password(new_password)

    result = await db.execute(select(PasswordResetToken).where(PasswordResetToken.token == token))
    reset = result.scalar_one_or_none()
    if not reset or reset.used or reset.expires_at < (now or utcnow()):
        raise BadRequestError("Invalid or expired reset token", code=ErrorCode.INVALID_TOKEN)

    team = await db.get(Team, reset.team_id)
    if not team:
        raise BadRequestError("Invalid or expired reset token", code=ErrorCode.INVALID_TOKEN)

    team.password_hash = await hasher.hash(new_password)
    reset.used = True
    await db.commit()

    logger.info(f"Password reset for team {team.id}")


async def resend_verification(db: AsyncSession, notifier: Notifier, email: str) -> Team:
    validate_not_empty(email, "email")

    result = await db.execute(select(Team).where(Team.lead_email == email.strip().lower()))
    team = result.scalar_one_or_none()
    if not team:
        raise NotFoundError("Team", code=ErrorCode.TEAM_NOT_FOUND)

    if team.email_verified:
        raise BadRequestError("Email already verified", code=ErrorCode.ALREADY_VERIFIED)

    team.verification_token = _new_token()
    await db.commit()

    await notifier.notify(
        NotificationKind.VERIFICATION,
        team.lead_email,
        {"team_name": team.team_name, "token": team.verification_token},
    )
    return team

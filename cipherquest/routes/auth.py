"""
cipherquest/routes/auth.py
Team registration, login, email verification and password reset, rate limited per client IP.
"""
import logging

from fastapi import APIRouter, Depends, Request
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from cipherquest.config.settings import Settings
from cipherquest.database import get_db
from cipherquest.dependencies import get_settings, get_notifier, get_hasher
from cipherquest.schemas.auth import (
    TeamRegister,
    TeamLogin,
    Token,
    RegisterResponse,
    VerifyEmailRequest,
    EmailRequest,
    ResetPasswordRequest,
    MessageResponse,
)
from cipherquest.services import auth_service
from cipherquest.services.auth_service import PasswordHasher
from cipherquest.services.notifier import Notifier

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])
# Process-wide: slowapi binds the decorated routes to this instance at import
# time, so every app built in the process shares it and its enabled flag.
limiter = Limiter(key_func=get_remote_address)


@router.post("/register", response_model=RegisterResponse, status_code=201)
@limiter.limit("10/minute")
async def register(
    request: Request,  # Required by slowapi
    payload: TeamRegister,
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_hasher),
    notifier: Notifier = Depends(get_notifier),
):
    team = await auth_service.register_team(
        db, hasher, notifier,
        team_name=payload.team_name,
        lead_email=payload.lead_email,
        password=payload.password,
        team_members=payload.team_members,
    )
    return {
        "message": "Team registered successfully. Please check your email to verify your account.",
        "team_id": team.id,
        "team_name": team.team_name,
    }


@router.post("/login", response_model=Token)
@limiter.limit("20/minute")
async def login(
    request: Request,  # Required by slowapi
    payload: TeamLogin,
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_hasher),
    settings: Settings = Depends(get_settings),
):
    return await auth_service.login_team(db, hasher, settings, payload.email, payload.password)


@router.post("/verify-email", response_model=MessageResponse)
async def verify_email(payload: VerifyEmailRequest, db: AsyncSession = Depends(get_db)):
    await auth_service.verify_email(db, payload.token)
    return {"message": "Email verified successfully. You can now log in.", "email_verified": True}


@router.post("/forgot-password", response_model=MessageResponse)
@limiter.limit("5/minute")
async def forgot_password(
    request: Request,  # Required by slowapi
    payload: EmailRequest,
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    message = await auth_service.forgot_password(db, notifier, payload.email)
    return {"message": message}


@router.post("/reset-password", response_model=MessageResponse)
@limiter.limit("5/minute")
async def reset_password(
    request: Request,  # Required by slowapi
    payload: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_hasher),
):
    await auth_service.reset_password(db, hasher, payload.token, payload.new_password)
    return {"message": "Password reset successfully. You can now log in with your new password."}


@router.post("/resend-verification", response_model=MessageResponse)
@limiter.limit("5/minute")
async def resend_verification(
    request: Request,  # Required by slowapi
    payload: EmailRequest,
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    await auth_service.resend_verification(db, notifier, payload.email)
    return {"message": "Verification email sent. Please check your inbox."}

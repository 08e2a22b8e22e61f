"""
Auth API Schemas (Pydantic)
"""
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


class TeamRegister(BaseModel):
    """Registration payload. Passwords shorter than 6 characters are rejected by the service."""
    team_name: str = Field(..., min_length=1, max_length=255)
    lead_email: EmailStr
    password: str
    team_members: List[str] = Field(default_factory=list)

    @field_validator("team_name")
    @classmethod
    def strip_team_name(cls, v):
        return v.strip()


class TeamLogin(BaseModel):
    email: EmailStr
    password: str


class TeamProfile(BaseModel):
    id: int
    team_name: str
    lead_email: str
    team_members: List[str]
    current_stage: int
    quest_score: int
    is_disqualified: bool
    email_verified: bool


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    team: TeamProfile


class RegisterResponse(BaseModel):
    message: str
    team_id: int
    team_name: str


class VerifyEmailRequest(BaseModel):
    token: str


class EmailRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str
    new_password: str


class MessageResponse(BaseModel):
    message: str
    email_verified: Optional[bool] = None

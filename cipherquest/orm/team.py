"""
cipherquest/orm/team.py
Registered hackathon teams and their password reset tokens.

Stage progression:
    1 = cipher quest, 2 = build & submit, 3 = submitted / finals
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, JSON, ForeignKey

from cipherquest.orm.base import Base, utcnow


class Team(Base):
    """
    A team is the unit of identity on the platform.

    The quest engine only ever writes quest_score, current_stage and
    is_disqualified; everything else belongs to registration.
    """
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, index=True)
    team_name = Column(String(255), nullable=False, unique=True, index=True)
    lead_email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    team_members = Column(JSON, nullable=False, default=list)

    email_verified = Column(Boolean, nullable=False, default=False)
    verification_token = Column(String(64), nullable=True, index=True)

    is_disqualified = Column(Boolean, nullable=False, default=False)
    current_stage = Column(Integer, nullable=False, default=1)
    quest_score = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Team(id={self.id}, name='{self.team_name}', stage={self.current_stage})>"

    def to_dict(self):
        return {
            "id": self.id,
            "team_name": self.team_name,
            "lead_email": self.lead_email,
            "team_members": list(self.team_members or []),
            "current_stage": self.current_stage,
            "quest_score": self.quest_score,
            "is_disqualified": self.is_disqualified,
            "email_verified": self.email_verified,
        }


class PasswordResetToken(Base):
    """One-shot password reset token, valid for one hour."""
    __tablename__ = "password_reset_tokens"

    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    token = Column(String(64), nullable=False, unique=True, index=True)
    expires_at = Column(DateTime, nullable=False)
    used = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

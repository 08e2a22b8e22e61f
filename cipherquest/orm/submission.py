"""
cipherquest/orm/submission.py
Project submissions and judging scores.

A stub Submission is upserted when a team qualifies (carrying the quest
completion time); the submission flow later fills in URLs and flips
is_submitted.
"""
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from cipherquest.orm.base import Base, utcnow


class Submission(Base):
    __tablename__ = "submissions"

    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    problem_id = Column(Integer, ForeignKey("problem_statements.id"), nullable=True)

    quest_completion_time = Column(Integer, nullable=True)
    ppt_url = Column(String(500), nullable=True)
    prototype_url = Column(String(500), nullable=True)
    github_url = Column(String(500), nullable=True)
    description = Column(Text, nullable=True)
    submission_time = Column(DateTime, nullable=True)
    is_submitted = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    team = relationship("Team", lazy="selectin")

    def to_dict(self):
        return {
            "id": self.id,
            "team_id": self.team_id,
            "problem_id": self.problem_id,
            "quest_completion_time": self.quest_completion_time,
            "ppt_url": self.ppt_url,
            "prototype_url": self.prototype_url,
            "github_url": self.github_url,
            "description": self.description,
            "submission_time": self.submission_time.isoformat() if self.submission_time else None,
            "is_submitted": self.is_submitted,
        }


class JudgingScore(Base):
    __tablename__ = "judging_scores"

    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    submission_id = Column(Integer, ForeignKey("submissions.id", ondelete="SET NULL"), nullable=True)

    innovation_score = Column(Integer, nullable=False)
    implementation_score = Column(Integer, nullable=False)
    presentation_score = Column(Integer, nullable=False)
    quest_score = Column(Integer, nullable=False)
    total_score = Column(Integer, nullable=False, index=True)

    judge_notes = Column(Text, nullable=True)
    judged_by = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    team = relationship("Team", lazy="selectin")
    submission = relationship("Submission", lazy="selectin")

    def to_dict(self):
        return {
            "id": self.id,
            "team_id": self.team_id,
            "submission_id": self.submission_id,
            "innovation_score": self.innovation_score,
            "implementation_score": self.implementation_score,
            "presentation_score": self.presentation_score,
            "quest_score": self.quest_score,
            "total_score": self.total_score,
            "judge_notes": self.judge_notes,
            "judged_by": self.judged_by,
        }

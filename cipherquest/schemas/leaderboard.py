"""
Leaderboard & Judging API Schemas (Pydantic)
"""
from typing import Optional

from pydantic import BaseModel


class JudgingScoreCreate(BaseModel):
    """Range checks (0..100) happen in the service so they share its error code."""
    team_id: int
    submission_id: Optional[int] = None
    innovation_score: int
    implementation_score: int
    presentation_score: int
    judge_notes: Optional[str] = None
    judged_by: Optional[str] = None

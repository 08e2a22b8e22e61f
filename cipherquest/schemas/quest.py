"""
CipherQuest API Schemas (Pydantic)
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class StartQuestRequest(BaseModel):
    team_id: int


class GuessRequest(BaseModel):
    session_id: int
    question_id: int
    guess: str = Field(..., min_length=1, max_length=255)
    team_id: int

    @field_validator("guess")
    @classmethod
    def guess_not_blank(cls, v):
        if not v.strip():
            raise ValueError("guess cannot be blank")
        return v


class ResetQuestRequest(BaseModel):
    team_id: int


class PublicQuestion(BaseModel):
    """A question as shown to teams: never carries the answer."""
    id: int
    hint: str
    category: Optional[str] = None
    problem_domain: Optional[str] = None
    cipher_type: Optional[str] = None
    difficulty: int
    max_attempts: int


class LetterFeedback(BaseModel):
    letter: str
    status: str  # correct / present / absent


class GuessResult(BaseModel):
    is_correct: bool
    attempts: int
    max_attempts: int
    remaining_attempts: int
    feedback: List[LetterFeedback]
    time_elapsed: int
    time_remaining: int
    correct_answers: int
    total_questions: int
    score: int
    quest_completed: bool
    qualified: bool
    assigned_problem: Optional[Dict[str, Any]] = None
    message: str


class StartQuestResponse(BaseModel):
    session_id: int
    started_at: str
    quest_duration: int
    time_remaining: int
    current_question_index: int
    total_questions: int
    current_question: Optional[PublicQuestion] = None
    is_completed: bool
    message: str


class LeaderboardEntry(BaseModel):
    rank: int
    team_name: str
    score: int
    correct_answers: int
    accuracy: int
    completed_at: Optional[str] = None

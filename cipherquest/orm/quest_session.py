"""
cipherquest/orm/quest_session.py
Quest session aggregate and per-question attempt rows.

A team owns at most one session (unique team_id). The session keeps a
snapshot of its five questions so edits to the question bank never affect
a quest in progress.

Lifecycle:
    active (is_completed = false) -> completed (is_completed = true)
The transition is one-way and performed by a conditional UPDATE guarded by
is_completed = false, so it happens at most once.
"""
from sqlalchemy import (
    Column, Integer, Boolean, DateTime, JSON, ForeignKey,
    UniqueConstraint, CheckConstraint
)
from sqlalchemy.orm import relationship

from cipherquest.orm.base import Base, utcnow


class QuestSession(Base):
    __tablename__ = "quest_sessions"

    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)

    questions = Column(JSON, nullable=False)
    started_at = Column(DateTime, nullable=False, default=utcnow)
    quest_duration = Column(Integer, nullable=False, default=1800)

    current_question_index = Column(Integer, nullable=False, default=0)
    score = Column(Integer, nullable=False, default=0)
    correct_answers = Column(Integer, nullable=False, default=0)

    is_completed = Column(Boolean, nullable=False, default=False, index=True)
    completed_at = Column(DateTime, nullable=True)
    assigned_problem_id = Column(Integer, ForeignKey("problem_statements.id"), nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    team = relationship("Team", lazy="selectin")
    attempts = relationship(
        "QuestionAttempt",
        back_populates="quest_session",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint("score >= 0", name="ck_quest_sessions_score_non_negative"),
        CheckConstraint("correct_answers >= 0", name="ck_quest_sessions_correct_non_negative"),
    )

    def question_by_id(self, question_id: int):
        for question in self.questions or []:
            if question.get("id") == question_id:
                return question
        return None

    def current_question(self):
        questions = self.questions or []
        if 0 <= self.current_question_index < len(questions):
            return questions[self.current_question_index]
        return None

    def __repr__(self):
        return (
            f"<QuestSession(id={self.id}, team={self.team_id}, "
            f"correct={self.correct_answers}, completed={self.is_completed})>"
        )


class QuestionAttempt(Base):
    """
    Append-only guess history for one (session, question) pair.

    is_correct only ever goes false -> true; once true, no further guesses
    are accepted for the question.
    """
    __tablename__ = "question_attempts"

    id = Column(Integer, primary_key=True, index=True)
    quest_session_id = Column(
        Integer, ForeignKey("quest_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    question_id = Column(Integer, nullable=False, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)

    attempts = Column(JSON, nullable=False, default=list)
    is_correct = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    quest_session = relationship("QuestSession", back_populates="attempts")

    __table_args__ = (
        UniqueConstraint("quest_session_id", "question_id", name="uq_attempt_session_question"),
    )

    @property
    def attempt_count(self) -> int:
        return len(self.attempts or [])

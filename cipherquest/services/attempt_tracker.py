"""
Attempt Tracker

Records guesses against (session, question) pairs.

Rules enforced here:
- guess history is append-only
- is_correct only moves false -> true, and a solved question accepts no
  further guesses
- a question whose history already holds max_attempts guesses accepts no
  further guesses
"""
import logging
from typing import Optional

from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from cipherquest.errors import AlreadySolvedError, AttemptsExhaustedError
from cipherquest.orm.base import utcnow
from cipherquest.orm.quest_session import QuestionAttempt

logger = logging.getLogger(__name__)


async def get_attempt(
    db: AsyncSession,
    session_id: int,
    question_id: int,
    team_id: int
) -> Optional[QuestionAttempt]:
    """Return the attempt row for (session, question, team) or None."""
    result = await db.execute(
        select(QuestionAttempt).where(
            and_(
                QuestionAttempt.quest_session_id == session_id,
                QuestionAttempt.question_id == question_id,
                QuestionAttempt.team_id == team_id
            )
        )
    )
    return result.scalar_one_or_none()


def ensure_can_guess(attempt: Optional[QuestionAttempt], question_id: int, max_attempts: int):
    """Raise if no further guesses are allowed for this question."""
    if attempt is None:
        return
    if attempt.is_correct:
        raise AlreadySolvedError(question_id)
    if attempt.attempt_count >= max_attempts:
        raise AttemptsExhaustedError(question_id, max_attempts)


async def record_guess(
    db: AsyncSession,
    session_id: int,
    question_id: int,
    team_id: int,
    guess: str,
    is_correct: bool,
    max_attempts: int,
    attempt: Optional[QuestionAttempt] = None,
) -> QuestionAttempt:
    """
    Append a guess to the attempt row, creating the row on first guess.

    The caller owns the transaction; this only flushes.

    Args:
        attempt: The already loaded attempt row, if the caller has it
    """
    if attempt is None:
        attempt = await get_attempt(db, session_id, question_id, team_id)

    ensure_can_guess(attempt, question_id, max_attempts)

    now = utcnow()
    if attempt is None:
        attempt = QuestionAttempt(
            quest_session_id=session_id,
            question_id=question_id,
            team_id=team_id,
            attempts=[guess],
            is_correct=is_correct,
            completed_at=now if is_correct else None,
        )
        db.add(attempt)
    else:
        # JSON columns are not mutation-tracked; assign a new list
        attempt.attempts = [*(attempt.attempts or []), guess]
        if is_correct:
            attempt.is_correct = True
            attempt.completed_at = now

    await db.flush()
    return attempt


def is_resolved(attempt: Optional[QuestionAttempt], max_attempts: int) -> bool:
    """A question is resolved once solved or once its attempts are used up."""
    if attempt is None:
        return False
    return attempt.is_correct or attempt.attempt_count >= max_attempts

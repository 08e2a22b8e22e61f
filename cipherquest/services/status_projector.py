"""
Status Projector

Read-only views over a quest session. Nothing here writes to the database:
a session past its time limit is reported with is_time_up=True but stays
active until the next guess completes it.

Questions are always sanitized before leaving this module; correct_answer
never appears in a projection.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cipherquest.config.settings import QuestRules, QUEST_RULES
from cipherquest.errors import ErrorCode, NotFoundError, AlreadyCompletedError
from cipherquest.orm.base import utcnow
from cipherquest.orm.problem_statement import ProblemStatement
from cipherquest.orm.quest_session import QuestSession, QuestionAttempt

PUBLIC_QUESTION_FIELDS = ("id", "hint", "category", "problem_domain", "cipher_type", "difficulty", "max_attempts")


def sanitize_question(question: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of a question snapshot without the answer."""
    return {key: question.get(key) for key in PUBLIC_QUESTION_FIELDS}


def project_status(
    session: QuestSession,
    now: Optional[datetime] = None,
    rules: QuestRules = QUEST_RULES,
) -> Dict[str, Any]:
    """Time and progress summary for a session."""
    now = now or utcnow()
    end = session.completed_at if session.is_completed and session.completed_at else now
    elapsed_exact = max(0.0, (end - session.started_at).total_seconds())
    elapsed = int(elapsed_exact)
    total = len(session.questions or [])

    current = None
    if not session.is_completed:
        question = session.current_question()
        current = sanitize_question(question) if question else None

    return {
        "session_id": session.id,
        "team_id": session.team_id,
        "started_at": session.started_at.isoformat(),
        "quest_duration": session.quest_duration,
        "time_elapsed": elapsed,
        "time_remaining": max(0, session.quest_duration - elapsed),
        "is_time_up": elapsed_exact > session.quest_duration,
        "current_question_index": session.current_question_index,
        "current_question": current,
        "progress": {
            "current": min(session.current_question_index + 1, total),
            "total": total,
            "correct_answers": session.correct_answers,
        },
        "score": session.score,
        "correct_answers": session.correct_answers,
        "is_completed": session.is_completed,
        "completed_at": session.completed_at.isoformat() if session.completed_at else None,
        "qualified": session.correct_answers >= rules.qualification_threshold,
        "assigned_problem_id": session.assigned_problem_id,
    }


async def _load_session(db: AsyncSession, session_id: int) -> QuestSession:
    session = await db.get(QuestSession, session_id)
    if not session:
        raise NotFoundError("Quest session", session_id, code=ErrorCode.SESSION_NOT_FOUND)
    return session


async def get_status(
    db: AsyncSession,
    team_id: int,
    now: Optional[datetime] = None,
    rules: QuestRules = QUEST_RULES,
) -> Dict[str, Any]:
    """Status for a team. A team without a session gets has_session=False."""
    result = await db.execute(
        select(QuestSession).where(QuestSession.team_id == team_id)
    )
    session = result.scalar_one_or_none()
    if not session:
        return {"has_session": False, "team_id": team_id}

    status = project_status(session, now, rules)
    status["has_session"] = True

    if session.assigned_problem_id:
        problem = await db.get(ProblemStatement, session.assigned_problem_id)
        status["assigned_problem"] = problem.to_dict() if problem else None
    else:
        status["assigned_problem"] = None
    return status


async def get_current_question(
    db: AsyncSession,
    session_id: int,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    session = await _load_session(db, session_id)
    if session.is_completed:
        raise AlreadyCompletedError("Quest already completed")

    status = project_status(session, now)
    return {
        "question": status["current_question"],
        "progress": {
            "current": status["progress"]["current"],
            "total": status["progress"]["total"],
            "completed": session.correct_answers,
        },
        "time_remaining": status["time_remaining"],
        "is_time_up": status["is_time_up"],
    }


async def list_questions(db: AsyncSession, session_id: int) -> List[Dict[str, Any]]:
    """All questions of a session with the team's attempt state, answers removed."""
    session = await _load_session(db, session_id)

    result = await db.execute(
        select(QuestionAttempt).where(QuestionAttempt.quest_session_id == session.id)
    )
    attempts = {attempt.question_id: attempt for attempt in result.scalars().all()}

    questions = []
    for index, question in enumerate(session.questions or []):
        attempt = attempts.get(question["id"])
        item = sanitize_question(question)
        item["index"] = index
        item["attempts_used"] = attempt.attempt_count if attempt else 0
        item["is_solved"] = bool(attempt and attempt.is_correct)
        questions.append(item)
    return questions

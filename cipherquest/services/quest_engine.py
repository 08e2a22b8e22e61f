"""
Quest Session Engine

Owns the cipher quest lifecycle for one team:

    start -> guess* -> completed

State lives in QuestSession (one per team) plus QuestionAttempt rows.
Rules:
- start is idempotent: a team that already has a session gets it back
- every guess is checked against the time limit first; an expired session
  is force-completed and the guess is rejected with TimeExceededError
- a correct guess adds points_per_difficulty * difficulty to the score
- the session completes once qualification_threshold answers are correct
  or once every question is resolved (solved or out of attempts)
- completion happens at most once, via UPDATE ... WHERE is_completed = false

Functions take the AsyncSession as their first argument. complete_quest_session
only flushes; start_quest, submit_guess and reset_quest commit.
"""
import logging
import random
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update, delete, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cipherquest.config.settings import QuestRules, QUEST_RULES
from cipherquest.errors import (
    ErrorCode,
    validate_not_empty,
    NotFoundError,
    DisqualifiedError,
    AlreadyCompletedError,
    TimeExceededError,
)
from cipherquest.orm.base import utcnow
from cipherquest.orm.problem_statement import ProblemStatement
from cipherquest.orm.quest_session import QuestSession, QuestionAttempt
from cipherquest.orm.submission import Submission
from cipherquest.orm.team import Team
from cipherquest.services import attempt_tracker
from cipherquest.services.feedback_service import generate_cipher_feedback, answers_match
from cipherquest.services.notifier import Notifier, NotificationKind
from cipherquest.services.problem_assignment import resolve_problem_assignment
from cipherquest.services.question_sampler import draw_questions

logger = logging.getLogger(__name__)


# ============================================================================
# START
# ============================================================================

async def get_session_for_team(db: AsyncSession, team_id: int) -> Optional[QuestSession]:
    result = await db.execute(
        select(QuestSession).where(QuestSession.team_id == team_id)
    )
    return result.scalar_one_or_none()


async def start_quest(
    db: AsyncSession,
    team_id: int,
    *,
    rules: QuestRules = QUEST_RULES,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> QuestSession:
    """
    Start the quest for a team, or return its existing session.

    Raises:
        NotFoundError: team does not exist
        DisqualifiedError: team is disqualified
        NoContentAvailableError: fewer active questions than a quest needs
    """
    team = await db.get(Team, team_id)
    if not team:
        raise NotFoundError("Team", team_id, code=ErrorCode.TEAM_NOT_FOUND)

    if team.is_disqualified:
        raise DisqualifiedError()

    existing = await get_session_for_team(db, team_id)
    if existing:
        logger.info(f"Team {team_id} resumed quest session {existing.id}")
        return existing

    questions = await draw_questions(db, rules.questions_per_quest, rng)

    session = QuestSession(
        team_id=team_id,
        questions=[q.snapshot() for q in questions],
        started_at=now or utcnow(),
        quest_duration=rules.quest_duration_seconds,
        current_question_index=0,
        score=0,
        correct_answers=0,
        is_completed=False,
    )
    db.add(session)

    try:
        await db.commit()
    except IntegrityError:
        # Concurrent start for the same team won the unique team_id
        await db.rollback()
        existing = await get_session_for_team(db, team_id)
        if existing is None:
            raise
        logger.info(f"Team {team_id} start raced; returning session {existing.id}")
        return existing

    await db.refresh(session)
    logger.info(
        f"🔐 Quest started: team={team_id} session={session.id} "
        f"questions={[q['id'] for q in session.questions]}"
    )
    return session


# ============================================================================
# COMPLETION
# ============================================================================

async def complete_quest_session(
    db: AsyncSession,
    session_id: int,
    team_id: int,
    correct_answers: int,
    elapsed_seconds: float,
    *,
    rules: QuestRules = QUEST_RULES,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Complete a session and apply the qualification outcome.

    Shared by the timeout and threshold paths. The session row is flipped by a
    conditional UPDATE; if another caller already completed it, nothing else is
    written and the stored outcome is returned with performed=False.

    Returns:
        {"performed", "qualified", "correct_answers", "assigned_problem"}
    """
    now = now or utcnow()
    session = await db.get(QuestSession, session_id)
    if session is None:
        raise NotFoundError("Quest session", session_id, code=ErrorCode.SESSION_NOT_FOUND)

    qualified = correct_answers >= rules.qualification_threshold

    problem: Optional[ProblemStatement] = None
    if qualified:
        problem = await resolve_problem_assignment(db, session)

    result = await db.execute(
        update(QuestSession)
        .where(
            and_(
                QuestSession.id == session_id,
                QuestSession.is_completed.is_(False)
            )
        )
        .values(
            is_completed=True,
            completed_at=now,
            assigned_problem_id=problem.id if problem else None,
        )
        .execution_options(synchronize_session=False)
    )
    await db.refresh(session)

    if result.rowcount == 0:
        logger.info(f"Quest session {session_id} was already completed; skipping completion")
        stored_problem = None
        if session.assigned_problem_id:
            stored_problem = await db.get(ProblemStatement, session.assigned_problem_id)
        return {
            "performed": False,
            "qualified": session.correct_answers >= rules.qualification_threshold,
            "correct_answers": session.correct_answers,
            "assigned_problem": stored_problem,
        }

    team = await db.get(Team, team_id)
    if team:
        if qualified:
            team.current_stage = max(team.current_stage or 1, 2)
        team.is_disqualified = not qualified

    if qualified and problem:
        await _upsert_submission_stub(db, team_id, problem.id, round(elapsed_seconds))

    await db.flush()

    logger.info(
        f"🏁 Quest completed: team={team_id} session={session_id} "
        f"correct={correct_answers}/{len(session.questions or [])} elapsed={round(elapsed_seconds)}s "
        f"-> {'QUALIFIED' if qualified else 'DISQUALIFIED'}"
    )

    return {
        "performed": True,
        "qualified": qualified,
        "correct_answers": correct_answers,
        "assigned_problem": problem,
    }


async def _upsert_submission_stub(db: AsyncSession, team_id: int, problem_id: int, completion_seconds: int):
    """Create the team's submission row, or attach the problem to an existing one."""
    result = await db.execute(select(Submission).where(Submission.team_id == team_id))
    submission = result.scalar_one_or_none()

    if submission is None:
        db.add(Submission(
            team_id=team_id,
            problem_id=problem_id,
            quest_completion_time=completion_seconds,
            is_submitted=False,
        ))
        return

    if submission.is_submitted:
        # A project submitted before a reset stays bound to its problem
        return
    submission.problem_id = problem_id
    if submission.quest_completion_time is None:
        submission.quest_completion_time = completion_seconds


async def _notify_qualified(
    db: AsyncSession,
    notifier: Optional[Notifier],
    team_id: int,
    outcome: Dict[str, Any],
):
    if notifier is None or not outcome["performed"] or not outcome["qualified"]:
        return
    team = await db.get(Team, team_id)
    if team is None:
        return
    problem = outcome["assigned_problem"]
    await notifier.notify(
        NotificationKind.QUALIFICATION,
        team.lead_email,
        {"team_name": team.team_name, "problem_title": problem.title if problem else None},
    )


# ============================================================================
# GUESS
# ============================================================================

def _elapsed_seconds(session: QuestSession, now: datetime) -> float:
    return max(0.0, (now - session.started_at).total_seconds())


async def _resolved_question_count(db: AsyncSession, session: QuestSession) -> int:
    result = await db.execute(
        select(QuestionAttempt).where(QuestionAttempt.quest_session_id == session.id)
    )
    resolved = 0
    for attempt in result.scalars().all():
        question = session.question_by_id(attempt.question_id)
        if question and attempt_tracker.is_resolved(attempt, question["max_attempts"]):
            resolved += 1
    return resolved


async def submit_guess(
    db: AsyncSession,
    session_id: int,
    question_id: int,
    guess: str,
    team_id: int,
    *,
    rules: QuestRules = QUEST_RULES,
    notifier: Optional[Notifier] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Evaluate one guess and advance the session.

    Raises:
        NotFoundError: unknown session, session of another team, or a
            question that is not part of this session
        AlreadyCompletedError: session already completed
        TimeExceededError: time limit passed; the session has been completed
        AlreadySolvedError / AttemptsExhaustedError: question accepts no guesses
    """
    validate_not_empty(guess, "guess")
    now = now or utcnow()

    result = await db.execute(
        select(QuestSession)
        .where(QuestSession.id == session_id)
        .with_for_update()
    )
    session = result.scalar_one_or_none()

    if not session or session.team_id != team_id:
        raise NotFoundError("Quest session", session_id, code=ErrorCode.SESSION_NOT_FOUND)

    if session.is_completed:
        raise AlreadyCompletedError()

    elapsed = _elapsed_seconds(session, now)
    if elapsed > session.quest_duration:
        outcome = await complete_quest_session(
            db, session.id, team_id, session.correct_answers, elapsed, rules=rules, now=now
        )
        await db.commit()
        logger.info(f"⏰ Quest session {session.id} timed out after {round(elapsed)}s")
        await _notify_qualified(db, notifier, team_id, outcome)
        problem = outcome["assigned_problem"]
        raise TimeExceededError(round(elapsed), outcome["qualified"], problem.id if problem else None)

    question = session.question_by_id(question_id)
    if question is None:
        raise NotFoundError("Question", question_id, code=ErrorCode.QUESTION_NOT_FOUND)

    max_attempts = question["max_attempts"]
    guess = guess.strip()
    is_correct = answers_match(guess, question["correct_answer"])

    attempt = await attempt_tracker.record_guess(
        db, session.id, question_id, team_id, guess, is_correct, max_attempts
    )

    next_index = min(session.current_question_index + 1, rules.last_question_index)
    points = 0

    if is_correct:
        points = rules.points_per_difficulty * question["difficulty"]
        await db.execute(
            update(QuestSession)
            .where(
                and_(
                    QuestSession.id == session.id,
                    QuestSession.is_completed.is_(False)
                )
            )
            .values(
                score=QuestSession.score + points,
                correct_answers=QuestSession.correct_answers + 1,
                current_question_index=next_index,
            )
            .execution_options(synchronize_session=False)
        )
        await db.refresh(session)

        team = await db.get(Team, team_id)
        if team:
            team.quest_score = session.score
    elif attempt.attempt_count >= max_attempts:
        session.current_question_index = next_index

    await db.flush()

    completed = False
    outcome: Optional[Dict[str, Any]] = None
    if (
        session.correct_answers >= rules.qualification_threshold
        or await _resolved_question_count(db, session) >= len(session.questions)
    ):
        outcome = await complete_quest_session(
            db, session.id, team_id, session.correct_answers, elapsed, rules=rules, now=now
        )
        completed = True

    await db.commit()

    if outcome:
        await _notify_qualified(db, notifier, team_id, outcome)

    remaining_attempts = max(0, max_attempts - attempt.attempt_count)
    qualified = bool(outcome and outcome["qualified"])
    assigned_problem = outcome["assigned_problem"] if outcome else None

    if completed and qualified:
        message = "🎉 Congratulations! You qualified for the Build Phase!"
    elif completed:
        message = (
            f"Quest completed with {session.correct_answers} correct answers. "
            f"You needed {rules.qualification_threshold} to qualify."
        )
    elif is_correct:
        message = f"✅ Correct! +{points} points"
    elif remaining_attempts == 0:
        message = "❌ Out of attempts for this cipher. Moving on."
    else:
        message = f"❌ Incorrect. {remaining_attempts} attempts remaining."

    return {
        "is_correct": is_correct,
        "attempts": attempt.attempt_count,
        "max_attempts": max_attempts,
        "remaining_attempts": remaining_attempts,
        "feedback": generate_cipher_feedback(guess, question["correct_answer"]),
        "time_elapsed": int(elapsed),
        "time_remaining": max(0, int(session.quest_duration - elapsed)),
        "correct_answers": session.correct_answers,
        "total_questions": len(session.questions),
        "score": session.score,
        "quest_completed": completed,
        "qualified": qualified,
        "assigned_problem": assigned_problem.to_dict() if assigned_problem else None,
        "message": message,
    }


# ============================================================================
# RESET & LEADERBOARD
# ============================================================================

async def reset_quest(db: AsyncSession, team_id: int) -> Dict[str, Any]:
    """
    Remove a team's quest session and attempts and put the team back at stage 1.

    An unsubmitted submission stub is removed too; a submitted project is kept.
    """
    team = await db.get(Team, team_id)
    if not team:
        raise NotFoundError("Team", team_id, code=ErrorCode.TEAM_NOT_FOUND)

    session = await get_session_for_team(db, team_id)
    if session:
        await db.execute(
            delete(QuestionAttempt).where(QuestionAttempt.quest_session_id == session.id)
        )
        await db.execute(
            delete(QuestSession).where(QuestSession.id == session.id)
        )

    await db.execute(
        delete(Submission).where(
            and_(
                Submission.team_id == team_id,
                Submission.is_submitted.is_(False)
            )
        )
    )

    team.current_stage = 1
    team.is_disqualified = False
    team.quest_score = 0

    await db.commit()
    logger.info(f"🔄 Quest reset for team {team_id}")

    return {"success": True, "message": "Quest reset successfully"}


async def get_cipher_leaderboard(
    db: AsyncSession,
    limit: int = 10,
    rules: QuestRules = QUEST_RULES,
) -> List[Dict[str, Any]]:
    """Completed sessions ranked by score, ties broken by earlier completion."""
    result = await db.execute(
        select(QuestSession, Team.team_name)
        .join(Team, Team.id == QuestSession.team_id)
        .where(QuestSession.is_completed.is_(True))
        .order_by(QuestSession.score.desc(), QuestSession.completed_at.asc(), QuestSession.id.asc())
        .limit(limit)
    )

    leaderboard = []
    for rank, (session, team_name) in enumerate(result.all(), start=1):
        total = len(session.questions or []) or rules.questions_per_quest
        leaderboard.append({
            "rank": rank,
            "team_name": team_name,
            "score": session.score,
            "correct_answers": session.correct_answers,
            "accuracy": round(session.correct_answers / total * 100),
            "completed_at": session.completed_at.isoformat() if session.completed_at else None,
        })
    return leaderboard

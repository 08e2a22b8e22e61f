"""
cipherquest/services/submission_service.py
Build-phase problem lookup and project submission.

A team can submit only once the quest assigned it a problem. The stub row
created at quest completion is filled in; quest_completion_time is never
overwritten once set.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cipherquest.errors import ErrorCode, BadRequestError, NotFoundError
from cipherquest.orm.base import utcnow
from cipherquest.orm.problem_statement import ProblemStatement
from cipherquest.orm.quest_session import QuestSession
from cipherquest.orm.submission import Submission
from cipherquest.orm.team import Team
from cipherquest.services.notifier import Notifier, NotificationKind

logger = logging.getLogger(__name__)

DEFAULT_SUBMISSION_TITLE = "CipherQuest Submission"
DEFAULT_PROJECT_TITLE = "CipherQuest Project"
DEFAULT_GUIDELINES = "Submit your PPT and prototype link as per the problem requirements."


def deadline_info(deadline: Optional[datetime], now: Optional[datetime] = None) -> Dict[str, Any]:
    if deadline is None:
        return {"deadline": None, "time_remaining_ms": 0, "is_overdue": False}
    remaining_ms = int((deadline - (now or utcnow())).total_seconds() * 1000)
    return {
        "deadline": deadline.isoformat(),
        "time_remaining_ms": max(0, remaining_ms),
        "is_overdue": remaining_ms < 0,
    }


async def _session_for_team(db: AsyncSession, team_id: int) -> Optional[QuestSession]:
    result = await db.execute(select(QuestSession).where(QuestSession.team_id == team_id))
    return result.scalar_one_or_none()


async def get_submission(db: AsyncSession, team_id: int) -> Optional[Submission]:
    result = await db.execute(select(Submission).where(Submission.team_id == team_id))
    return result.scalar_one_or_none()


async def get_assigned_problem(
    db: AsyncSession,
    team_id: int,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    session = await _session_for_team(db, team_id)
    if not session or not session.assigned_problem_id:
        raise NotFoundError("Assigned problem statement", code=ErrorCode.PROBLEM_NOT_FOUND)

    problem = await db.get(ProblemStatement, session.assigned_problem_id)
    if not problem:
        raise NotFoundError("Problem statement", session.assigned_problem_id, code=ErrorCode.PROBLEM_NOT_FOUND)

    return {
        "problem": problem.to_dict(),
        "submission_info": deadline_info(problem.submission_deadline, now),
    }


async def submit_project(
    db: AsyncSession,
    team_id: int,
    *,
    ppt_url: Optional[str] = None,
    prototype_url: Optional[str] = None,
    github_url: Optional[str] = None,
    description: Optional[str] = None,
    notifier: Optional[Notifier] = None,
    now: Optional[datetime] = None,
) -> Submission:
    """
    Record a team's project submission and move the team to stage 3.

    Raises:
        BadRequestError: team has no assigned problem (did not qualify)
    """
    if team_id is None:
        raise BadRequestError("Team ID is required", code=ErrorCode.MISSING_FIELD, details={"field": "team_id"})

    session = await _session_for_team(db, team_id)
    if not session or not session.assigned_problem_id:
        raise BadRequestError(
            "Team not qualified for submission. Complete CipherQuest with 3+ correct answers.",
            code=ErrorCode.NOT_QUALIFIED,
        )

    now = now or utcnow()
    submission = await get_submission(db, team_id)

    if submission is None:
        completion_time = None
        if session.completed_at:
            completion_time = round((session.completed_at - session.started_at).total_seconds())
        submission = Submission(
            team_id=team_id,
            problem_id=session.assigned_problem_id,
            quest_completion_time=completion_time,
        )
        db.add(submission)

    submission.ppt_url = ppt_url
    submission.prototype_url = prototype_url
    submission.github_url = github_url
    submission.description = description
    submission.submission_time = now
    submission.is_submitted = True

    team = await db.get(Team, team_id)
    if team:
        team.current_stage = 3

    await db.commit()
    await db.refresh(submission)

    logger.info(f"📦 Project submitted: team={team_id} submission={submission.id}")

    if notifier and team:
        await notifier.notify(
            NotificationKind.SUBMISSION_CONFIRMATION,
            team.lead_email,
            {
                "team_name": team.team_name,
                "ppt_url": ppt_url,
                "prototype_url": prototype_url,
                "github_url": github_url,
            },
        )
    return submission


async def get_submission_status(db: AsyncSession, team_id: int) -> Dict[str, Any]:
    submission = await get_submission(db, team_id)
    return {
        "submission": submission.to_dict() if submission else None,
        "has_submitted": bool(submission and submission.is_submitted),
    }


async def _latest_active_problem(db: AsyncSession) -> Optional[ProblemStatement]:
    result = await db.execute(
        select(ProblemStatement)
        .where(ProblemStatement.is_active.is_(True))
        .order_by(ProblemStatement.created_at.desc(), ProblemStatement.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_deadline(db: AsyncSession, now: Optional[datetime] = None) -> Dict[str, Any]:
    problem = await _latest_active_problem(db)
    info = deadline_info(problem.submission_deadline if problem else None, now)
    return {
        "deadline": info["deadline"],
        "time_remaining_ms": info["time_remaining_ms"],
        "title": problem.title if problem else DEFAULT_SUBMISSION_TITLE,
    }


async def get_guidelines(db: AsyncSession) -> Dict[str, Any]:
    problem = await _latest_active_problem(db)
    return {
        "title": problem.title if problem else DEFAULT_PROJECT_TITLE,
        "guidelines": (problem.guidelines if problem else None) or DEFAULT_GUIDELINES,
    }

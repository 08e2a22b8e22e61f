"""
cipherquest/services/team_service.py
Team dashboard, progress and profile.
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cipherquest.config.settings import QuestRules, QUEST_RULES
from cipherquest.errors import ErrorCode, BadRequestError, NotFoundError
from cipherquest.orm.problem_statement import ProblemStatement
from cipherquest.orm.quest_session import QuestSession
from cipherquest.orm.submission import Submission, JudgingScore
from cipherquest.orm.team import Team

logger = logging.getLogger(__name__)


def calculate_progress(current_stage: int, submission_made: bool, judged: bool) -> int:
    """Overall progress percentage shown on the dashboard."""
    if judged:
        return 100
    if submission_made:
        return 66
    if current_stage >= 2:
        return 33
    return 0


async def _get_team(db: AsyncSession, team_id: int) -> Team:
    team = await db.get(Team, team_id)
    if not team:
        raise NotFoundError("Team", team_id, code=ErrorCode.TEAM_NOT_FOUND)
    return team


async def _first(db: AsyncSession, stmt):
    result = await db.execute(stmt)
    return result.scalars().first()


async def get_dashboard(db: AsyncSession, team_id: int, rules: QuestRules = QUEST_RULES) -> Dict[str, Any]:
    team = await _get_team(db, team_id)

    session: Optional[QuestSession] = await _first(
        db, select(QuestSession).where(QuestSession.team_id == team_id)
    )
    submission: Optional[Submission] = await _first(
        db, select(Submission).where(Submission.team_id == team_id)
    )
    score: Optional[JudgingScore] = await _first(
        db,
        select(JudgingScore)
        .where(JudgingScore.team_id == team_id)
        .order_by(JudgingScore.created_at.desc(), JudgingScore.id.desc())
    )

    assigned_problem = None
    if session and session.assigned_problem_id:
        problem = await db.get(ProblemStatement, session.assigned_problem_id)
        assigned_problem = problem.to_dict() if problem else None

    correct = session.correct_answers if session else 0
    submitted = bool(submission and submission.is_submitted)

    return {
        "team_info": team.to_dict(),
        "stage_status": {
            "stage1": {
                "name": "Cipher Quest",
                "completed": bool(session and session.is_completed),
                "score": session.score if session else 0,
                "correct_answers": correct,
                "qualified": correct >= rules.qualification_threshold,
                "time_taken": (submission.quest_completion_time if submission else None) or 0,
            },
            "stage2": {
                "name": "Build & Submit",
                "completed": submitted,
                "submission": submission.to_dict() if submission else None,
                "assigned_problem": assigned_problem,
            },
            "stage3": {
                "name": "Finals & Leaderboard",
                "completed": score is not None,
                "scores": score.to_dict() if score else None,
            },
        },
        "progress": {
            "cipher_score": correct,
            "submission_made": submitted,
            "judged": score is not None,
            "final_score": score.total_score if score else 0,
            "overall_progress": calculate_progress(team.current_stage, submitted, score is not None),
        },
    }


async def get_progress(db: AsyncSession, team_id: int, rules: QuestRules = QUEST_RULES) -> Dict[str, Any]:
    team = await _get_team(db, team_id)

    session = await _first(db, select(QuestSession).where(QuestSession.team_id == team_id))
    submission = await _first(db, select(Submission).where(Submission.team_id == team_id))
    correct = session.correct_answers if session else 0

    return {
        "current_stage": team.current_stage,
        "is_disqualified": team.is_disqualified,
        "quest_score": team.quest_score,
        "cipher_progress": {
            "completed": bool(session and session.is_completed),
            "correct_answers": correct,
            "qualified": correct >= rules.qualification_threshold,
        },
        "submission_made": bool(submission and submission.is_submitted),
        "can_proceed": not team.is_disqualified and team.current_stage > 1,
    }


async def update_profile(db: AsyncSession, team_id: int, team_members: List[str]) -> Team:
    if team_members is None or not isinstance(team_members, list):
        raise BadRequestError("Team members array is required", details={"field": "team_members"})

    team = await _get_team(db, team_id)
    team.team_members = [m.strip() for m in team_members if m and m.strip()]
    await db.commit()
    await db.refresh(team)

    logger.info(f"Team {team_id} profile updated ({len(team.team_members)} members)")
    return team

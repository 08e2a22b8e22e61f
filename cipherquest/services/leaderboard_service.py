"""
Leaderboard Service

Judging scores and the final hackathon leaderboard.

Scoring:
- innovation, implementation and presentation are judged on 0..100
- the quest component is the team's quest_score capped at 100
- total = mean of the four components, rounded half up
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from cipherquest.config.settings import QuestRules, QUEST_RULES
from cipherquest.errors import ErrorCode, BadRequestError, NotFoundError
from cipherquest.orm.quest_session import QuestSession
from cipherquest.orm.submission import Submission, JudgingScore
from cipherquest.orm.team import Team

logger = logging.getLogger(__name__)

MIN_SCORE = 0
MAX_SCORE = 100

MEDALS = [
    ("gold", "#FFD700"),
    ("silver", "#C0C0C0"),
    ("bronze", "#CD7F32"),
]


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compute_total_score(innovation: int, implementation: int, presentation: int, quest_score: int) -> int:
    quest_component = min(quest_score or 0, MAX_SCORE)
    total = Decimal(innovation + implementation + presentation + quest_component) / Decimal(4)
    return _round_half_up(total)


def validate_judging_scores(**scores: Optional[int]):
    for field, value in scores.items():
        if value is None:
            raise BadRequestError(f"{field} is required", code=ErrorCode.MISSING_FIELD, details={"field": field})
        if value < MIN_SCORE or value > MAX_SCORE:
            raise BadRequestError(
                f"Scores must be between {MIN_SCORE} and {MAX_SCORE}",
                code=ErrorCode.SCORE_OUT_OF_RANGE,
                details={"field": field, "value": value}
            )


async def record_judging_score(
    db: AsyncSession,
    team_id: int,
    innovation_score: int,
    implementation_score: int,
    presentation_score: int,
    submission_id: Optional[int] = None,
    judge_notes: Optional[str] = None,
    judged_by: Optional[str] = None,
) -> Dict[str, Any]:
    validate_judging_scores(
        innovation_score=innovation_score,
        implementation_score=implementation_score,
        presentation_score=presentation_score,
    )

    team = await db.get(Team, team_id)
    if not team:
        raise NotFoundError("Team", team_id, code=ErrorCode.TEAM_NOT_FOUND)

    if submission_id is None:
        result = await db.execute(select(Submission.id).where(Submission.team_id == team_id))
        submission_id = result.scalar_one_or_none()

    quest_component = min(team.quest_score or 0, MAX_SCORE)
    total = compute_total_score(innovation_score, implementation_score, presentation_score, quest_component)

    score = JudgingScore(
        team_id=team_id,
        submission_id=submission_id,
        innovation_score=innovation_score,
        implementation_score=implementation_score,
        presentation_score=presentation_score,
        quest_score=quest_component,
        total_score=total,
        judge_notes=judge_notes,
        judged_by=judged_by,
    )
    db.add(score)
    await db.commit()
    await db.refresh(score)

    logger.info(f"⚖️ Judging score recorded: team={team_id} total={total} by={judged_by}")

    return {
        "score": score.to_dict(),
        "breakdown": {
            "innovation": innovation_score,
            "implementation": implementation_score,
            "presentation": presentation_score,
            "quest": quest_component,
            "total": total,
        },
    }


async def _ranked_scores(db: AsyncSession, limit: Optional[int] = None):
    stmt = (
        select(JudgingScore, Team, Submission)
        .join(Team, Team.id == JudgingScore.team_id)
        .outerjoin(Submission, Submission.id == JudgingScore.submission_id)
        .order_by(JudgingScore.total_score.desc(), JudgingScore.id.asc())
    )
    if limit:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    return result.all()


async def get_leaderboard(db: AsyncSession) -> List[Dict[str, Any]]:
    leaderboard = []
    for rank, (score, team, submission) in enumerate(await _ranked_scores(db), start=1):
        leaderboard.append({
            "rank": rank,
            "team_name": team.team_name,
            "innovation_score": score.innovation_score,
            "implementation_score": score.implementation_score,
            "presentation_score": score.presentation_score,
            "quest_score": team.quest_score,
            "total_score": score.total_score,
            "quest_time": submission.quest_completion_time if submission else None,
            "description": submission.description if submission else None,
            "judge_notes": score.judge_notes,
        })
    return leaderboard


async def get_top_teams(db: AsyncSession) -> List[Dict[str, Any]]:
    top = []
    rows = await _ranked_scores(db, limit=len(MEDALS))
    for position, (score, team, submission) in enumerate(rows, start=1):
        medal, color = MEDALS[position - 1]
        top.append({
            "position": position,
            "team_name": team.team_name,
            "total_score": score.total_score,
            "quest_score": team.quest_score,
            "quest_time": submission.quest_completion_time if submission else None,
            "medal": medal,
            "color": color,
        })
    return top


async def get_stats(db: AsyncSession, rules: QuestRules = QUEST_RULES) -> Dict[str, Any]:
    total_teams = (await db.execute(select(func.count()).select_from(Team))).scalar() or 0

    qualified_teams = (await db.execute(
        select(func.count())
        .select_from(QuestSession)
        .where(QuestSession.correct_answers >= rules.qualification_threshold)
    )).scalar() or 0

    submitted_teams = (await db.execute(
        select(func.count())
        .select_from(Submission)
        .where(Submission.is_submitted.is_(True))
    )).scalar() or 0

    average = (await db.execute(select(func.avg(QuestSession.score)))).scalar()

    return {
        "total_teams": total_teams,
        "qualified_teams": qualified_teams,
        "submitted_teams": submitted_teams,
        "average_quest_score": _round_half_up(Decimal(str(average))) if average is not None else 0,
        "qualification_rate": (
            _round_half_up(Decimal(qualified_teams * 100) / Decimal(total_teams)) if total_teams else 0
        ),
    }

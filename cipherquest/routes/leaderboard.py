"""
cipherquest/routes/leaderboard.py
Judging scores, final leaderboard, podium and event stats.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cipherquest.config.settings import Settings
from cipherquest.database import get_db
from cipherquest.dependencies import get_settings, require_judge
from cipherquest.orm.base import utcnow
from cipherquest.schemas.leaderboard import JudgingScoreCreate
from cipherquest.services import leaderboard_service

router = APIRouter(prefix="/leaderboard", tags=["Leaderboard"])


@router.get("")
async def get_leaderboard(db: AsyncSession = Depends(get_db)):
    return {
        "leaderboard": await leaderboard_service.get_leaderboard(db),
        "event": "CipherQuest Hackathon",
        "last_updated": utcnow().isoformat(),
    }


@router.post("/judge", dependencies=[Depends(require_judge)])
async def record_judging_score(payload: JudgingScoreCreate, db: AsyncSession = Depends(get_db)):
    result = await leaderboard_service.record_judging_score(
        db,
        payload.team_id,
        payload.innovation_score,
        payload.implementation_score,
        payload.presentation_score,
        submission_id=payload.submission_id,
        judge_notes=payload.judge_notes,
        judged_by=payload.judged_by,
    )
    return {"message": "CipherQuest scores added successfully", **result}


@router.get("/top-teams")
async def get_top_teams(db: AsyncSession = Depends(get_db)):
    return {"top_teams": await leaderboard_service.get_top_teams(db), "event": "CipherQuest Finals"}


@router.get("/stats")
async def get_stats(db: AsyncSession = Depends(get_db), settings: Settings = Depends(get_settings)):
    return {"stats": await leaderboard_service.get_stats(db, rules=settings.quest)}

"""
cipherquest/routes/quest.py
CipherQuest gate: start, guess, status polling, reset and quest leaderboard.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cipherquest.config.settings import Settings
from cipherquest.database import get_db
from cipherquest.dependencies import get_settings, get_notifier, get_current_team, ensure_same_team
from cipherquest.orm.team import Team
from cipherquest.schemas.quest import (
    StartQuestRequest,
    StartQuestResponse,
    GuessRequest,
    GuessResult,
    ResetQuestRequest,
    LeaderboardEntry,
)
from cipherquest.services import quest_engine, status_projector
from cipherquest.services.notifier import Notifier

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cipherquest", tags=["CipherQuest"])


@router.post("/start", response_model=StartQuestResponse)
async def start_quest(
    payload: StartQuestRequest,
    current_team: Team = Depends(get_current_team),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    ensure_same_team(current_team, payload.team_id)
    session = await quest_engine.start_quest(db, payload.team_id, rules=settings.quest)
    status = status_projector.project_status(session, rules=settings.quest)
    return {
        "session_id": session.id,
        "started_at": status["started_at"],
        "quest_duration": session.quest_duration,
        "time_remaining": status["time_remaining"],
        "current_question_index": session.current_question_index,
        "total_questions": status["progress"]["total"],
        "current_question": status["current_question"],
        "is_completed": session.is_completed,
        "message": "CipherQuest started! Solve 3 of 5 ciphers within 30 minutes to qualify.",
    }


@router.post("/guess", response_model=GuessResult)
async def submit_guess(
    payload: GuessRequest,
    current_team: Team = Depends(get_current_team),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    notifier: Notifier = Depends(get_notifier),
):
    ensure_same_team(current_team, payload.team_id)
    return await quest_engine.submit_guess(
        db,
        payload.session_id,
        payload.question_id,
        payload.guess,
        payload.team_id,
        rules=settings.quest,
        notifier=notifier,
    )


@router.get("/status/{team_id}")
async def get_status(
    team_id: int,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return await status_projector.get_status(db, team_id, rules=settings.quest)


@router.get("/current-question/{session_id}")
async def get_current_question(session_id: int, db: AsyncSession = Depends(get_db)):
    return await status_projector.get_current_question(db, session_id)


@router.get("/questions/{session_id}")
async def list_questions(session_id: int, db: AsyncSession = Depends(get_db)):
    return {"questions": await status_projector.list_questions(db, session_id)}


@router.post("/reset")
async def reset_quest(
    payload: ResetQuestRequest,
    current_team: Team = Depends(get_current_team),
    db: AsyncSession = Depends(get_db),
):
    ensure_same_team(current_team, payload.team_id)
    return await quest_engine.reset_quest(db, payload.team_id)


@router.get("/leaderboard", response_model=List[LeaderboardEntry])
async def get_leaderboard(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return await quest_engine.get_cipher_leaderboard(db, rules=settings.quest)

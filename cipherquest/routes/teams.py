"""
cipherquest/routes/teams.py
Team dashboard, progress and profile.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cipherquest.config.settings import Settings
from cipherquest.database import get_db
from cipherquest.dependencies import get_settings, get_current_team, ensure_same_team
from cipherquest.orm.team import Team
from cipherquest.schemas.teams import UpdateProfileRequest
from cipherquest.services import team_service

router = APIRouter(prefix="/teams", tags=["Teams"])


@router.get("/dashboard/{team_id}")
async def get_dashboard(
    team_id: int,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return {"dashboard": await team_service.get_dashboard(db, team_id, rules=settings.quest)}


@router.get("/progress/{team_id}")
async def get_progress(
    team_id: int,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return await team_service.get_progress(db, team_id, rules=settings.quest)


@router.put("/profile/{team_id}")
async def update_profile(
    team_id: int,
    payload: UpdateProfileRequest,
    current_team: Team = Depends(get_current_team),
    db: AsyncSession = Depends(get_db),
):
    ensure_same_team(current_team, team_id)
    team = await team_service.update_profile(db, team_id, payload.team_members)
    return {"message": "CipherQuest profile updated successfully", "team": team.to_dict()}

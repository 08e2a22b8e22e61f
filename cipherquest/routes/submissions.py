"""
cipherquest/routes/submissions.py
Build-phase problem statement and project submission.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cipherquest.database import get_db
from cipherquest.dependencies import get_notifier, get_current_team, ensure_same_team
from cipherquest.orm.team import Team
from cipherquest.schemas.submissions import SubmitProjectRequest
from cipherquest.services import submission_service
from cipherquest.services.notifier import Notifier

router = APIRouter(prefix="/submissions", tags=["Submissions"])


@router.get("/problem/{team_id}")
async def get_problem(team_id: int, db: AsyncSession = Depends(get_db)):
    return await submission_service.get_assigned_problem(db, team_id)


@router.post("/submit")
async def submit_project(
    payload: SubmitProjectRequest,
    current_team: Team = Depends(get_current_team),
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    ensure_same_team(current_team, payload.team_id)
    submission = await submission_service.submit_project(
        db,
        payload.team_id,
        ppt_url=payload.ppt_url,
        prototype_url=payload.prototype_url,
        github_url=payload.github_url,
        description=payload.description,
        notifier=notifier,
    )
    return {
        "message": "CipherQuest submission successful! Your project is now under review.",
        "submission": submission.to_dict(),
        "next_steps": "Wait for judging results on the leaderboard.",
    }


@router.get("/status/{team_id}")
async def get_submission_status(team_id: int, db: AsyncSession = Depends(get_db)):
    return await submission_service.get_submission_status(db, team_id)


@router.get("/deadline")
async def get_deadline(db: AsyncSession = Depends(get_db)):
    return await submission_service.get_deadline(db)


@router.get("/guidelines")
async def get_guidelines(db: AsyncSession = Depends(get_db)):
    return await submission_service.get_guidelines(db)

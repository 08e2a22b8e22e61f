"""
Problem Assignment Resolver

Chooses a build-phase problem statement for a qualified team, preferring
problems whose domain matches the domains of ciphers the team solved.

Resolution order:
1. first active problem (lowest id) whose domain is one of the solved domains
2. otherwise the first active problem of any domain
3. otherwise None; the team stays qualified with no problem assigned
"""
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cipherquest.orm.problem_statement import ProblemStatement
from cipherquest.orm.quest_session import QuestSession, QuestionAttempt

logger = logging.getLogger(__name__)


async def solved_domains(db: AsyncSession, session: QuestSession) -> List[str]:
    """Problem domains of the correctly solved questions, in solve order."""
    result = await db.execute(
        select(QuestionAttempt.question_id)
        .where(
            QuestionAttempt.quest_session_id == session.id,
            QuestionAttempt.is_correct.is_(True)
        )
        .order_by(QuestionAttempt.completed_at, QuestionAttempt.id)
    )
    domains = []
    for question_id in result.scalars().all():
        question = session.question_by_id(question_id)
        if question and question.get("problem_domain") and question["problem_domain"] not in domains:
            domains.append(question["problem_domain"])
    return domains


async def resolve_problem_assignment(
    db: AsyncSession,
    session: QuestSession
) -> Optional[ProblemStatement]:
    domains = await solved_domains(db, session)

    if domains:
        result = await db.execute(
            select(ProblemStatement)
            .where(
                ProblemStatement.is_active.is_(True),
                ProblemStatement.domain.in_(domains)
            )
            .order_by(ProblemStatement.id)
            .limit(1)
        )
        problem = result.scalar_one_or_none()
        if problem:
            logger.info(f"🎯 Assigned problem to team {session.team_id}: {problem.title} (domain {problem.domain})")
            return problem

    result = await db.execute(
        select(ProblemStatement)
        .where(ProblemStatement.is_active.is_(True))
        .order_by(ProblemStatement.id)
        .limit(1)
    )
    problem = result.scalar_one_or_none()
    if problem:
        logger.info(f"🎯 Assigned fallback problem to team {session.team_id}: {problem.title}")
        return problem

    logger.warning(
        f"Team {session.team_id} qualified but no active problem statement exists - "
        f"session {session.id} completes without an assignment"
    )
    return None

"""
Question draw for new quest sessions.

Draws a uniformly random subset of the active question bank without
replacement. The random source is injectable so tests can seed it; by
default the OS CSPRNG is used.
"""
import random
import secrets
from typing import List, Optional, Sequence, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cipherquest.errors import NoContentAvailableError
from cipherquest.orm.cipher_question import CipherQuestion

T = TypeVar("T")

_system_random = secrets.SystemRandom()


def sample_without_replacement(pool: Sequence[T], k: int, rng: Optional[random.Random] = None) -> List[T]:
    """Uniform k-subset of pool, in random order. Never returns fewer than k."""
    if len(pool) < k:
        raise NoContentAvailableError(
            f"Not enough cipher questions available: need {k}, found {len(pool)}",
            details={"required": k, "available": len(pool)}
        )
    return (rng or _system_random).sample(list(pool), k)


async def draw_questions(
    db: AsyncSession,
    count: int,
    rng: Optional[random.Random] = None
) -> List[CipherQuestion]:
    """Draw `count` distinct active questions."""
    result = await db.execute(
        select(CipherQuestion)
        .where(CipherQuestion.is_active.is_(True))
        .order_by(CipherQuestion.id)
    )
    pool = result.scalars().all()
    return sample_without_replacement(pool, count, rng)

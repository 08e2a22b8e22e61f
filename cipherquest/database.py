"""
cipherquest/database.py
Async engine, session factory and startup seeding.

The engine and session factory are built once by create_app() and stored on
app.state; request handlers receive sessions through the get_db dependency.
"""
import logging
from datetime import timedelta
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from cipherquest.orm.base import Base, utcnow
import cipherquest.orm  # registers all models on Base.metadata

logger = logging.getLogger(__name__)


def build_engine(database_url: str) -> AsyncEngine:
    """
    Create the async engine.

    SQLite has different pool needs than PostgreSQL: an in-memory database
    must share one connection or every checkout sees an empty schema.
    """
    if "sqlite" in database_url.lower():
        if ":memory:" in database_url:
            return create_async_engine(
                database_url,
                echo=False,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
        return create_async_engine(
            database_url,
            echo=False,
            pool_pre_ping=True,
            connect_args={"timeout": 30.0},  # SQLite busy timeout in seconds
        )

    return create_async_engine(
        database_url,
        echo=False,
        pool_pre_ping=True,
        pool_size=20,
        max_overflow=30,
        pool_timeout=30,
        pool_recycle=3600,
    )


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database session"""
    session_factory = request.app.state.sessionmaker
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db(engine: AsyncEngine):
    """Create all tables that do not exist yet."""
    logger.info(f"Initializing database ({engine.url.get_backend_name()})...")
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("✓ Database initialization complete")
    except Exception as e:
        logger.error(f"Database initialization failed: {str(e)}")
        raise


async def close_db(engine: AsyncEngine):
    """Close database connection"""
    await engine.dispose()
    logger.info("Database connection closed")


DEMO_QUESTIONS = [
    {"hint": "Shift each letter back by three: FLSKHU", "category": "Classical", "problem_domain": "security",
     "cipher_type": "caesar", "difficulty": 1, "correct_answer": "cipher", "max_attempts": 6},
    {"hint": "Read it backwards: ESIOP", "category": "Wordplay", "problem_domain": "web",
     "cipher_type": "reverse", "difficulty": 1, "correct_answer": "poise", "max_attempts": 6},
    {"hint": "Atbash: XOLFW", "category": "Classical", "problem_domain": "fintech",
     "cipher_type": "atbash", "difficulty": 2, "correct_answer": "cloud", "max_attempts": 5},
    {"hint": "ROT13: QNGN", "category": "Classical", "problem_domain": "ai",
     "cipher_type": "rot13", "difficulty": 2, "correct_answer": "data", "max_attempts": 5},
    {"hint": "Base64: bG9naWM=", "category": "Encoding", "problem_domain": "web",
     "cipher_type": "base64", "difficulty": 2, "correct_answer": "logic", "max_attempts": 5},
    {"hint": "Morse: -- . .-. --. .", "category": "Encoding", "problem_domain": "health",
     "cipher_type": "morse", "difficulty": 3, "correct_answer": "merge", "max_attempts": 4},
    {"hint": "Vigenere with key KEY: ZVMYJ", "category": "Polyalphabetic", "problem_domain": "security",
     "cipher_type": "vigenere", "difficulty": 3, "correct_answer": "proof", "max_attempts": 4},
]

DEMO_PROBLEMS = [
    {"domain": "security", "title": "Zero-Trust Campus Access",
     "description": "Design an access system for shared campus labs without static passwords.",
     "guidelines": "Submit a PPT (max 10 slides) and a working prototype link."},
    {"domain": "web", "title": "Accessible Event Discovery",
     "description": "Build an event discovery portal usable with screen readers and keyboards only.",
     "guidelines": "Submit a PPT (max 10 slides), a prototype link and the source repository."},
    {"domain": "ai", "title": "Lecture Notes Summarizer",
     "description": "Summarize recorded lectures into structured study notes.",
     "guidelines": "Submit a PPT and a demo video or prototype link."},
]


async def seed_reference_data(db: AsyncSession):
    """
    Seed a demo question bank and problem statements if none exist.
    Called during startup after DB initialization.
    """
    from cipherquest.orm import CipherQuestion, ProblemStatement

    try:
        question_count = (await db.execute(select(func.count()).select_from(CipherQuestion))).scalar()
        if question_count == 0:
            logger.info("No cipher questions found - seeding demo question bank")
            db.add_all([CipherQuestion(**data) for data in DEMO_QUESTIONS])
        else:
            logger.info("✓ Cipher questions already exist (%d) - skipping seed", question_count)

        problem_count = (await db.execute(select(func.count()).select_from(ProblemStatement))).scalar()
        if problem_count == 0:
            logger.info("No problem statements found - seeding demo problems")
            deadline = utcnow() + timedelta(days=2)
            db.add_all([ProblemStatement(submission_deadline=deadline, **data) for data in DEMO_PROBLEMS])

        await db.commit()
    except Exception as e:
        logger.error(f"Failed to seed reference data: {str(e)}")
        await db.rollback()
        raise

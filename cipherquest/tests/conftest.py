"""
Shared fixtures: an in-memory database per test, factories for teams,
questions and problem statements, and an API client bound to the same
database.
"""
from datetime import datetime, timedelta
from typing import AsyncGenerator, Dict, List, Optional

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession

from cipherquest.config.settings import Settings
from cipherquest.database import build_engine, build_sessionmaker
from cipherquest.main import create_app
from cipherquest.orm import Base, Team, CipherQuestion, ProblemStatement
from cipherquest.services.auth_service import PasswordHasher
from cipherquest.services.notifier import SimulatedNotifier

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# bcrypt is slow and version-sensitive; tests hash with pbkdf2
TEST_HASH_SCHEME = "pbkdf2_sha256"

T0 = datetime(2026, 3, 14, 9, 0, 0)

DEFAULT_QUESTIONS = [
    {"correct_answer": "alpha", "problem_domain": "security", "difficulty": 1},
    {"correct_answer": "bravo", "problem_domain": "web", "difficulty": 1},
    {"correct_answer": "charlie", "problem_domain": "ai", "difficulty": 2},
    {"correct_answer": "delta", "problem_domain": "security", "difficulty": 2},
    {"correct_answer": "echo", "problem_domain": "web", "difficulty": 3},
    {"correct_answer": "foxtrot", "problem_domain": "ai", "difficulty": 3},
]


@pytest_asyncio.fixture
async def engine():
    engine = build_engine(TEST_DATABASE_URL)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return build_sessionmaker(engine)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(TEST_HASH_SCHEME)


@pytest.fixture
def notifier() -> SimulatedNotifier:
    return SimulatedNotifier(frontend_url="http://test-frontend")


@pytest.fixture
def make_team(hasher):
    counter = {"n": 0}

    async def _make_team(
        db: AsyncSession,
        team_name: Optional[str] = None,
        lead_email: Optional[str] = None,
        password: str = "secret123",
        email_verified: bool = True,
        **fields,
    ) -> Team:
        counter["n"] += 1
        team = Team(
            team_name=team_name or f"Team {counter['n']}",
            lead_email=lead_email or f"lead{counter['n']}@example.com",
            password_hash=await hasher.hash(password),
            team_members=["Ada", "Linus"],
            email_verified=email_verified,
            **fields,
        )
        db.add(team)
        await db.commit()
        await db.refresh(team)
        return team

    return _make_team


@pytest.fixture
def make_questions():
    async def _make_questions(
        db: AsyncSession,
        specs: Optional[List[Dict]] = None,
        max_attempts: int = 3,
    ) -> List[CipherQuestion]:
        questions = []
        for i, spec in enumerate(specs or DEFAULT_QUESTIONS):
            data = {
                "hint": f"Hint #{i + 1}",
                "category": "Classical",
                "problem_domain": "security",
                "cipher_type": "caesar",
                "difficulty": 1,
                "max_attempts": max_attempts,
                "is_active": True,
            }
            data.update(spec)
            questions.append(CipherQuestion(**data))
        db.add_all(questions)
        await db.commit()
        return questions

    return _make_questions


@pytest.fixture
def make_problem():
    async def _make_problem(
        db: AsyncSession,
        domain: str,
        title: Optional[str] = None,
        is_active: bool = True,
        deadline: Optional[datetime] = None,
        guidelines: Optional[str] = None,
    ) -> ProblemStatement:
        problem = ProblemStatement(
            domain=domain,
            title=title or f"{domain.title()} Challenge",
            description=f"Build something for {domain}",
            guidelines=guidelines,
            submission_deadline=deadline or (T0 + timedelta(days=2)),
            is_active=is_active,
        )
        db.add(problem)
        await db.commit()
        await db.refresh(problem)
        return problem

    return _make_problem


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        database_url=TEST_DATABASE_URL,
        environment="development",
        jwt_secret_key="test-secret",
        password_hash_scheme=TEST_HASH_SCHEME,
        rate_limit_enabled=False,
        seed_demo_data=False,
        judge_token="judge-secret",
    )


@pytest_asyncio.fixture
async def app(test_settings, session_factory, notifier, hasher):
    app = create_app(test_settings, notifier=notifier, hasher=hasher)
    # Share the per-test database with the fixtures above
    app.state.sessionmaker = session_factory
    return app


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

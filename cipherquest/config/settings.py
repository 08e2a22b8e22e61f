"""
Application settings

All runtime configuration is read from environment variables (optionally
from a .env file) into typed dataclasses. Settings are built once at process
start and handed to create_app(); nothing in the core reads os.environ.
"""
import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()


def get_bool_env(key: str, default: bool = False) -> bool:
    """Get a boolean value from environment variable."""
    value = os.getenv(key, str(default)).lower()
    return value in ('true', '1', 'yes', 'on', 'enabled')


def get_int_env(key: str, default: int) -> int:
    """Get an integer value from environment variable."""
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    return int(value)


def get_list_env(key: str) -> List[str]:
    """Get a comma separated list from environment variable."""
    return [item.strip() for item in os.getenv(key, "").split(",") if item.strip()]


@dataclass(frozen=True)
class QuestRules:
    """Fixed rules of the cipher quest gate."""
    questions_per_quest: int = 5
    quest_duration_seconds: int = 1800
    qualification_threshold: int = 3
    points_per_difficulty: int = 10

    @property
    def last_question_index(self) -> int:
        return self.questions_per_quest - 1


QUEST_RULES = QuestRules()


@dataclass
class Settings:
    """Process-wide configuration."""
    database_url: str = "sqlite+aiosqlite:///./cipherquest.db"
    environment: str = "development"
    jwt_secret_key: str = "dev-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 30
    password_hash_scheme: str = "bcrypt"
    allowed_origins: List[str] = field(default_factory=list)
    rate_limit_enabled: bool = True
    seed_demo_data: bool = True
    frontend_url: str = "http://localhost:3001"
    email_relay_url: Optional[str] = None
    email_relay_token: Optional[str] = None
    email_sender: str = "CipherQuest <no-reply@cipherquest.local>"
    notify_timeout_seconds: int = 10
    judge_token: Optional[str] = None
    quest: QuestRules = QUEST_RULES

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    def validate(self) -> List[str]:
        """Validate configuration and return any errors."""
        errors = []

        if not self.database_url:
            errors.append("DATABASE_URL must not be empty")

        if not self.is_development and self.jwt_secret_key == Settings.jwt_secret_key:
            errors.append("JWT_SECRET_KEY must be set outside development")

        if self.access_token_expire_minutes <= 0:
            errors.append("ACCESS_TOKEN_EXPIRE_MINUTES must be positive")

        if self.notify_timeout_seconds <= 0:
            errors.append("NOTIFY_TIMEOUT_SECONDS must be positive")

        return errors


def load_settings() -> Settings:
    """Load settings from environment."""
    return Settings(
        database_url=os.getenv("DATABASE_URL", Settings.database_url),
        environment=os.getenv("ENVIRONMENT", "development"),
        jwt_secret_key=os.getenv("JWT_SECRET_KEY", Settings.jwt_secret_key),
        access_token_expire_minutes=get_int_env("ACCESS_TOKEN_EXPIRE_MINUTES", 30),
        password_hash_scheme=os.getenv("PASSWORD_HASH_SCHEME", "bcrypt"),
        allowed_origins=get_list_env("ALLOWED_ORIGINS"),
        rate_limit_enabled=get_bool_env("RATE_LIMIT_ENABLED", True),
        seed_demo_data=get_bool_env("SEED_DEMO_DATA", True),
        frontend_url=os.getenv("FRONTEND_URL", Settings.frontend_url),
        email_relay_url=os.getenv("EMAIL_RELAY_URL") or None,
        email_relay_token=os.getenv("EMAIL_RELAY_TOKEN") or None,
        email_sender=os.getenv("EMAIL_SENDER", Settings.email_sender),
        notify_timeout_seconds=get_int_env("NOTIFY_TIMEOUT_SECONDS", 10),
        judge_token=os.getenv("JUDGE_TOKEN") or None,
    )

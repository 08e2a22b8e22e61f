from .base import Base

from .team import Team, PasswordResetToken
from .cipher_question import CipherQuestion
from .problem_statement import ProblemStatement
from .quest_session import QuestSession, QuestionAttempt
from .submission import Submission, JudgingScore

__all__ = [
    "Base",
    "Team",
    "PasswordResetToken",
    "CipherQuestion",
    "ProblemStatement",
    "QuestSession",
    "QuestionAttempt",
    "Submission",
    "JudgingScore",
]

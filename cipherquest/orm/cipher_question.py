"""
cipherquest/orm/cipher_question.py
Question bank for the cipher quest. Reference data: the engine never
writes these rows, it snapshots them into the session at start.
"""
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, CheckConstraint

from cipherquest.orm.base import Base, utcnow


class CipherQuestion(Base):
    __tablename__ = "cipher_questions"

    id = Column(Integer, primary_key=True, index=True)
    hint = Column(Text, nullable=False)
    category = Column(String(100), nullable=False)
    problem_domain = Column(String(100), nullable=False, index=True)
    cipher_type = Column(String(100), nullable=False)
    difficulty = Column(Integer, nullable=False, default=1)
    correct_answer = Column(String(255), nullable=False)
    max_attempts = Column(Integer, nullable=False, default=6)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("difficulty > 0", name="ck_cipher_questions_difficulty_positive"),
        CheckConstraint("max_attempts > 0", name="ck_cipher_questions_max_attempts_positive"),
    )

    def snapshot(self) -> dict:
        """Full copy stored inside a quest session, answer included."""
        return {
            "id": self.id,
            "hint": self.hint,
            "category": self.category,
            "problem_domain": self.problem_domain,
            "cipher_type": self.cipher_type,
            "difficulty": self.difficulty,
            "correct_answer": self.correct_answer,
            "max_attempts": self.max_attempts,
        }

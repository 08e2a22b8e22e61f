"""
cipherquest/orm/problem_statement.py
Build-phase problem statements assigned to qualified teams.
"""
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime

from cipherquest.orm.base import Base, utcnow


class ProblemStatement(Base):
    __tablename__ = "problem_statements"

    id = Column(Integer, primary_key=True, index=True)
    domain = Column(String(100), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    guidelines = Column(Text, nullable=True)
    submission_deadline = Column(DateTime, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "domain": self.domain,
            "title": self.title,
            "description": self.description,
            "guidelines": self.guidelines,
            "submission_deadline": self.submission_deadline.isoformat() if self.submission_deadline else None,
            "is_active": self.is_active,
        }

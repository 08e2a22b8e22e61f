"""
Team API Schemas (Pydantic)
"""
from typing import List

from pydantic import BaseModel


class UpdateProfileRequest(BaseModel):
    team_members: List[str]

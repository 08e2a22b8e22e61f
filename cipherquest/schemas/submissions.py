"""
Submission API Schemas (Pydantic)
"""
from typing import Optional

from pydantic import BaseModel, Field


class SubmitProjectRequest(BaseModel):
    team_id: int
    ppt_url: Optional[str] = Field(default=None, max_length=500)
    prototype_url: Optional[str] = Field(default=None, max_length=500)
    github_url: Optional[str] = Field(default=None, max_length=500)
    description: Optional[str] = None

"""
Pydantic schemas for candidate identities.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from recruitflow.schemas.base import CamelModel


class CandidateCreate(CamelModel):
    full_name: str = Field(..., min_length=1, max_length=200)
    email: Optional[str] = Field(default=None, max_length=255)
    profile_link: Optional[str] = Field(default=None, max_length=500)
    is_temp: bool = False


class CandidateRead(CamelModel):
    id: UUID
    full_name: str
    email: Optional[str] = None
    profile_link: Optional[str] = None
    is_temp: bool
    promoted_at: Optional[datetime] = None
    created_at: datetime

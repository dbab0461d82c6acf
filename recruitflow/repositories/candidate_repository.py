"""
Candidate repository - database operations for candidate identities.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from recruitflow.models.candidate import Candidate
from recruitflow.schemas.candidate import CandidateCreate
from recruitflow.utils.time import utc_now


class CandidateRepository:
    """Repository for Candidate database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, candidate_id: UUID) -> Optional[Candidate]:
        result = await self.db.execute(select(Candidate).where(Candidate.id == candidate_id))
        return result.scalar_one_or_none()

    async def create(self, data: CandidateCreate) -> Candidate:
        now = utc_now()
        candidate = Candidate(created_at=now, updated_at=now, **data.model_dump())
        self.db.add(candidate)
        await self.db.flush()
        return candidate

    async def promote(self, candidate: Candidate) -> Candidate:
        """Clear the temp flag on a candidate."""
        now = utc_now()
        candidate.is_temp = False
        candidate.promoted_at = now
        candidate.updated_at = now
        await self.db.flush()
        return candidate

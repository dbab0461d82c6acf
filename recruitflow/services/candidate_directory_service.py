"""
Candidate directory - resolves candidate identities and their temp flag.
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from recruitflow.errors import NotFound
from recruitflow.models.candidate import Candidate
from recruitflow.repositories.candidate_repository import CandidateRepository
from recruitflow.schemas.candidate import CandidateCreate

logger = logging.getLogger(__name__)


class CandidateDirectoryService:
    """Service for candidate identity lookups, registration and promotion."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = CandidateRepository(db)

    async def resolve(self, candidate_id: UUID) -> Candidate:
        """Return the candidate identity or raise NotFound."""
        candidate = await self.repo.get_by_id(candidate_id)
        if candidate is None:
            raise NotFound(f"Candidate {candidate_id} not found", {"candidate_id": str(candidate_id)})
        return candidate

    async def register(self, data: CandidateCreate) -> Candidate:
        candidate = await self.repo.create(data)
        logger.info("Registered %s candidate %s", "temp" if candidate.is_temp else "full", candidate.id)
        return candidate

    async def promote(self, candidate_id: UUID) -> Candidate:
        """Promote a temp candidate to a full record. No-op for full candidates."""
        candidate = await self.resolve(candidate_id)
        if not candidate.is_temp:
            return candidate
        candidate = await self.repo.promote(candidate)
        logger.info("Promoted temp candidate %s", candidate_id)
        return candidate

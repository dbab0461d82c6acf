"""
PendingStatusChange repository.
"""

from datetime import datetime
from typing import Optional, Tuple
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from recruitflow.core.catalog import CandidateStatus
from recruitflow.models.pending_status_change import PendingStatusChange
from recruitflow.utils.time import utc_now


class PendingChangeRepository:
    """Repository for unconfirmed status changes."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        pipeline_id: UUID,
        candidate_id: UUID,
        target_status: CandidateStatus,
        requested_by: str,
        expires_at: datetime,
        note: Optional[str] = None,
    ) -> PendingStatusChange:
        pending = PendingStatusChange(
            pipeline_id=pipeline_id,
            candidate_id=candidate_id,
            target_status=target_status.value,
            requested_by=requested_by,
            note=note,
            created_at=utc_now(),
            expires_at=expires_at,
        )
        self.db.add(pending)
        await self.db.flush()
        return pending

    async def get_by_id(self, pending_change_id: UUID) -> Optional[PendingStatusChange]:
        result = await self.db.execute(
            select(PendingStatusChange).where(PendingStatusChange.id == pending_change_id)
        )
        return result.scalar_one_or_none()

    async def delete(self, pending_change_id: UUID) -> bool:
        """Delete one pending change; False when it was already gone."""
        result = await self.db.execute(
            delete(PendingStatusChange)
            .where(PendingStatusChange.id == pending_change_id)
            .execution_options(synchronize_session=False)
        )
        return bool(result.rowcount)

    async def purge_expired(self, now: Optional[datetime] = None) -> int:
        """Delete every pending change whose window has passed."""
        result = await self.db.execute(
            delete(PendingStatusChange)
            .where(PendingStatusChange.expires_at <= (now or utc_now()))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    async def count_open_and_expired(self, now: Optional[datetime] = None) -> Tuple[int, int]:
        """Count pending changes still inside their window and those past it."""
        now = now or utc_now()
        result = await self.db.execute(
            select(
                func.count().filter(PendingStatusChange.expires_at > now),
                func.count().filter(PendingStatusChange.expires_at <= now),
            ).select_from(PendingStatusChange)
        )
        open_count, expired_count = result.one()
        return open_count, expired_count

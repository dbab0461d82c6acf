"""
Read-only projections over committed pipeline records and clients.
"""

from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from recruitflow.core.catalog import (
    CandidateStatus,
    ClientStage,
    Stage,
    is_terminal,
    list_client_stages,
    list_stages,
    stage_color,
    status_color,
)
from recruitflow.errors import NotFound
from recruitflow.models.pipeline_record import PipelineRecord
from recruitflow.repositories.client_repository import ClientRepository
from recruitflow.repositories.pipeline_record_repository import PipelineRecordRepository
from recruitflow.schemas.pipeline_record import BadgeRead


def badge_for(stage: Stage, status: CandidateStatus) -> BadgeRead:
    """
    Badge shown next to a candidate.

    A terminal stage is the headline once reached; before that the
    application status is shown.
    """
    stage = Stage(stage)
    if is_terminal(stage):
        return BadgeRead(label=stage.value, color_token=stage_color(stage))
    status = CandidateStatus(status)
    return BadgeRead(label=status.value, color_token=status_color(status))


class PipelineQueryService:
    """Counts, stage tabs and badges."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.records = PipelineRecordRepository(db)
        self.clients = ClientRepository(db)

    async def count_by_stage(self, pipeline_id: UUID) -> Dict[Stage, int]:
        """Every stage, zero-filled, in pipeline display order."""
        counts = await self.records.count_by_stage(pipeline_id)
        return {stage: counts.get(stage.value, 0) for stage in list_stages()}

    async def list_candidates_in_stage(self, pipeline_id: UUID, stage: Stage) -> List[PipelineRecord]:
        return await self.records.list_for_pipeline(pipeline_id, Stage(stage))

    async def display_badge(self, candidate_id: UUID, pipeline_id: Optional[UUID] = None) -> BadgeRead:
        """
        Badge for a candidate, from one pipeline or, when pipeline_id is
        omitted, from the most recently updated pipeline the candidate is in.
        """
        if pipeline_id is not None:
            record = await self.records.get_or_raise(pipeline_id, candidate_id)
        else:
            records = await self.records.list_for_candidate(candidate_id)
            if not records:
                raise NotFound(
                    f"Candidate {candidate_id} is not in any pipeline",
                    {"candidate_id": str(candidate_id)},
                )
            record = records[0]
        return badge_for(Stage(record.current_stage), CandidateStatus(record.current_status))

    async def count_clients_by_stage(self) -> Dict[ClientStage, int]:
        counts = await self.clients.count_by_stage()
        return {stage: counts.get(stage.value, 0) for stage in list_client_stages()}

"""
PipelineRecord repository - the pipeline record store.

`commit` is the single mutation entry point for existing records.
"""

import copy
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import flag_modified

from recruitflow.core.catalog import AuditKind, CandidateStatus, DEFAULT_STATUS, Stage
from recruitflow.errors import NotFound
from recruitflow.models.pipeline_record import PipelineAuditEntry, PipelineRecord
from recruitflow.repositories.versioning import AuditDraft, check_expected_version, versioned_write
from recruitflow.utils.time import utc_now


@dataclass
class RecordDraft:
    """Mutable copy of a record's state handed to a mutation function."""

    current_stage: Stage
    current_status: CandidateStatus
    fields: Dict[str, Dict[str, Any]]


Mutation = Callable[[RecordDraft], AuditDraft]


class PipelineRecordRepository:
    """Repository for PipelineRecord database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, pipeline_id: UUID, candidate_id: UUID) -> Optional[PipelineRecord]:
        """Get the record for a (pipeline, candidate) pair."""
        result = await self.db.execute(
            select(PipelineRecord).where(
                PipelineRecord.pipeline_id == pipeline_id,
                PipelineRecord.candidate_id == candidate_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_or_raise(self, pipeline_id: UUID, candidate_id: UUID) -> PipelineRecord:
        record = await self.get(pipeline_id, candidate_id)
        if record is None:
            raise NotFound(
                f"Candidate {candidate_id} is not in pipeline {pipeline_id}",
                {"pipeline_id": str(pipeline_id), "candidate_id": str(candidate_id)},
            )
        return record

    async def create(
        self,
        pipeline_id: UUID,
        candidate_id: UUID,
        initial_stage: Stage,
        actor: str,
    ) -> PipelineRecord:
        """Create a record at version 1 with its first StageChange entry."""
        now = utc_now()
        record = PipelineRecord(
            pipeline_id=pipeline_id,
            candidate_id=candidate_id,
            current_stage=initial_stage.value,
            current_status=DEFAULT_STATUS.value,
            stage_entered_at=now,
            fields={},
            created_at=now,
            updated_at=now,
            history=[
                PipelineAuditEntry(
                    timestamp=now,
                    actor=actor,
                    kind=AuditKind.STAGE_CHANGE.value,
                    from_value=None,
                    to_value=initial_stage.value,
                    note=f"Added to pipeline in {initial_stage.value}",
                    version=1,
                )
            ],
        )
        self.db.add(record)
        await self.db.flush()
        return record

    async def commit(
        self,
        pipeline_id: UUID,
        candidate_id: UUID,
        expected_version: int,
        mutation: Mutation,
    ) -> PipelineRecord:
        """
        Apply a mutation under optimistic concurrency.

        Loads the record, checks expected_version, runs mutation on a draft,
        writes the draft back, appends one audit entry and bumps version by
        exactly one. Exceptions raised by the mutation leave the record
        untouched.

        Raises:
            NotFound: no such record
            VersionConflict: stored version differs from expected_version,
                or a concurrent writer committed first
        """
        record = await self.get_or_raise(pipeline_id, candidate_id)
        check_expected_version(record.version, expected_version)

        draft = RecordDraft(
            current_stage=Stage(record.current_stage),
            current_status=CandidateStatus(record.current_status),
            fields=copy.deepcopy(record.fields or {}),
        )
        entry = mutation(draft)

        now = utc_now()
        async with versioned_write(self.db, record, expected_version):
            if draft.current_stage.value != record.current_stage:
                record.stage_entered_at = now
            record.current_stage = draft.current_stage.value
            record.current_status = draft.current_status.value
            record.fields = draft.fields
            # Always emit the versioned UPDATE, even for a no-op re-confirmation
            flag_modified(record, "fields")
            record.updated_at = now
            record.history.append(
                PipelineAuditEntry(
                    timestamp=now,
                    actor=entry.actor,
                    kind=entry.kind.value,
                    from_value=entry.from_value,
                    to_value=entry.to_value,
                    note=entry.note,
                    version=expected_version + 1,
                )
            )
        return record

    async def list_for_pipeline(
        self,
        pipeline_id: UUID,
        stage: Optional[Stage] = None,
    ) -> List[PipelineRecord]:
        """List records in a pipeline, oldest stage entry first."""
        query = select(PipelineRecord).where(PipelineRecord.pipeline_id == pipeline_id)
        if stage is not None:
            query = query.where(PipelineRecord.current_stage == Stage(stage).value)
        query = query.order_by(PipelineRecord.stage_entered_at.asc(), PipelineRecord.candidate_id.asc())

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_for_candidate(self, candidate_id: UUID) -> List[PipelineRecord]:
        """All pipelines a candidate is in, most recently updated first."""
        result = await self.db.execute(
            select(PipelineRecord)
            .where(PipelineRecord.candidate_id == candidate_id)
            .order_by(PipelineRecord.updated_at.desc())
        )
        return list(result.scalars().all())

    async def count_by_stage(self, pipeline_id: UUID) -> Dict[str, int]:
        result = await self.db.execute(
            select(PipelineRecord.current_stage, func.count())
            .where(PipelineRecord.pipeline_id == pipeline_id)
            .group_by(PipelineRecord.current_stage)
        )
        return {stage: count for stage, count in result.all()}

"""
Stage transition engine.

Orchestrates guard evaluation, versioned commits and audit entries for
pipeline records. Guard and schema failures are raised before anything is
written. Status changes follow a request/confirm protocol: nothing is
applied until the pending change is confirmed.
"""

import logging
from typing import Any, Awaitable, Callable, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy.ext.asyncio import AsyncSession

from recruitflow.core.catalog import (
    AuditKind,
    CandidateStatus,
    DISQUALIFICATION_REASONS,
    INITIAL_STAGES,
    Stage,
    field_schema_for,
)
from recruitflow.core.config import settings
from recruitflow.errors import Expired, NotFound, SchemaViolation, TransitionBlocked, raise_app_error
from recruitflow.models.pending_status_change import PendingStatusChange
from recruitflow.models.pipeline_record import PipelineRecord
from recruitflow.repositories.pending_change_repository import PendingChangeRepository
from recruitflow.repositories.pipeline_record_repository import (
    Mutation,
    PipelineRecordRepository,
    RecordDraft,
)
from recruitflow.repositories.versioning import AuditDraft
from recruitflow.services.candidate_directory_service import CandidateDirectoryService
from recruitflow.services.retry import commit_with_retry
from recruitflow.services.transition_guard import can_change_status, can_transition
from recruitflow.utils.time import expires_at, is_expired

logger = logging.getLogger(__name__)


class StageTransitionService:
    """Service for every mutation of a candidate's pipeline record."""

    def __init__(
        self,
        db: AsyncSession,
        max_retries: Optional[int] = None,
        pending_ttl_seconds: Optional[int] = None,
    ):
        self.db = db
        self.records = PipelineRecordRepository(db)
        self.pending = PendingChangeRepository(db)
        self.directory = CandidateDirectoryService(db)
        self.max_retries = settings.COMMIT_MAX_RETRIES if max_retries is None else max_retries
        self.pending_ttl_seconds = (
            settings.PENDING_STATUS_CHANGE_TTL_SECONDS if pending_ttl_seconds is None else pending_ttl_seconds
        )

    async def get_record(self, pipeline_id: UUID, candidate_id: UUID) -> PipelineRecord:
        return await self.records.get_or_raise(pipeline_id, candidate_id)

    async def add_candidate_to_pipeline(
        self,
        pipeline_id: UUID,
        candidate_id: UUID,
        actor: str,
        initial_stage: Stage = Stage.SOURCING,
    ) -> PipelineRecord:
        """Create the pipeline record for a candidate joining a job pipeline."""
        initial_stage = Stage(initial_stage)
        if initial_stage not in INITIAL_STAGES:
            raise SchemaViolation(
                f"Candidates enter a pipeline in {' or '.join(s.value for s in INITIAL_STAGES)}",
                {"initial_stage": initial_stage.value},
            )
        await self.directory.resolve(candidate_id)
        if await self.records.get(pipeline_id, candidate_id) is not None:
            raise_app_error(
                status.HTTP_409_CONFLICT,
                "ALREADY_IN_PIPELINE",
                f"Candidate {candidate_id} is already in pipeline {pipeline_id}",
            )

        record = await self.records.create(pipeline_id, candidate_id, initial_stage, actor)
        logger.info("Added candidate %s to pipeline %s in %s", candidate_id, pipeline_id, initial_stage.value)
        return record

    # ------------------------------------------------------------------
    # Stage fields
    # ------------------------------------------------------------------

    async def update_stage_field(
        self,
        pipeline_id: UUID,
        candidate_id: UUID,
        stage: Stage,
        field_key: str,
        value: Any,
        actor: str,
        note: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> PipelineRecord:
        """
        Write fields[stage][field_key] = value.

        The key must be in the stage's schema and the value must fit the
        field type. None clears the field. Temp candidates may be edited.

        Raises:
            SchemaViolation: unknown key or ill-typed value
            NotFound: no such pipeline record
            VersionConflict: expected_version is stale
        """
        stage = Stage(stage)
        schema = field_schema_for(stage)
        spec = schema.get(field_key)
        if spec is None:
            raise SchemaViolation(
                f"Field '{field_key}' is not recognized for stage {stage.value}",
                {"stage": stage.value, "field_key": field_key, "allowed": sorted(schema)},
            )
        try:
            coerced = spec.coerce(value)
        except ValueError as exc:
            raise SchemaViolation(str(exc), {"stage": stage.value, "field_key": field_key}) from exc

        def mutate(draft: RecordDraft) -> AuditDraft:
            stage_fields = draft.fields.setdefault(stage.value, {})
            previous = stage_fields.get(field_key)
            if coerced is None:
                stage_fields.pop(field_key, None)
                default_note = f"Cleared {field_key}"
            else:
                stage_fields[field_key] = coerced
                default_note = f"Updated {field_key} to {coerced}"
            return AuditDraft(
                actor=actor,
                kind=AuditKind.FIELD_UPDATE,
                note=note or default_note,
                from_value=previous,
                to_value=coerced,
            )

        async def build(_: PipelineRecord) -> Mutation:
            return mutate

        record = await self._commit(pipeline_id, candidate_id, expected_version, build, "update_stage_field")
        logger.info(
            "Updated %s.%s for candidate %s in pipeline %s (v%s)",
            stage.value, field_key, candidate_id, pipeline_id, record.version,
        )
        return record

    # ------------------------------------------------------------------
    # Stage moves
    # ------------------------------------------------------------------

    async def move_candidate_to_stage(
        self,
        pipeline_id: UUID,
        candidate_id: UUID,
        target_stage: Stage,
        actor: str,
        note: Optional[str] = None,
        reason: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> PipelineRecord:
        """
        Move a candidate to target_stage.

        Moving to the current stage is an explicit re-confirmation: state is
        unchanged but the commit still appends an entry and bumps version.
        Moving to Disqualified records the disqualification fields
        (stage, status, optional reason and feedback) in the same commit.

        Raises:
            TransitionBlocked: terminal current stage or temp candidate
            SchemaViolation: reason given for a non-Disqualified target, or unknown reason
            NotFound: no such pipeline record or candidate
            VersionConflict: expected_version is stale
        """
        target = Stage(target_stage)
        if reason is not None:
            if target != Stage.DISQUALIFIED:
                raise SchemaViolation(
                    "A disqualification reason is only accepted when moving to Disqualified",
                    {"target_stage": target.value},
                )
            if reason not in DISQUALIFICATION_REASONS:
                raise SchemaViolation(
                    f"Unknown disqualification reason '{reason}'",
                    {"allowed": list(DISQUALIFICATION_REASONS)},
                )

        def mutate(draft: RecordDraft) -> AuditDraft:
            previous = draft.current_stage
            draft.current_stage = target
            if target == Stage.DISQUALIFIED and previous != Stage.DISQUALIFIED:
                disqualification = draft.fields.setdefault(Stage.DISQUALIFIED.value, {})
                disqualification["disqualificationStage"] = previous.value
                disqualification["disqualificationStatus"] = draft.current_status.value
                if reason is not None:
                    disqualification["disqualificationReason"] = reason
                if note:
                    disqualification["disqualificationFeedback"] = note
            if previous == target:
                default_note = f"Re-confirmed stage {target.value}"
            else:
                default_note = f"Moved from {previous.value} to {target.value}"
            return AuditDraft(
                actor=actor,
                kind=AuditKind.STAGE_CHANGE,
                note=note or default_note,
                from_value=previous.value,
                to_value=target.value,
            )

        async def build(record: PipelineRecord) -> Mutation:
            candidate = await self.directory.resolve(candidate_id)
            decision = can_transition(Stage(record.current_stage), target, candidate.is_temp)
            if decision.blocked:
                logger.warning(
                    "Blocked move of candidate %s in pipeline %s from %s to %s: %s",
                    candidate_id, pipeline_id, record.current_stage, target.value, decision.reason,
                )
                raise TransitionBlocked(
                    decision.reason,
                    {"current_stage": record.current_stage, "target_stage": target.value},
                )
            return mutate

        record = await self._commit(pipeline_id, candidate_id, expected_version, build, "move_candidate_to_stage")
        logger.info(
            "Moved candidate %s in pipeline %s to %s (v%s)",
            candidate_id, pipeline_id, target.value, record.version,
        )
        return record

    # ------------------------------------------------------------------
    # Status changes (request / confirm / cancel)
    # ------------------------------------------------------------------

    async def request_status_change(
        self,
        pipeline_id: UUID,
        candidate_id: UUID,
        target_status: CandidateStatus,
        actor: str,
        note: Optional[str] = None,
    ) -> PendingStatusChange:
        """
        Register a status change awaiting confirmation.

        The pipeline record is not modified.
        """
        target = CandidateStatus(target_status)
        await self.pending.purge_expired()

        record = await self.records.get_or_raise(pipeline_id, candidate_id)
        await self.directory.resolve(candidate_id)
        decision = can_change_status(CandidateStatus(record.current_status), target)
        if decision.blocked:
            raise TransitionBlocked(decision.reason)

        pending = await self.pending.create(
            pipeline_id=pipeline_id,
            candidate_id=candidate_id,
            target_status=target,
            requested_by=actor,
            expires_at=expires_at(self.pending_ttl_seconds),
            note=note,
        )
        logger.info(
            "Requested status change to %s for candidate %s in pipeline %s (pending %s)",
            target.value, candidate_id, pipeline_id, pending.id,
        )
        return pending

    async def confirm_status_change(
        self,
        pending_change_id: UUID,
        actor: str,
        pipeline_id: Optional[UUID] = None,
        candidate_id: Optional[UUID] = None,
    ) -> PipelineRecord:
        """
        Apply a pending status change.

        The pending change is deleted before the record is written, in the
        same transaction. Of two concurrent confirmations only the one whose
        delete removes the row goes on to apply the status.

        An expired pending change is deleted as well before Expired is
        raised. The caller commits that delete even though the confirmation
        failed (the pipelines router does).

        Raises:
            NotFound: unknown (already confirmed or cancelled) pending change
            Expired: the confirmation window has passed; the pending change is discarded
        """
        pending = await self._get_pending(pending_change_id, pipeline_id, candidate_id)
        if not await self.pending.delete(pending.id):
            logger.warning("Pending status change %s was claimed by another confirmation", pending_change_id)
            raise NotFound(
                f"Pending status change {pending_change_id} not found",
                {"pending_change_id": str(pending_change_id)},
            )
        if is_expired(pending.expires_at):
            logger.warning("Pending status change %s expired before confirmation", pending_change_id)
            raise Expired(details={"pending_change_id": str(pending_change_id)})

        target = CandidateStatus(pending.target_status)
        record_pipeline_id = pending.pipeline_id
        record_candidate_id = pending.candidate_id
        note = pending.note

        def mutate(draft: RecordDraft) -> AuditDraft:
            previous = draft.current_status
            draft.current_status = target
            return AuditDraft(
                actor=actor,
                kind=AuditKind.STATUS_CHANGE,
                note=note or f"Changed status from {previous.value} to {target.value}",
                from_value=previous.value,
                to_value=target.value,
            )

        async def build(record: PipelineRecord) -> Mutation:
            await self.directory.resolve(record_candidate_id)
            decision = can_change_status(CandidateStatus(record.current_status), target)
            if decision.blocked:
                raise TransitionBlocked(decision.reason)
            return mutate

        record = await self._commit(record_pipeline_id, record_candidate_id, None, build, "confirm_status_change")
        logger.info(
            "Confirmed status %s for candidate %s in pipeline %s (v%s)",
            target.value, record_candidate_id, record_pipeline_id, record.version,
        )
        return record

    async def cancel_status_change(
        self,
        pending_change_id: UUID,
        pipeline_id: Optional[UUID] = None,
        candidate_id: Optional[UUID] = None,
    ) -> None:
        """Discard a pending status change. Stored pipeline state is untouched."""
        pending = await self._get_pending(pending_change_id, pipeline_id, candidate_id)
        await self.pending.delete(pending.id)
        logger.info("Cancelled pending status change %s", pending_change_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _get_pending(
        self,
        pending_change_id: UUID,
        pipeline_id: Optional[UUID],
        candidate_id: Optional[UUID],
    ) -> PendingStatusChange:
        pending = await self.pending.get_by_id(pending_change_id)
        mismatched = pending is not None and (
            (pipeline_id is not None and pending.pipeline_id != pipeline_id)
            or (candidate_id is not None and pending.candidate_id != candidate_id)
        )
        if pending is None or mismatched:
            raise NotFound(
                f"Pending status change {pending_change_id} not found",
                {"pending_change_id": str(pending_change_id)},
            )
        return pending

    async def _commit(
        self,
        pipeline_id: UUID,
        candidate_id: UUID,
        expected_version: Optional[int],
        build: Callable[[PipelineRecord], Awaitable[Mutation]],
        label: str,
    ) -> PipelineRecord:
        return await commit_with_retry(
            load_current=lambda: self.records.get_or_raise(pipeline_id, candidate_id),
            build_mutation=build,
            commit=lambda version, mutation: self.records.commit(pipeline_id, candidate_id, version, mutation),
            expected_version=expected_version,
            max_retries=self.max_retries,
            label=label,
        )

"""
Pipeline router - API endpoints for the candidate pipeline stage engine.
"""

from typing import Dict, List
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from recruitflow.core.catalog import Stage
from recruitflow.core.dependencies import Actor, get_db, require_pipeline_writer
from recruitflow.errors import Expired
from recruitflow.schemas.pipeline_record import (
    AddCandidateRequest,
    BadgeRead,
    MoveStageRequest,
    PendingChangeRead,
    PendingChangeRef,
    PipelineRecordRead,
    PipelineRecordSummary,
    StageFieldUpdateRequest,
    StatusChangeRequest,
)
from recruitflow.services.pipeline_query_service import PipelineQueryService
from recruitflow.services.stage_transition_service import StageTransitionService

router = APIRouter(prefix="/pipeline", tags=["Pipeline"])


@router.post(
    "/{pipeline_id}/candidates",
    response_model=PipelineRecordRead,
    status_code=status.HTTP_201_CREATED,
)
async def add_candidate_to_pipeline(
    pipeline_id: UUID,
    request: AddCandidateRequest,
    actor: Actor = Depends(require_pipeline_writer),
    db: AsyncSession = Depends(get_db),
):
    """Associate a candidate with a job pipeline (Sourcing by default)."""
    service = StageTransitionService(db)
    record = await service.add_candidate_to_pipeline(
        pipeline_id, request.candidate_id, actor.id, request.initial_stage
    )
    response = PipelineRecordRead.model_validate(record)
    await db.commit()
    return response


@router.get("/{pipeline_id}/candidate/{candidate_id}", response_model=PipelineRecordRead)
async def get_pipeline_record(
    pipeline_id: UUID,
    candidate_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Get a candidate's record in a pipeline, with history."""
    service = StageTransitionService(db)
    record = await service.get_record(pipeline_id, candidate_id)
    return PipelineRecordRead.model_validate(record)


@router.patch("/{pipeline_id}/candidate/{candidate_id}/field", response_model=PipelineRecordRead)
async def update_stage_field(
    pipeline_id: UUID,
    candidate_id: UUID,
    request: StageFieldUpdateRequest,
    actor: Actor = Depends(require_pipeline_writer),
    db: AsyncSession = Depends(get_db),
):
    """
    Write one stage field.

    422 when the field is not in the stage's schema, 409 on a stale expectedVersion.
    """
    service = StageTransitionService(db)
    record = await service.update_stage_field(
        pipeline_id,
        candidate_id,
        request.stage,
        request.field_key,
        request.value,
        actor.id,
        note=request.note,
        expected_version=request.expected_version,
    )
    response = PipelineRecordRead.model_validate(record)
    await db.commit()
    return response


@router.post("/{pipeline_id}/candidate/{candidate_id}/stage", response_model=PipelineRecordRead)
async def move_candidate_to_stage(
    pipeline_id: UUID,
    candidate_id: UUID,
    request: MoveStageRequest,
    actor: Actor = Depends(require_pipeline_writer),
    db: AsyncSession = Depends(get_db),
):
    """
    Move a candidate to another stage.

    403 with the guard reason when blocked, 409 on a stale expectedVersion.
    """
    service = StageTransitionService(db)
    record = await service.move_candidate_to_stage(
        pipeline_id,
        candidate_id,
        request.target_stage,
        actor.id,
        note=request.note,
        reason=request.reason,
        expected_version=request.expected_version,
    )
    response = PipelineRecordRead.model_validate(record)
    await db.commit()
    return response


@router.post(
    "/{pipeline_id}/candidate/{candidate_id}/status:request",
    response_model=PendingChangeRead,
    status_code=status.HTTP_201_CREATED,
)
async def request_status_change(
    pipeline_id: UUID,
    candidate_id: UUID,
    request: StatusChangeRequest,
    actor: Actor = Depends(require_pipeline_writer),
    db: AsyncSession = Depends(get_db),
):
    """Register a status change; nothing is applied until it is confirmed."""
    service = StageTransitionService(db)
    pending = await service.request_status_change(
        pipeline_id, candidate_id, request.target_status, actor.id, note=request.note
    )
    response = PendingChangeRead(
        pending_change_id=pending.id,
        pipeline_id=pending.pipeline_id,
        candidate_id=pending.candidate_id,
        target_status=pending.target_status,
        requested_by=pending.requested_by,
        expires_at=pending.expires_at,
    )
    await db.commit()
    return response


@router.post(
    "/{pipeline_id}/candidate/{candidate_id}/status:confirm",
    response_model=PipelineRecordRead,
)
async def confirm_status_change(
    pipeline_id: UUID,
    candidate_id: UUID,
    request: PendingChangeRef,
    actor: Actor = Depends(require_pipeline_writer),
    db: AsyncSession = Depends(get_db),
):
    """Apply a pending status change. 410 once its window has passed."""
    service = StageTransitionService(db)
    try:
        record = await service.confirm_status_change(
            request.pending_change_id, actor.id, pipeline_id=pipeline_id, candidate_id=candidate_id
        )
    except Expired:
        # Keep the discard of the expired pending change
        await db.commit()
        raise
    response = PipelineRecordRead.model_validate(record)
    await db.commit()
    return response


@router.post(
    "/{pipeline_id}/candidate/{candidate_id}/status:cancel",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def cancel_status_change(
    pipeline_id: UUID,
    candidate_id: UUID,
    request: PendingChangeRef,
    _: Actor = Depends(require_pipeline_writer),
    db: AsyncSession = Depends(get_db),
):
    """Discard a pending status change."""
    service = StageTransitionService(db)
    await service.cancel_status_change(
        request.pending_change_id, pipeline_id=pipeline_id, candidate_id=candidate_id
    )
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{pipeline_id}/stage-counts", response_model=Dict[str, int])
async def get_stage_counts(
    pipeline_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Number of candidates per stage; every stage is present."""
    service = PipelineQueryService(db)
    counts = await service.count_by_stage(pipeline_id)
    return {stage.value: count for stage, count in counts.items()}


@router.get("/{pipeline_id}/stages/{stage}/candidates", response_model=List[PipelineRecordSummary])
async def list_candidates_in_stage(
    pipeline_id: UUID,
    stage: Stage,
    db: AsyncSession = Depends(get_db),
):
    """Candidates currently in a stage, in order of entry."""
    service = PipelineQueryService(db)
    records = await service.list_candidates_in_stage(pipeline_id, stage)
    return [PipelineRecordSummary.model_validate(record) for record in records]


@router.get("/{pipeline_id}/candidate/{candidate_id}/badge", response_model=BadgeRead)
async def get_candidate_badge(
    pipeline_id: UUID,
    candidate_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    service = PipelineQueryService(db)
    return await service.display_badge(candidate_id, pipeline_id=pipeline_id)

"""
Candidate router - minimal candidate directory endpoints.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from recruitflow.core.dependencies import Actor, get_db, require_pipeline_writer
from recruitflow.schemas.candidate import CandidateCreate, CandidateRead
from recruitflow.schemas.pipeline_record import BadgeRead
from recruitflow.services.candidate_directory_service import CandidateDirectoryService
from recruitflow.services.pipeline_query_service import PipelineQueryService

router = APIRouter(prefix="/candidates", tags=["Candidates"])


@router.post("", response_model=CandidateRead, status_code=status.HTTP_201_CREATED)
async def register_candidate(
    data: CandidateCreate,
    _: Actor = Depends(require_pipeline_writer),
    db: AsyncSession = Depends(get_db),
):
    """Register a full candidate, or a temp candidate with isTemp=true."""
    service = CandidateDirectoryService(db)
    candidate = await service.register(data)
    response = CandidateRead.model_validate(candidate)
    await db.commit()
    return response


@router.get("/{candidate_id}", response_model=CandidateRead)
async def get_candidate(
    candidate_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    service = CandidateDirectoryService(db)
    return CandidateRead.model_validate(await service.resolve(candidate_id))


@router.post("/{candidate_id}/promote", response_model=CandidateRead)
async def promote_candidate(
    candidate_id: UUID,
    _: Actor = Depends(require_pipeline_writer),
    db: AsyncSession = Depends(get_db),
):
    """Promote a temp candidate so stage moves are allowed again."""
    service = CandidateDirectoryService(db)
    candidate = await service.promote(candidate_id)
    response = CandidateRead.model_validate(candidate)
    await db.commit()
    return response


@router.get("/{candidate_id}/badge", response_model=BadgeRead)
async def get_candidate_badge(
    candidate_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Badge from the candidate's most recently updated pipeline."""
    service = PipelineQueryService(db)
    return await service.display_badge(candidate_id)

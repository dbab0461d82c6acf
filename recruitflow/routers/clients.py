"""
Client router - client lifecycle stage endpoints.
"""

from typing import Dict
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from recruitflow.core.dependencies import Actor, get_db, require_client_writer
from recruitflow.schemas.client import ClientCreate, ClientRead, ClientStageChangeRequest
from recruitflow.services.client_lifecycle_service import ClientLifecycleService
from recruitflow.services.pipeline_query_service import PipelineQueryService

router = APIRouter(prefix="/clients", tags=["Clients"])


@router.post("", response_model=ClientRead, status_code=status.HTTP_201_CREATED)
async def create_client(
    data: ClientCreate,
    actor: Actor = Depends(require_client_writer),
    db: AsyncSession = Depends(get_db),
):
    service = ClientLifecycleService(db)
    client = await service.create_client(data, actor.id)
    response = ClientRead.model_validate(client)
    await db.commit()
    return response


@router.get("/stage-counts", response_model=Dict[str, int])
async def get_client_stage_counts(db: AsyncSession = Depends(get_db)):
    service = PipelineQueryService(db)
    counts = await service.count_clients_by_stage()
    return {stage.value: count for stage, count in counts.items()}


@router.get("/{client_id}", response_model=ClientRead)
async def get_client(
    client_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    service = ClientLifecycleService(db)
    return ClientRead.model_validate(await service.get_client(client_id))


@router.post("/{client_id}/stage", response_model=ClientRead)
async def change_client_stage(
    client_id: UUID,
    request: ClientStageChangeRequest,
    actor: Actor = Depends(require_client_writer),
    db: AsyncSession = Depends(get_db),
):
    """
    Change a client's stage and sub-status.

    403 when the sub-status does not belong to the target stage.
    """
    service = ClientLifecycleService(db)
    client = await service.change_client_stage(
        client_id,
        request.target_stage,
        request.target_sub_status,
        actor.id,
        note=request.note,
        expected_version=request.expected_version,
    )
    response = ClientRead.model_validate(client)
    await db.commit()
    return response

"""
Catalog router - read-only view of the fixed taxonomy.
"""

from typing import List

from fastapi import APIRouter

from recruitflow.core import catalog
from recruitflow.core.catalog import Stage
from recruitflow.schemas.catalog import ClientStageRead, FieldSpecRead, StageRead, StatusRead

router = APIRouter(prefix="/catalog", tags=["Catalog"])


@router.get("/stages", response_model=List[StageRead])
async def list_stages():
    return [
        StageRead(stage=stage, terminal=catalog.is_terminal(stage), color_token=catalog.stage_color(stage))
        for stage in catalog.list_stages()
    ]


@router.get("/stages/{stage}/fields", response_model=List[FieldSpecRead])
async def list_stage_fields(stage: Stage):
    return [FieldSpecRead.model_validate(spec) for spec in catalog.field_schema_for(stage).values()]


@router.get("/statuses", response_model=List[StatusRead])
async def list_statuses():
    return [
        StatusRead(status=status, color_token=catalog.status_color(status))
        for status in catalog.all_candidate_statuses()
    ]


@router.get("/client-stages", response_model=List[ClientStageRead])
async def list_client_stages():
    return [
        ClientStageRead(stage=stage, sub_statuses=list(catalog.sub_statuses_for(stage)))
        for stage in catalog.list_client_stages()
    ]


@router.get("/disqualification-reasons", response_model=List[str])
async def list_disqualification_reasons():
    return list(catalog.disqualification_reasons())

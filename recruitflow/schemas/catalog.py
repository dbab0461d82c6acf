"""
Pydantic schemas exposing the entity catalog.
"""

from typing import List

from recruitflow.core.catalog import CandidateStatus, ClientStage, FieldType, Stage
from recruitflow.schemas.base import CamelModel


class StageRead(CamelModel):
    stage: Stage
    terminal: bool
    color_token: str


class FieldSpecRead(CamelModel):
    key: str
    label: str
    type: FieldType
    options: List[str] = []


class StatusRead(CamelModel):
    status: CandidateStatus
    color_token: str


class ClientStageRead(CamelModel):
    stage: ClientStage
    sub_statuses: List[str]

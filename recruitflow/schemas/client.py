"""
Pydantic schemas for client lifecycle.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from recruitflow.core.catalog import ClientStage
from recruitflow.schemas.audit_entry import AuditEntryRead
from recruitflow.schemas.base import CamelModel


class ClientCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    stage: ClientStage = ClientStage.LEAD
    sub_status: Optional[str] = None


class ClientStageChangeRequest(CamelModel):
    target_stage: ClientStage
    # None resets the sub-status until one is selected
    target_sub_status: Optional[str] = None
    note: Optional[str] = None
    expected_version: Optional[int] = None


class ClientRead(CamelModel):
    id: UUID
    name: str
    stage: ClientStage
    sub_status: Optional[str] = None
    version: int
    history: List[AuditEntryRead]
    created_at: datetime
    updated_at: datetime

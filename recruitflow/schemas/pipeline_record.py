"""
Pydantic schemas for pipeline records and their mutation requests.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import Field

from recruitflow.core.catalog import CandidateStatus, DEFAULT_INITIAL_STAGE, Stage
from recruitflow.schemas.audit_entry import AuditEntryRead
from recruitflow.schemas.base import CamelModel


class PipelineRecordRead(CamelModel):
    """Read model for a pipeline record including its full history."""

    id: UUID
    pipeline_id: UUID
    candidate_id: UUID
    current_stage: Stage
    current_status: CandidateStatus
    stage_entered_at: datetime
    fields: Dict[str, Dict[str, Any]]
    version: int
    history: List[AuditEntryRead]
    created_at: datetime
    updated_at: datetime


class PipelineRecordSummary(CamelModel):
    """Row shown in a stage tab."""

    pipeline_id: UUID
    candidate_id: UUID
    current_stage: Stage
    current_status: CandidateStatus
    stage_entered_at: datetime
    version: int


class AddCandidateRequest(CamelModel):
    """Associate a candidate with a job pipeline."""
    candidate_id: UUID
    initial_stage: Stage = DEFAULT_INITIAL_STAGE


class StageFieldUpdateRequest(CamelModel):
    stage: Stage
    field_key: str = Field(..., max_length=100)
    value: Any = None
    note: Optional[str] = None
    expected_version: Optional[int] = None


class MoveStageRequest(CamelModel):
    target_stage: Stage
    note: Optional[str] = None
    # Only meaningful when target_stage is Disqualified
    reason: Optional[str] = None
    expected_version: Optional[int] = None


class StatusChangeRequest(CamelModel):
    target_status: CandidateStatus
    note: Optional[str] = None


class PendingChangeRef(CamelModel):
    pending_change_id: UUID


class PendingChangeRead(CamelModel):
    """Returned by status:request; confirm or cancel with pending_change_id."""

    pending_change_id: UUID
    pipeline_id: UUID
    candidate_id: UUID
    target_status: CandidateStatus
    requested_by: str
    expires_at: datetime


class BadgeRead(CamelModel):
    label: str
    color_token: str

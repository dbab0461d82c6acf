"""
PipelineRecord model.

The aggregate root for one candidate in one job pipeline: current stage,
current status, per-stage field values and the audit history.
"""

import uuid
from datetime import datetime
from typing import List

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from recruitflow.models.audit_entry import AuditEntryColumns
from recruitflow.models.base_model import JSONType, TimestampedModel
from recruitflow.db.base import Base
from recruitflow.utils.time import utc_now


class PipelineRecord(TimestampedModel):
    """
    Pipeline record table - one row per (pipeline, candidate).

    `version` is the optimistic concurrency token: SQLAlchemy adds
    `WHERE version = :old` to every UPDATE and raises StaleDataError when a
    concurrent writer got there first.
    """

    __tablename__ = "pipeline_records"

    # Job requisition the candidate is progressing through
    pipeline_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    candidate_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("candidates.id"),
        nullable=False,
        index=True,
    )

    current_stage: Mapped[str] = mapped_column(String(40), nullable=False)

    current_status: Mapped[str] = mapped_column(String(40), nullable=False)

    # When the record entered current_stage; drives stage list ordering
    stage_entered_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    # {stage: {field_key: value}}
    fields: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    history: Mapped[List["PipelineAuditEntry"]] = relationship(
        "PipelineAuditEntry",
        back_populates="record",
        order_by="PipelineAuditEntry.version",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        UniqueConstraint("pipeline_id", "candidate_id", name="uq_pipeline_records_pipeline_candidate"),
        Index("ix_pipeline_records_pipeline_stage", "pipeline_id", "current_stage"),
    )


class PipelineAuditEntry(AuditEntryColumns, Base):
    """Append-only history row for a pipeline record."""

    __tablename__ = "pipeline_audit_entries"

    record_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("pipeline_records.id", ondelete="CASCADE"),
        nullable=False,
    )

    record: Mapped["PipelineRecord"] = relationship("PipelineRecord", back_populates="history")

    __table_args__ = (
        UniqueConstraint("record_id", "version", name="uq_pipeline_audit_entries_record_version"),
    )

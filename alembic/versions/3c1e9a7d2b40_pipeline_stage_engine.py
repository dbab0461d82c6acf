"""pipeline stage engine core tables

Revision ID: 3c1e9a7d2b40
Revises:
Create Date: 2026-10-19 09:12:41.218377
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = "3c1e9a7d2b40"
down_revision = None
branch_labels = None
depends_on = None


def _audit_columns():
    return [
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("actor", sa.String(length=255), nullable=False),
        sa.Column("kind", sa.String(length=30), nullable=False),
        sa.Column("from_value", postgresql.JSONB(), nullable=True),
        sa.Column("to_value", postgresql.JSONB(), nullable=True),
        sa.Column("note", sa.Text(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "candidates",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("full_name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("profile_link", sa.String(length=500), nullable=True),
        sa.Column("is_temp", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("promoted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "pipeline_records",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("pipeline_id", sa.Uuid(), nullable=False),
        sa.Column("candidate_id", sa.Uuid(), sa.ForeignKey("candidates.id"), nullable=False),
        sa.Column("current_stage", sa.String(length=40), nullable=False),
        sa.Column("current_status", sa.String(length=40), nullable=False),
        sa.Column("stage_entered_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("fields", postgresql.JSONB(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("pipeline_id", "candidate_id", name="uq_pipeline_records_pipeline_candidate"),
    )
    op.create_index("ix_pipeline_records_candidate_id", "pipeline_records", ["candidate_id"])
    op.create_index("ix_pipeline_records_pipeline_stage", "pipeline_records", ["pipeline_id", "current_stage"])

    op.create_table(
        "pipeline_audit_entries",
        *_audit_columns(),
        sa.Column(
            "record_id",
            sa.Uuid(),
            sa.ForeignKey("pipeline_records.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.UniqueConstraint("record_id", "version", name="uq_pipeline_audit_entries_record_version"),
    )

    op.create_table(
        "clients",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("stage", sa.String(length=20), nullable=False),
        sa.Column("sub_status", sa.String(length=40), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_clients_stage", "clients", ["stage"])

    op.create_table(
        "client_audit_entries",
        *_audit_columns(),
        sa.Column(
            "client_id",
            sa.Uuid(),
            sa.ForeignKey("clients.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.UniqueConstraint("client_id", "version", name="uq_client_audit_entries_client_version"),
    )

    op.create_table(
        "pending_status_changes",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("pipeline_id", sa.Uuid(), nullable=False),
        sa.Column("candidate_id", sa.Uuid(), nullable=False),
        sa.Column("target_status", sa.String(length=40), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("requested_by", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_pending_status_changes_expires_at", "pending_status_changes", ["expires_at"])
    op.create_index(
        "ix_pending_status_changes_record",
        "pending_status_changes",
        ["pipeline_id", "candidate_id"],
    )


def downgrade() -> None:
    op.drop_index("ix_pending_status_changes_record", table_name="pending_status_changes")
    op.drop_index("ix_pending_status_changes_expires_at", table_name="pending_status_changes")
    op.drop_table("pending_status_changes")
    op.drop_table("client_audit_entries")
    op.drop_index("ix_clients_stage", table_name="clients")
    op.drop_table("clients")
    op.drop_table("pipeline_audit_entries")
    op.drop_index("ix_pipeline_records_pipeline_stage", table_name="pipeline_records")
    op.drop_index("ix_pipeline_records_candidate_id", table_name="pipeline_records")
    op.drop_table("pipeline_records")
    op.drop_table("candidates")

"""
Client model.

Tracks a client's lifecycle stage (Lead, Engaged, Signed) and sub-status.
"""

import uuid
from typing import List, Optional

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from recruitflow.db.base import Base
from recruitflow.models.audit_entry import AuditEntryColumns
from recruitflow.models.base_model import TimestampedModel


class Client(TimestampedModel):
    """Client table - versioned the same way as pipeline records."""

    __tablename__ = "clients"

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    stage: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    # Unset until selected; otherwise a member of the stage's sub-status set
    sub_status: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    history: Mapped[List["ClientAuditEntry"]] = relationship(
        "ClientAuditEntry",
        back_populates="client",
        order_by="ClientAuditEntry.version",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    __mapper_args__ = {"version_id_col": version}


class ClientAuditEntry(AuditEntryColumns, Base):
    """Append-only history row for a client."""

    __tablename__ = "client_audit_entries"

    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False,
    )

    client: Mapped["Client"] = relationship("Client", back_populates="history")

    __table_args__ = (
        UniqueConstraint("client_id", "version", name="uq_client_audit_entries_client_version"),
    )

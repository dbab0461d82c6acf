"""
Audit entry columns shared by pipeline records and clients.

Entries are append-only; each one records the version of its parent that
the change produced.
"""

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import DateTime, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from recruitflow.models.base_model import JSONType
from recruitflow.utils.time import utc_now


class AuditEntryColumns:
    """Declarative mixin with the AuditEntry shape."""

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    # Identity supplied by the auth provider
    actor: Mapped[str] = mapped_column(String(255), nullable=False)

    # StageChange | StatusChange | FieldUpdate
    kind: Mapped[str] = mapped_column(String(30), nullable=False)

    from_value: Mapped[Optional[Any]] = mapped_column(JSONType, nullable=True)
    to_value: Mapped[Optional[Any]] = mapped_column(JSONType, nullable=True)

    note: Mapped[str] = mapped_column(Text, nullable=False)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

"""
Pydantic schemas for audit entries.
"""

from datetime import datetime
from typing import Any, Optional

from recruitflow.core.catalog import AuditKind
from recruitflow.schemas.base import CamelModel


class AuditEntryRead(CamelModel):
    timestamp: datetime
    actor: str
    kind: AuditKind
    from_value: Optional[Any] = None
    to_value: Optional[Any] = None
    note: str
    version: int

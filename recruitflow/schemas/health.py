"""Health check response schemas."""

from typing import Optional

from recruitflow.schemas.base import CamelModel


class SchemaRevision(CamelModel):
    """Applied migration revision against the newest one shipped with the app."""

    current: Optional[str] = None
    head: Optional[str] = None
    up_to_date: bool = False


class PendingBacklog(CamelModel):
    """Unconfirmed status changes; expired ones wait for the next purge."""

    open: int = 0
    expired: int = 0


class HealthRead(CamelModel):
    service: str
    api_ok: bool = True
    db_ok: bool
    schema_revision: SchemaRevision
    pending_status_changes: Optional[PendingBacklog] = None

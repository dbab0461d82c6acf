"""
Models package.

Import all models here so they are registered with SQLAlchemy.
"""

from recruitflow.models.candidate import Candidate
from recruitflow.models.client import Client, ClientAuditEntry
from recruitflow.models.pending_status_change import PendingStatusChange
from recruitflow.models.pipeline_record import PipelineAuditEntry, PipelineRecord

__all__ = [
    "Candidate",
    "Client",
    "ClientAuditEntry",
    "PendingStatusChange",
    "PipelineAuditEntry",
    "PipelineRecord",
]

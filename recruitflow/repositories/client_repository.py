"""
Client repository - versioned store for client lifecycle state.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import flag_modified

from recruitflow.core.catalog import AuditKind, ClientStage
from recruitflow.errors import NotFound
from recruitflow.models.client import Client, ClientAuditEntry
from recruitflow.repositories.versioning import AuditDraft, check_expected_version, versioned_write
from recruitflow.utils.time import utc_now


@dataclass
class ClientDraft:
    stage: ClientStage
    sub_status: Optional[str]


ClientMutation = Callable[[ClientDraft], AuditDraft]


class ClientRepository:
    """Repository for Client database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, client_id: UUID) -> Optional[Client]:
        result = await self.db.execute(select(Client).where(Client.id == client_id))
        return result.scalar_one_or_none()

    async def get_or_raise(self, client_id: UUID) -> Client:
        client = await self.get(client_id)
        if client is None:
            raise NotFound(f"Client {client_id} not found", {"client_id": str(client_id)})
        return client

    async def create(
        self,
        name: str,
        stage: ClientStage,
        sub_status: Optional[str],
        actor: str,
    ) -> Client:
        now = utc_now()
        client = Client(
            name=name,
            stage=stage.value,
            sub_status=sub_status,
            created_at=now,
            updated_at=now,
            history=[
                ClientAuditEntry(
                    timestamp=now,
                    actor=actor,
                    kind=AuditKind.STAGE_CHANGE.value,
                    from_value=None,
                    to_value={"stage": stage.value, "subStatus": sub_status},
                    note=f"Client created in {stage.value}",
                    version=1,
                )
            ],
        )
        self.db.add(client)
        await self.db.flush()
        return client

    async def commit(
        self,
        client_id: UUID,
        expected_version: int,
        mutation: ClientMutation,
    ) -> Client:
        """Apply a mutation to a client under optimistic concurrency."""
        client = await self.get_or_raise(client_id)
        check_expected_version(client.version, expected_version)

        draft = ClientDraft(stage=ClientStage(client.stage), sub_status=client.sub_status)
        entry = mutation(draft)

        now = utc_now()
        async with versioned_write(self.db, client, expected_version):
            client.stage = draft.stage.value
            client.sub_status = draft.sub_status
            client.updated_at = now
            # Always emit the versioned UPDATE, even when stage and sub-status are unchanged
            flag_modified(client, "updated_at")
            client.history.append(
                ClientAuditEntry(
                    timestamp=now,
                    actor=entry.actor,
                    kind=entry.kind.value,
                    from_value=entry.from_value,
                    to_value=entry.to_value,
                    note=entry.note,
                    version=expected_version + 1,
                )
            )
        return client

    async def count_by_stage(self) -> Dict[str, int]:
        result = await self.db.execute(
            select(Client.stage, func.count()).group_by(Client.stage)
        )
        return {stage: count for stage, count in result.all()}

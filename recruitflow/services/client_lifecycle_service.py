"""
Client lifecycle service.

Mirrors the candidate stage engine for clients: Lead, Engaged, Signed with
per-stage sub-statuses. Moves in any direction are allowed; the sub-status
is revalidated against the target stage on every change.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from recruitflow.core.catalog import AuditKind, ClientStage
from recruitflow.core.config import settings
from recruitflow.errors import TransitionBlocked
from recruitflow.models.client import Client
from recruitflow.repositories.client_repository import ClientDraft, ClientMutation, ClientRepository
from recruitflow.repositories.versioning import AuditDraft
from recruitflow.schemas.client import ClientCreate
from recruitflow.services.retry import commit_with_retry
from recruitflow.services.transition_guard import can_change_client_stage

logger = logging.getLogger(__name__)


def _describe(stage: ClientStage, sub_status: Optional[str]) -> str:
    return f"{stage.value}/{sub_status}" if sub_status else stage.value


class ClientLifecycleService:
    """Service for client stage changes."""

    def __init__(self, db: AsyncSession, max_retries: Optional[int] = None):
        self.db = db
        self.repo = ClientRepository(db)
        self.max_retries = settings.COMMIT_MAX_RETRIES if max_retries is None else max_retries

    async def get_client(self, client_id: UUID) -> Client:
        return await self.repo.get_or_raise(client_id)

    async def create_client(self, data: ClientCreate, actor: str) -> Client:
        decision = can_change_client_stage(data.stage, data.sub_status)
        if decision.blocked:
            raise TransitionBlocked(decision.reason, {"stage": data.stage.value, "sub_status": data.sub_status})

        client = await self.repo.create(data.name, ClientStage(data.stage), data.sub_status, actor)
        logger.info("Created client %s in %s", client.id, _describe(ClientStage(data.stage), data.sub_status))
        return client

    async def change_client_stage(
        self,
        client_id: UUID,
        target_stage: ClientStage,
        target_sub_status: Optional[str],
        actor: str,
        note: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> Client:
        """
        Change a client's stage and sub-status together.

        A None sub-status resets the selection for the new stage.

        Raises:
            TransitionBlocked: sub-status not valid for target_stage
            NotFound: unknown client
            VersionConflict: expected_version is stale
        """
        target = ClientStage(target_stage)
        decision = can_change_client_stage(target, target_sub_status)
        if decision.blocked:
            logger.warning(
                "Blocked client %s stage change to %s: %s",
                client_id, _describe(target, target_sub_status), decision.reason,
            )
            raise TransitionBlocked(
                decision.reason,
                {"target_stage": target.value, "target_sub_status": target_sub_status},
            )

        def mutate(draft: ClientDraft) -> AuditDraft:
            before = {"stage": draft.stage.value, "subStatus": draft.sub_status}
            previous = _describe(draft.stage, draft.sub_status)
            draft.stage = target
            draft.sub_status = target_sub_status
            return AuditDraft(
                actor=actor,
                kind=AuditKind.STAGE_CHANGE,
                note=note or f"Moved client from {previous} to {_describe(target, target_sub_status)}",
                from_value=before,
                to_value={"stage": target.value, "subStatus": target_sub_status},
            )

        async def build(_: Client) -> ClientMutation:
            return mutate

        client = await commit_with_retry(
            load_current=lambda: self.repo.get_or_raise(client_id),
            build_mutation=build,
            commit=lambda version, mutation: self.repo.commit(client_id, version, mutation),
            expected_version=expected_version,
            max_retries=self.max_retries,
            label="change_client_stage",
        )
        logger.info("Client %s now %s (v%s)", client_id, _describe(target, target_sub_status), client.version)
        return client

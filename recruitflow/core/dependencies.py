"""
Shared FastAPI dependencies.

The actor identity is supplied by the upstream identity provider through
request headers; this service trusts them as given.
"""

from dataclasses import dataclass

from fastapi import Depends, Header

from recruitflow.core.permissions import (
    Roles,
    check_can_write_clients,
    check_can_write_pipelines,
    raise_if_forbidden,
)
from recruitflow.db.session import get_db  # noqa: F401  re-exported for routers


@dataclass(frozen=True)
class Actor:
    """Authenticated caller as resolved by the identity provider."""

    id: str
    role: str


async def get_actor(
    x_actor_id: str = Header(default="system"),
    x_actor_role: str = Header(default=Roles.RECRUITER),
) -> Actor:
    return Actor(id=x_actor_id, role=x_actor_role)


async def require_pipeline_writer(actor: Actor = Depends(get_actor)) -> Actor:
    raise_if_forbidden(check_can_write_pipelines(actor.role), "change pipeline records")
    return actor


async def require_client_writer(actor: Actor = Depends(get_actor)) -> Actor:
    raise_if_forbidden(check_can_write_clients(actor.role), "change client stages")
    return actor

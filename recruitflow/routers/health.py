"""
Health router - liveness plus database, migration and pending-change checks.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from alembic.config import Config
from alembic.script import ScriptDirectory
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from recruitflow.core.config import settings
from recruitflow.db.session import get_db
from recruitflow.repositories.pending_change_repository import PendingChangeRepository
from recruitflow.schemas.health import HealthRead, PendingBacklog, SchemaRevision

logger = logging.getLogger(__name__)

router = APIRouter()

PROJECT_ROOT = Path(__file__).resolve().parents[2]


@lru_cache(maxsize=1)
def alembic_head_revision() -> Optional[str]:
    """Head revision of the bundled migration scripts, None when they are not shipped."""
    cfg_path = PROJECT_ROOT / "alembic.ini"
    script_location = PROJECT_ROOT / "alembic"
    if not cfg_path.exists() or not script_location.exists():
        return None

    config = Config(str(cfg_path))
    config.set_main_option("script_location", str(script_location))
    return ScriptDirectory.from_config(config).get_current_head()


async def _pending_backlog(db: AsyncSession) -> Optional[PendingBacklog]:
    try:
        open_count, expired_count = await PendingChangeRepository(db).count_open_and_expired()
    except SQLAlchemyError as exc:
        logger.warning("Health check could not count pending status changes: %s", exc)
        await db.rollback()
        return None
    return PendingBacklog(open=open_count, expired=expired_count)


async def _applied_revision(db: AsyncSession) -> Optional[str]:
    try:
        result = await db.execute(text("SELECT version_num FROM alembic_version"))
    except SQLAlchemyError:
        # Tables created without alembic
        await db.rollback()
        return None
    return result.scalar_one_or_none()


@router.get("/health", response_model=HealthRead)
async def health_check(db: AsyncSession = Depends(get_db)) -> HealthRead:
    """Report database reachability, migration state and the pending status change backlog."""
    head = alembic_head_revision()

    try:
        await db.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as exc:
        logger.error("Health check could not reach the database: %s", exc)
        return HealthRead(service=settings.APP_NAME, db_ok=False, schema_revision=SchemaRevision(head=head))

    backlog = await _pending_backlog(db)
    current = await _applied_revision(db)
    return HealthRead(
        service=settings.APP_NAME,
        db_ok=True,
        schema_revision=SchemaRevision(
            current=current,
            head=head,
            up_to_date=current is not None and current == head,
        ),
        pending_status_changes=backlog,
    )

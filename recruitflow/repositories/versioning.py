"""
Optimistic concurrency helpers shared by versioned repositories.

Models map their `version` column as SQLAlchemy's version_id_col, so the
UPDATE emitted on flush carries `WHERE version = :expected`. A concurrent
writer that committed first makes that UPDATE match no row and SQLAlchemy
raises StaleDataError, which is reported as VersionConflict.

The versioned write runs inside a SAVEPOINT. Losing the race rolls back
only that savepoint, so work the caller already did in the same
transaction is kept for the retry.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from recruitflow.core.catalog import AuditKind
from recruitflow.errors import VersionConflict

logger = logging.getLogger(__name__)


@dataclass
class AuditDraft:
    """Audit entry produced by a mutation; the store assigns timestamp and version."""

    actor: str
    kind: AuditKind
    note: str
    from_value: Optional[Any] = None
    to_value: Optional[Any] = None


def check_expected_version(current_version: int, expected_version: int) -> None:
    if current_version != expected_version:
        raise VersionConflict(expected_version, current_version)


@asynccontextmanager
async def versioned_write(
    db: AsyncSession,
    instance: Any,
    expected_version: int,
) -> AsyncGenerator[None, None]:
    """
    Write changes to a versioned instance inside a savepoint.

    Changes made in the block are flushed before the savepoint is released.
    A lost version race rolls back the savepoint, expires the instance so
    the next read reloads it, and raises VersionConflict.
    """
    try:
        async with db.begin_nested():
            yield
            await db.flush()
    except StaleDataError as exc:
        logger.warning("Concurrent writer won at version %s; rolling back savepoint", expected_version)
        db.expire(instance)
        raise VersionConflict(expected_version) from exc

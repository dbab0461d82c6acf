"""
Bounded re-read/retry loop for versioned commits.

Only VersionConflict is retried, and only when the caller did not pin an
expected version. A pinned version means the caller decided against a
specific view of the record, so a conflict is surfaced as-is.
"""

import logging
from typing import Awaitable, Callable, Optional, TypeVar

from recruitflow.errors import VersionConflict

logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M")


async def commit_with_retry(
    load_current: Callable[[], Awaitable[T]],
    build_mutation: Callable[[T], Awaitable[M]],
    commit: Callable[[int, M], Awaitable[T]],
    expected_version: Optional[int],
    max_retries: int,
    label: str,
) -> T:
    """
    Load, build the mutation (guards run here), commit; repeat on conflict.

    build_mutation is re-run on every attempt so guards always see the
    freshest committed state. A lost race only rolls back the store's
    savepoint, so earlier writes in the caller's transaction carry over
    into the next attempt.
    """
    attempt = 0
    while True:
        current = await load_current()
        version = current.version if expected_version is None else expected_version
        mutation = await build_mutation(current)
        try:
            return await commit(version, mutation)
        except VersionConflict:
            if expected_version is not None or attempt >= max_retries:
                logger.warning("Version conflict on %s surfaced to caller after %s retries", label, attempt)
                raise
            attempt += 1
            logger.warning("Version conflict on %s; retrying (%s/%s)", label, attempt, max_retries)

"""
Request / confirm / cancel protocol for candidate status changes.
"""

import asyncio
import uuid
from datetime import timedelta

import pytest

from recruitflow.core.catalog import AuditKind, CandidateStatus, Stage
from recruitflow.errors import Expired, NotFound, VersionConflict
from recruitflow.models.pending_status_change import PendingStatusChange
from recruitflow.repositories.pending_change_repository import PendingChangeRepository
from recruitflow.services.stage_transition_service import StageTransitionService
from recruitflow.utils.time import utc_now

ACTOR = "recruiter@test.com"


def _snapshot(record):
    return {
        "stage": record.current_stage,
        "status": record.current_status,
        "fields": record.fields,
        "version": record.version,
        "history": [(e.version, e.kind, e.note) for e in record.history],
        "updated_at": record.updated_at,
    }


@pytest.mark.asyncio
async def test_request_then_cancel_leaves_record_unchanged(db, seed_record):
    pipeline_id, candidate_id = await seed_record()
    service = StageTransitionService(db)
    before = _snapshot(await service.get_record(pipeline_id, candidate_id))

    pending = await service.request_status_change(pipeline_id, candidate_id, CandidateStatus.REJECTED, ACTOR)
    await db.commit()
    assert _snapshot(await service.get_record(pipeline_id, candidate_id)) == before

    await service.cancel_status_change(pending.id)
    await db.commit()

    assert _snapshot(await service.get_record(pipeline_id, candidate_id)) == before
    assert await PendingChangeRepository(db).get_by_id(pending.id) is None


@pytest.mark.asyncio
async def test_confirm_applies_status_and_appends_entry(db, seed_record):
    pipeline_id, candidate_id = await seed_record()
    service = StageTransitionService(db)

    pending = await service.request_status_change(
        pipeline_id, candidate_id, CandidateStatus.SHORTLISTED, ACTOR, note="Passed phone screen"
    )
    await db.commit()
    assert pending.requested_by == ACTOR

    record = await service.confirm_status_change(pending.id, "lead@test.com", pipeline_id, candidate_id)
    await db.commit()

    assert record.current_status == CandidateStatus.SHORTLISTED.value
    assert record.version == 2
    entry = record.history[-1]
    assert entry.kind == AuditKind.STATUS_CHANGE.value
    assert entry.actor == "lead@test.com"
    assert entry.from_value == "Active"
    assert entry.to_value == "Shortlisted"
    assert entry.note == "Passed phone screen"


@pytest.mark.asyncio
async def test_confirm_twice_is_not_found(db, seed_record):
    pipeline_id, candidate_id = await seed_record()
    service = StageTransitionService(db)
    pending = await service.request_status_change(pipeline_id, candidate_id, CandidateStatus.OFFER, ACTOR)
    await service.confirm_status_change(pending.id, ACTOR)
    await db.commit()

    with pytest.raises(NotFound):
        await service.confirm_status_change(pending.id, ACTOR)
    with pytest.raises(NotFound):
        await service.cancel_status_change(pending.id)


@pytest.mark.asyncio
async def test_confirm_after_expiry_raises_and_discards(session_maker, db, seed_record):
    pipeline_id, candidate_id = await seed_record()
    service = StageTransitionService(db, pending_ttl_seconds=0)

    pending = await service.request_status_change(pipeline_id, candidate_id, CandidateStatus.WITHDRAWN, ACTOR)
    await db.commit()

    with pytest.raises(Expired):
        await service.confirm_status_change(pending.id, ACTOR)
    await db.commit()

    async with session_maker() as fresh:
        record = await StageTransitionService(fresh).get_record(pipeline_id, candidate_id)
        assert record.current_status == CandidateStatus.ACTIVE.value
        assert record.version == 1
        assert await PendingChangeRepository(fresh).get_by_id(pending.id) is None


@pytest.mark.asyncio
async def test_concurrent_confirms_apply_status_once(session_maker, db, seed_record):
    pipeline_id, candidate_id = await seed_record()
    pending = await StageTransitionService(db).request_status_change(
        pipeline_id, candidate_id, CandidateStatus.OFFER, ACTOR
    )
    await db.commit()

    async def confirm(actor):
        async with session_maker() as session:
            try:
                await StageTransitionService(session).confirm_status_change(pending.id, actor)
            except NotFound:
                await session.rollback()
                return "not found"
            await session.commit()
            return "applied"

    outcomes = await asyncio.gather(confirm("lead@test.com"), confirm("manager@test.com"))

    assert sorted(outcomes) == ["applied", "not found"]
    async with session_maker() as fresh:
        record = await StageTransitionService(fresh).get_record(pipeline_id, candidate_id)
        assert record.current_status == CandidateStatus.OFFER.value
        assert record.version == 2
        status_entries = [e for e in record.history if e.kind == AuditKind.STATUS_CHANGE.value]
        assert len(status_entries) == 1


@pytest.mark.asyncio
async def test_failed_confirmation_keeps_the_pending_change(session_maker, db, seed_record):
    pipeline_id, candidate_id = await seed_record()
    service = StageTransitionService(db, max_retries=0)
    # Caches the record at version 1
    pending = await service.request_status_change(pipeline_id, candidate_id, CandidateStatus.OFFER, ACTOR)
    await db.commit()

    async with session_maker() as other:
        await StageTransitionService(other).move_candidate_to_stage(pipeline_id, candidate_id, Stage.INTERVIEW, ACTOR)
        await other.commit()

    with pytest.raises(VersionConflict):
        await service.confirm_status_change(pending.id, ACTOR)
    await db.rollback()

    assert await PendingChangeRepository(db).get_by_id(pending.id) is not None
    record = await service.confirm_status_change(pending.id, ACTOR)
    await db.commit()
    assert record.current_status == CandidateStatus.OFFER.value
    assert record.version == 3


@pytest.mark.asyncio
async def test_backlog_counts_split_open_and_expired(db, seed_record):
    pipeline_id, candidate_id = await seed_record()
    db.add(
        PendingStatusChange(
            pipeline_id=pipeline_id,
            candidate_id=candidate_id,
            target_status=CandidateStatus.REJECTED.value,
            requested_by=ACTOR,
            created_at=utc_now() - timedelta(hours=2),
            expires_at=utc_now() - timedelta(hours=1),
        )
    )
    await db.commit()
    repo = PendingChangeRepository(db)
    assert await repo.count_open_and_expired() == (0, 1)

    await StageTransitionService(db).request_status_change(pipeline_id, candidate_id, CandidateStatus.OFFER, ACTOR)
    await db.commit()

    assert await repo.count_open_and_expired() == (1, 0)


@pytest.mark.asyncio
async def test_pending_change_must_match_the_record_path(db, seed_record):
    pipeline_id, candidate_id = await seed_record()
    service = StageTransitionService(db)
    pending = await service.request_status_change(pipeline_id, candidate_id, CandidateStatus.OFFER, ACTOR)
    await db.commit()

    with pytest.raises(NotFound):
        await service.confirm_status_change(pending.id, ACTOR, pipeline_id=uuid.uuid4())

    record = await service.get_record(pipeline_id, candidate_id)
    assert record.current_status == CandidateStatus.ACTIVE.value


@pytest.mark.asyncio
async def test_requesting_purges_expired_changes(db, seed_record):
    pipeline_id, candidate_id = await seed_record()
    stale = PendingStatusChange(
        pipeline_id=pipeline_id,
        candidate_id=candidate_id,
        target_status=CandidateStatus.REJECTED.value,
        requested_by=ACTOR,
        created_at=utc_now() - timedelta(hours=2),
        expires_at=utc_now() - timedelta(hours=1),
    )
    db.add(stale)
    await db.commit()
    stale_id = stale.id

    await StageTransitionService(db).request_status_change(pipeline_id, candidate_id, CandidateStatus.OFFER, ACTOR)
    await db.commit()

    assert await PendingChangeRepository(db).get_by_id(stale_id) is None


@pytest.mark.asyncio
async def test_request_for_unknown_record_is_not_found(db):
    with pytest.raises(NotFound):
        await StageTransitionService(db).request_status_change(
            uuid.uuid4(), uuid.uuid4(), CandidateStatus.OFFER, ACTOR
        )

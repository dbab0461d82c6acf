import uuid

import pytest

from recruitflow.core.catalog import CandidateStatus, Stage
from recruitflow.errors import NotFound
from recruitflow.services.pipeline_query_service import PipelineQueryService
from recruitflow.services.stage_transition_service import StageTransitionService

ACTOR = "recruiter@test.com"


@pytest.mark.asyncio
async def test_stage_counts_cover_every_stage(db, seed_record):
    pipeline_id, candidate_id = await seed_record()
    service = StageTransitionService(db)
    await service.move_candidate_to_stage(pipeline_id, candidate_id, Stage.VERIFICATION, ACTOR)
    await db.commit()

    counts = await PipelineQueryService(db).count_by_stage(pipeline_id)

    assert list(counts) == list(Stage)
    assert counts[Stage.VERIFICATION] == 1
    assert sum(counts.values()) == 1


@pytest.mark.asyncio
async def test_stage_counts_for_empty_pipeline_are_zero(db):
    counts = await PipelineQueryService(db).count_by_stage(uuid.uuid4())
    assert set(counts.values()) == {0}


@pytest.mark.asyncio
async def test_list_candidates_in_stage_is_scoped_to_pipeline(db, seed_record):
    pipeline_id, candidate_id = await seed_record()
    other_pipeline, _ = await seed_record()

    query = PipelineQueryService(db)
    records = await query.list_candidates_in_stage(pipeline_id, Stage.SOURCING)

    assert [r.candidate_id for r in records] == [candidate_id]
    assert all(r.pipeline_id != other_pipeline for r in records)


@pytest.mark.asyncio
async def test_badge_follows_status_until_terminal(db, seed_record):
    pipeline_id, candidate_id = await seed_record()
    service = StageTransitionService(db)
    query = PipelineQueryService(db)

    badge = await query.display_badge(candidate_id, pipeline_id)
    assert (badge.label, badge.color_token) == ("Active", "blue")

    pending = await service.request_status_change(pipeline_id, candidate_id, CandidateStatus.OFFER, ACTOR)
    await service.confirm_status_change(pending.id, ACTOR)
    await db.commit()
    badge = await query.display_badge(candidate_id, pipeline_id)
    assert (badge.label, badge.color_token) == ("Offer", "purple")

    await service.move_candidate_to_stage(pipeline_id, candidate_id, Stage.DISQUALIFIED, ACTOR)
    await db.commit()
    badge = await query.display_badge(candidate_id)
    assert (badge.label, badge.color_token) == ("Disqualified", "red")


@pytest.mark.asyncio
async def test_badge_for_candidate_outside_any_pipeline(db):
    with pytest.raises(NotFound):
        await PipelineQueryService(db).display_badge(uuid.uuid4())

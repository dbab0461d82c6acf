"""
Versioned commits on the pipeline record store, including lost races
between two sessions.
"""

import pytest

from recruitflow.core.catalog import AuditKind, Stage
from recruitflow.errors import TransitionBlocked, VersionConflict
from recruitflow.repositories.pipeline_record_repository import PipelineRecordRepository, RecordDraft
from recruitflow.repositories.versioning import AuditDraft
from recruitflow.services.candidate_directory_service import CandidateDirectoryService
from recruitflow.services.stage_transition_service import StageTransitionService

ACTOR = "recruiter@test.com"


def move_to(stage):
    def mutate(draft: RecordDraft) -> AuditDraft:
        previous = draft.current_stage
        draft.current_stage = stage
        return AuditDraft(
            actor=ACTOR,
            kind=AuditKind.STAGE_CHANGE,
            note=f"{previous.value} -> {stage.value}",
            from_value=previous.value,
            to_value=stage.value,
        )

    return mutate


def failing_mutation(draft: RecordDraft) -> AuditDraft:
    draft.current_stage = Stage.HIRED
    raise RuntimeError("mutation refused")


@pytest.mark.asyncio
async def test_commit_bumps_version_and_appends_entry(db, seed_record):
    pipeline_id, candidate_id = await seed_record()
    repo = PipelineRecordRepository(db)

    record = await repo.commit(pipeline_id, candidate_id, 1, move_to(Stage.SCREENING))
    await db.commit()

    assert record.version == 2
    assert record.current_stage == Stage.SCREENING.value
    assert [e.version for e in record.history] == [1, 2]


@pytest.mark.asyncio
async def test_commit_with_wrong_expected_version_conflicts(db, seed_record):
    pipeline_id, candidate_id = await seed_record()
    repo = PipelineRecordRepository(db)

    with pytest.raises(VersionConflict) as exc_info:
        await repo.commit(pipeline_id, candidate_id, 5, move_to(Stage.SCREENING))
    assert exc_info.value.expected_version == 5
    assert exc_info.value.current_version == 1


@pytest.mark.asyncio
async def test_failing_mutation_leaves_record_untouched(db, seed_record):
    pipeline_id, candidate_id = await seed_record()
    repo = PipelineRecordRepository(db)

    with pytest.raises(RuntimeError):
        await repo.commit(pipeline_id, candidate_id, 1, failing_mutation)

    record = await repo.get(pipeline_id, candidate_id)
    assert record.current_stage == Stage.SOURCING.value
    assert record.version == 1


@pytest.mark.asyncio
async def test_two_commits_on_same_version_one_wins(session_maker, seed_record):
    pipeline_id, candidate_id = await seed_record()

    async with session_maker() as first, session_maker() as second:
        first_repo = PipelineRecordRepository(first)
        second_repo = PipelineRecordRepository(second)

        # Both writers read version 1
        assert (await first_repo.get(pipeline_id, candidate_id)).version == 1
        assert (await second_repo.get(pipeline_id, candidate_id)).version == 1

        await first_repo.commit(pipeline_id, candidate_id, 1, move_to(Stage.SCREENING))
        await first.commit()

        with pytest.raises(VersionConflict):
            await second_repo.commit(pipeline_id, candidate_id, 1, move_to(Stage.INTERVIEW))

    async with session_maker() as fresh:
        record = await PipelineRecordRepository(fresh).get(pipeline_id, candidate_id)
        assert record.version == 2
        assert record.current_stage == Stage.SCREENING.value
        assert len(record.history) == 2


@pytest.mark.asyncio
async def test_unpinned_commit_retries_after_losing_a_race(session_maker, seed_record):
    pipeline_id, candidate_id = await seed_record()

    async with session_maker() as first, session_maker() as second:
        loser = StageTransitionService(first, max_retries=2)
        winner = StageTransitionService(second)

        # Loser caches version 1 before the winner commits
        await loser.get_record(pipeline_id, candidate_id)

        await winner.update_stage_field(pipeline_id, candidate_id, Stage.SOURCING, "notes", "first", ACTOR)
        await second.commit()

        record = await loser.move_candidate_to_stage(pipeline_id, candidate_id, Stage.INTERVIEW, ACTOR)
        await first.commit()

        assert record.version == 3
        assert record.current_stage == Stage.INTERVIEW.value
        assert record.fields == {"Sourcing": {"notes": "first"}}


@pytest.mark.asyncio
async def test_lost_race_keeps_earlier_work_in_the_same_transaction(session_maker, seed_record):
    pipeline_id, candidate_id = await seed_record(is_temp=True)

    async with session_maker() as first, session_maker() as second:
        loser = StageTransitionService(first, max_retries=2)
        winner = StageTransitionService(second)

        await loser.get_record(pipeline_id, candidate_id)

        await winner.update_stage_field(pipeline_id, candidate_id, Stage.SOURCING, "notes", "first", ACTOR)
        await second.commit()

        # Promotion and stage move form one unit of work; the move loses the race once
        await CandidateDirectoryService(first).promote(candidate_id)
        record = await loser.move_candidate_to_stage(pipeline_id, candidate_id, Stage.SCREENING, ACTOR)
        await first.commit()

        assert record.version == 3
        assert record.current_stage == Stage.SCREENING.value

    async with session_maker() as fresh:
        candidate = await CandidateDirectoryService(fresh).resolve(candidate_id)
        assert candidate.is_temp is False
        record = await PipelineRecordRepository(fresh).get(pipeline_id, candidate_id)
        assert [e.version for e in record.history] == [1, 2, 3]


@pytest.mark.asyncio
async def test_retry_reevaluates_guard_against_fresh_state(session_maker, seed_record):
    pipeline_id, candidate_id = await seed_record()

    async with session_maker() as first, session_maker() as second:
        loser = StageTransitionService(first, max_retries=2)
        winner = StageTransitionService(second)

        await loser.get_record(pipeline_id, candidate_id)

        await winner.move_candidate_to_stage(pipeline_id, candidate_id, Stage.HIRED, ACTOR)
        await second.commit()

        with pytest.raises(TransitionBlocked):
            await loser.move_candidate_to_stage(pipeline_id, candidate_id, Stage.INTERVIEW, ACTOR)


@pytest.mark.asyncio
async def test_list_and_count_by_stage(db, seed_record):
    pipeline_id, first_candidate = await seed_record()
    service = StageTransitionService(db)
    repo = PipelineRecordRepository(db)

    await service.move_candidate_to_stage(pipeline_id, first_candidate, Stage.INTERVIEW, ACTOR)
    await db.commit()

    assert await repo.count_by_stage(pipeline_id) == {"Interview": 1}
    assert [r.candidate_id for r in await repo.list_for_pipeline(pipeline_id, Stage.INTERVIEW)] == [first_candidate]
    assert await repo.list_for_pipeline(pipeline_id, Stage.SOURCING) == []

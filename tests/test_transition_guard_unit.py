import pytest

from recruitflow.core.catalog import CandidateStatus, ClientStage, Stage, TERMINAL_STAGES
from recruitflow.services.pipeline_query_service import badge_for
from recruitflow.services.transition_guard import (
    INVALID_SUB_STATUS_REASON,
    TEMP_CANDIDATE_REASON,
    TERMINAL_STAGE_REASON,
    can_change_client_stage,
    can_change_status,
    can_transition,
)

NON_TERMINAL = [s for s in Stage if s not in TERMINAL_STAGES]


@pytest.mark.unit
@pytest.mark.parametrize("current", NON_TERMINAL)
@pytest.mark.parametrize("target", list(Stage))
def test_any_move_from_non_terminal_is_allowed(current, target):
    decision = can_transition(current, target, is_temp_candidate=False)
    assert decision.allowed
    assert decision.reason is None


@pytest.mark.unit
@pytest.mark.parametrize("current", sorted(TERMINAL_STAGES))
@pytest.mark.parametrize("target", list(Stage))
def test_terminal_stage_blocks_every_move(current, target):
    decision = can_transition(current, target, is_temp_candidate=False)
    assert decision.blocked
    assert decision.reason == TERMINAL_STAGE_REASON


@pytest.mark.unit
@pytest.mark.parametrize("current", NON_TERMINAL)
def test_temp_candidate_blocks_stage_moves_with_literal_message(current):
    decision = can_transition(current, Stage.INTERVIEW, is_temp_candidate=True)
    assert decision.blocked
    assert decision.reason == (
        "Change the status of the candidate (received), then promote the candidate, then change the stage."
    )
    assert decision.reason == TEMP_CANDIDATE_REASON


@pytest.mark.unit
def test_terminal_rule_is_checked_before_temp_rule():
    decision = can_transition(Stage.HIRED, Stage.SOURCING, is_temp_candidate=True)
    assert decision.reason == TERMINAL_STAGE_REASON


@pytest.mark.unit
def test_status_changes_are_always_allowed():
    for current in CandidateStatus:
        for target in CandidateStatus:
            assert can_change_status(current, target).allowed


@pytest.mark.unit
def test_client_sub_status_must_belong_to_target_stage():
    assert can_change_client_stage(ClientStage.ENGAGED, "Calls").allowed
    assert can_change_client_stage(ClientStage.SIGNED, None).allowed

    decision = can_change_client_stage(ClientStage.LEAD, "Calls")
    assert decision.blocked
    assert decision.reason == INVALID_SUB_STATUS_REASON


@pytest.mark.unit
def test_badge_prefers_terminal_stage_over_status():
    hired = badge_for(Stage.HIRED, CandidateStatus.OFFER)
    assert hired.label == "Hired"
    assert hired.color_token == "emerald"

    interviewing = badge_for(Stage.INTERVIEW, CandidateStatus.SHORTLISTED)
    assert interviewing.label == "Shortlisted"
    assert interviewing.color_token == "green"

"""
Transition guard - pure predicates over pipeline and client state.

Nothing here touches the database. The engine evaluates a guard before
every commit attempt and refuses the mutation when the guard blocks it.
"""

from dataclasses import dataclass
from typing import Optional

from recruitflow.core.catalog import (
    CandidateStatus,
    ClientStage,
    Stage,
    is_terminal,
    sub_statuses_for,
)

TERMINAL_STAGE_REASON = "terminal stage"

TEMP_CANDIDATE_REASON = (
    "Change the status of the candidate (received), then promote the candidate, then change the stage."
)

INVALID_SUB_STATUS_REASON = "sub-status not valid for stage"


@dataclass(frozen=True)
class GuardDecision:
    """Allowed, or Blocked with a human-readable reason."""

    allowed: bool
    reason: Optional[str] = None

    @classmethod
    def allow(cls) -> "GuardDecision":
        return cls(allowed=True)

    @classmethod
    def block(cls, reason: str) -> "GuardDecision":
        return cls(allowed=False, reason=reason)

    @property
    def blocked(self) -> bool:
        return not self.allowed


def can_transition(current_stage: Stage, target_stage: Stage, is_temp_candidate: bool) -> GuardDecision:
    """
    Decide whether a candidate may move from current_stage to target_stage.

    Rules, in order:
        1. a terminal current stage blocks every move
        2. a temp candidate must be promoted before any stage move
        3. anything else is allowed, including backward moves and skips

    No (current, target) pair is restricted on its own.
    """
    if is_terminal(current_stage):
        return GuardDecision.block(TERMINAL_STAGE_REASON)
    if is_temp_candidate:
        return GuardDecision.block(TEMP_CANDIDATE_REASON)
    return GuardDecision.allow()


def can_change_status(current_status: CandidateStatus, target_status: CandidateStatus) -> GuardDecision:
    """
    Status changes are always allowed once the candidate resolves.

    The temp-candidate rule does not apply to statuses. Every allowed
    status change still has to be confirmed before it is committed.
    """
    return GuardDecision.allow()


def can_change_client_stage(
    target_stage: ClientStage,
    target_sub_status: Optional[str],
) -> GuardDecision:
    """A selected sub-status must belong to the target stage's set."""
    if target_sub_status is None:
        return GuardDecision.allow()
    if target_sub_status not in sub_statuses_for(target_stage):
        return GuardDecision.block(INVALID_SUB_STATUS_REASON)
    return GuardDecision.allow()

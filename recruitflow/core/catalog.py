"""
Entity catalog for the recruitment pipeline.

Canonical definitions of pipeline stages, candidate statuses, client
lifecycle stages and the field schema each stage recognizes. Every other
module reads the taxonomy from here; adding a stage or a field is a change
to this file only.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import AnyHttpUrl, TypeAdapter, ValidationError


class Stage(str, Enum):
    """Candidate position within a job pipeline."""

    SCREENING = "Screening"
    SOURCING_REVIEW_COMPLETED = "SourcingReviewCompleted"
    SOURCING = "Sourcing"
    INTERVIEW = "Interview"
    VERIFICATION = "Verification"
    ONBOARDING = "Onboarding"
    HIRED = "Hired"
    DISQUALIFIED = "Disqualified"


TERMINAL_STAGES = frozenset({Stage.HIRED, Stage.DISQUALIFIED})

# Candidates enter a pipeline in Sourcing, or in Screening when created directly into review
INITIAL_STAGES = (Stage.SOURCING, Stage.SCREENING)
DEFAULT_INITIAL_STAGE = Stage.SOURCING


class CandidateStatus(str, Enum):
    """Outcome tag on a candidate's application, orthogonal to stage."""

    ACTIVE = "Active"
    INACTIVE = "Inactive"
    SHORTLISTED = "Shortlisted"
    INTERVIEWING = "Interviewing"
    OFFER = "Offer"
    HIRED = "Hired"
    REJECTED = "Rejected"
    WITHDRAWN = "Withdrawn"


DEFAULT_STATUS = CandidateStatus.ACTIVE


class ClientStage(str, Enum):
    LEAD = "Lead"
    ENGAGED = "Engaged"
    SIGNED = "Signed"


CLIENT_SUB_STATUSES: Dict[ClientStage, Tuple[str, ...]] = {
    ClientStage.LEAD: ("New", "Contacted", "Qualified"),
    ClientStage.ENGAGED: (
        "RepliedToMessage",
        "Calls",
        "AttendedMeeting",
        "ProfileSent",
        "ProposalSent",
        "Negotiating",
    ),
    ClientStage.SIGNED: ("ContractSent", "Active", "Onboarding"),
}


class AuditKind(str, Enum):
    STAGE_CHANGE = "StageChange"
    STATUS_CHANGE = "StatusChange"
    FIELD_UPDATE = "FieldUpdate"


DISQUALIFICATION_REASONS: Tuple[str, ...] = (
    "Candidate Opted Out",
    "Budget Exceeded",
    "Location Preferences",
    "Other Considerations",
    "Need Female Candidate",
    "Not Matching the Role",
    "Overqualified for Function",
    "Need Arabs Nationals",
    "Need Saudi Nationals",
    "Need Male Candidate",
)


# ====================================================================
# Stage field schemas
# ====================================================================


class FieldType(str, Enum):
    STRING = "string"
    TEXT = "text"
    DATE = "date"
    DATETIME = "datetime"
    ENUM = "enum"
    URL = "url"
    RATING = "rating"


_date_adapter = TypeAdapter(date)
_datetime_adapter = TypeAdapter(datetime)
_url_adapter = TypeAdapter(AnyHttpUrl)
_rating_adapter = TypeAdapter(int)

RATING_RANGE = (1, 5)


@dataclass(frozen=True)
class FieldSpec:
    """One recognized field of a stage: key, display label, value type."""

    key: str
    label: str
    type: FieldType
    options: Tuple[str, ...] = ()

    def coerce(self, value: Any) -> Any:
        """
        Validate and normalize a value for storage.

        Returns a JSON-safe value (dates become ISO strings, ratings ints).
        None clears the field and is returned unchanged.

        Raises:
            ValueError: if the value does not fit the field type
        """
        if value is None:
            return None

        try:
            if self.type == FieldType.DATE:
                return _date_adapter.validate_python(value).isoformat()
            if self.type == FieldType.DATETIME:
                return _datetime_adapter.validate_python(value).isoformat()
            if self.type == FieldType.URL:
                return str(_url_adapter.validate_python(value))
            if self.type == FieldType.RATING:
                rating = _rating_adapter.validate_python(value)
                low, high = RATING_RANGE
                if not low <= rating <= high:
                    raise ValueError(f"{self.key} must be between {low} and {high}")
                return rating
        except ValidationError as exc:
            raise ValueError(f"{self.key} expects a {self.type.value} value") from exc

        if not isinstance(value, str):
            raise ValueError(f"{self.key} expects a {self.type.value} value")
        if self.type == FieldType.ENUM and value not in self.options:
            raise ValueError(f"{self.key} must be one of: {', '.join(self.options)}")
        return value


def _f(key: str, label: str, type_: FieldType, options: Tuple[str, ...] = ()) -> FieldSpec:
    return FieldSpec(key=key, label=label, type=type_, options=options)


_PROGRESS = ("Pending", "In Progress", "Complete")
_RATINGS = ("1", "2", "3", "4", "5")

STAGE_FIELD_SCHEMAS: Dict[Stage, Tuple[FieldSpec, ...]] = {
    Stage.SOURCING: (
        _f("sourcingDate", "Sourcing Date", FieldType.DATE),
        _f("connection", "Sourcing Channel", FieldType.ENUM, ("LinkedIn", "Indeed", "Referral", "Direct", "Other")),
        _f("referredBy", "Referred By", FieldType.STRING),
        _f("sourcingRating", "Sourcing Rating", FieldType.RATING),
        _f(
            "outreachChannel",
            "Outreach Channel",
            FieldType.ENUM,
            ("Email", "Phone", "LinkedIn Message", "WhatsApp", "Other"),
        ),
        _f("sourcingDueDate", "Sourcing Due Date", FieldType.DATE),
        _f("followUpDateTime", "Follow-up Date & Time", FieldType.DATETIME),
        _f("notes", "Notes", FieldType.TEXT),
        _f("sourcingStatus", "Status", FieldType.ENUM, ("Pending", "In Progress", "Completed")),
    ),
    Stage.SCREENING: (
        _f("screeningDate", "Screening Date", FieldType.DATE),
        _f("cvSubmissionDate", "CV Submission Date", FieldType.DATE),
        _f("aemsInterviewDate", "AEMS Interview Date", FieldType.DATETIME),
        _f("screeningStatus", "Screening Status", FieldType.ENUM, _PROGRESS),
        _f("screeningRating", "Screening Rating", FieldType.RATING),
        _f("screeningFollowUpDate", "Follow-up Date", FieldType.DATE),
        _f("screeningDueDate", "Screening Due Date", FieldType.DATE),
        _f("screeningNotes", "Screening Notes", FieldType.TEXT),
        _f("technicalAssessment", "Technical Assessment", FieldType.TEXT),
        _f("softSkillsAssessment", "Soft Skills Assessment", FieldType.TEXT),
        _f("overallRating", "Overall Rating", FieldType.RATING),
        _f("feedback", "Feedback", FieldType.TEXT),
    ),
    Stage.SOURCING_REVIEW_COMPLETED: (
        _f("clientScreeningDate", "Client Screening Date", FieldType.DATE),
        _f("clientFeedback", "Client Feedback", FieldType.ENUM, _PROGRESS),
        _f("clientRating", "Client Rating", FieldType.RATING),
    ),
    Stage.INTERVIEW: (
        _f("interviewDate", "Interview Date", FieldType.DATE),
        _f("interviewerName", "Interviewer", FieldType.STRING),
        _f("feedback", "Feedback", FieldType.TEXT),
        _f("interviewStatus", "Interview Status", FieldType.ENUM, ("Scheduled", "Completed", "Cancelled", "Rescheduled")),
        _f("interviewRoundNo", "Interview Round", FieldType.ENUM, _RATINGS),
        _f("interviewReschedules", "Reschedules", FieldType.ENUM, ("0",) + _RATINGS),
        _f("interviewMeetingLink", "Meeting Link", FieldType.URL),
    ),
    Stage.VERIFICATION: (
        _f("referenceCheckStatus", "Reference Check", FieldType.ENUM, ("Pending", "Complete", "Failed")),
        _f("backgroundCheckStatus", "Background Check", FieldType.ENUM, ("Pending", "Complete", "Failed")),
        _f("documents", "Documents", FieldType.ENUM, ("Pending", "In Progress", "Complete")),
        _f("offerLetter", "Offer Letter", FieldType.ENUM, ("Not sent", "Sent", "Accepted", "Rejected")),
    ),
    Stage.ONBOARDING: (
        _f("onboardingStartDate", "Onboarding Start Date", FieldType.DATE),
        _f("onboardingStatus", "Onboarding Status", FieldType.ENUM, ("Not Started", "In Progress", "Complete")),
        _f("trainingCompleted", "Training Completed", FieldType.ENUM, ("Yes", "No", "In Progress")),
    ),
    Stage.HIRED: (
        _f("hireDate", "Hire Date", FieldType.DATE),
        _f("contractType", "Contract Type", FieldType.ENUM, ("Full-time", "Part-time", "Contract", "Internship")),
        _f("finalSalary", "Final Salary", FieldType.STRING),
    ),
    Stage.DISQUALIFIED: (
        _f("disqualificationStage", "Disqualified At Stage", FieldType.ENUM, tuple(s.value for s in Stage)),
        _f("disqualificationStatus", "Status At Disqualification", FieldType.STRING),
        _f("disqualificationReason", "Reason", FieldType.ENUM, DISQUALIFICATION_REASONS),
        _f("disqualificationFeedback", "Additional Feedback", FieldType.TEXT),
    ),
}


# ====================================================================
# Badge color table
# ====================================================================

STAGE_COLORS: Dict[Stage, str] = {
    Stage.SOURCING: "purple",
    Stage.SCREENING: "orange",
    Stage.SOURCING_REVIEW_COMPLETED: "green",
    Stage.INTERVIEW: "blue",
    Stage.VERIFICATION: "yellow",
    Stage.ONBOARDING: "green",
    Stage.HIRED: "emerald",
    Stage.DISQUALIFIED: "red",
}

STATUS_COLORS: Dict[CandidateStatus, str] = {
    CandidateStatus.ACTIVE: "blue",
    CandidateStatus.INACTIVE: "gray",
    CandidateStatus.SHORTLISTED: "green",
    CandidateStatus.INTERVIEWING: "blue",
    CandidateStatus.OFFER: "purple",
    CandidateStatus.HIRED: "emerald",
    CandidateStatus.REJECTED: "red",
    CandidateStatus.WITHDRAWN: "gray",
}

DEFAULT_COLOR = "gray"


# ====================================================================
# Lookups
# ====================================================================


def list_stages() -> List[Stage]:
    """All stages in pipeline display order."""
    return list(Stage)


def is_terminal(stage: Stage) -> bool:
    return Stage(stage) in TERMINAL_STAGES


def field_schema_for(stage: Stage) -> Dict[str, FieldSpec]:
    """Recognized fields for a stage, keyed by field key."""
    return {spec.key: spec for spec in STAGE_FIELD_SCHEMAS[Stage(stage)]}


def list_client_stages() -> List[ClientStage]:
    return list(ClientStage)


def sub_statuses_for(client_stage: ClientStage) -> Tuple[str, ...]:
    return CLIENT_SUB_STATUSES[ClientStage(client_stage)]


def all_candidate_statuses() -> List[CandidateStatus]:
    return list(CandidateStatus)


def disqualification_reasons() -> Tuple[str, ...]:
    return DISQUALIFICATION_REASONS


def stage_color(stage: Optional[Stage]) -> str:
    if stage is None:
        return DEFAULT_COLOR
    return STAGE_COLORS.get(Stage(stage), DEFAULT_COLOR)


def status_color(status: Optional[CandidateStatus]) -> str:
    if status is None:
        return DEFAULT_COLOR
    return STATUS_COLORS.get(CandidateStatus(status), DEFAULT_COLOR)

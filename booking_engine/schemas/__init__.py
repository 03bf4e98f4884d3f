from booking_engine.schemas.answer_schema import (
    Answer,
    ChoiceAnswer,
    MultiChoiceAnswer,
    QualificationResponse,
    TextAnswer,
)
from booking_engine.schemas.booking_schema import BookingOutcome, BookingRejection, BookingRequest
from booking_engine.schemas.event_schema import (
    AssignmentStrategy,
    BookableEvent,
    Question,
    QuestionType,
    Rule,
    RuleOperator,
)
from booking_engine.schemas.legacy_schema import LegacyFormData
from booking_engine.schemas.reservation_schema import (
    ACTIVE_STATUSES,
    Reservation,
    ReservationStatus,
    RoutingResponseRecord,
)
from booking_engine.schemas.result_schema import (
    Assigned,
    AssignedCollective,
    AssigneeResult,
    NotATeamEvent,
    Unassigned,
)
from booking_engine.schemas.team_schema import TeamMember

__all__ = [
    "Answer", "TextAnswer", "ChoiceAnswer", "MultiChoiceAnswer", "QualificationResponse",
    "BookingRequest", "BookingOutcome", "BookingRejection",
    "AssignmentStrategy", "BookableEvent", "Question", "QuestionType", "Rule", "RuleOperator",
    "LegacyFormData",
    "Reservation", "ReservationStatus", "ACTIVE_STATUSES", "RoutingResponseRecord",
    "AssigneeResult", "Assigned", "AssignedCollective", "NotATeamEvent", "Unassigned",
    "TeamMember",
]

# volunteer_hub/engagement/__init__.py
"""
Volunteer engagement rules.

Pure functions and small stateful helpers with no Flask or database imports;
the service layer feeds them typed records and persists their results.
"""

from .chat import ChatTimeline
from .classifier import Bucket, EventSections, classify, lifecycle_status, registration_open, sections
from .enums import (
    EventCategory,
    EventStatus,
    LocationType,
    RegistrationStatus,
    TaskStatus,
    TimePreference,
    Weekday,
    WorkType,
)
from .errors import (
    AuthenticationRequired,
    ConfirmationRequired,
    DuplicateSubmission,
    EngagementError,
    IllegalTransition,
    NotTaskOwner,
    PartialBatchFailure,
    RemoteOperationFailed,
    ResourceNotFound,
    ValidationFailed,
)
from .feedback import FeedbackSubmission, feedback_action_label, submit_feedback
from .filters import FilterSet, TimeWindow, WindowKind, filter_events
from .guard import SubmissionGuard
from .records import (
    ActorSession,
    ChatMessageRecord,
    EventRecord,
    RegistrationRecord,
    Skill,
    TaskRecord,
    VolunteerProfile,
    require_actor,
)
from .skills import SkillMatch, match
from .tasks import BatchResult, TaskBoard, claim, claim_many, release, update_feedback, update_status

__all__ = [
    # Records
    "ActorSession",
    "ChatMessageRecord",
    "EventRecord",
    "RegistrationRecord",
    "Skill",
    "TaskRecord",
    "VolunteerProfile",
    "require_actor",
    # Enums
    "EventCategory",
    "EventStatus",
    "LocationType",
    "RegistrationStatus",
    "TaskStatus",
    "TimePreference",
    "Weekday",
    "WorkType",
    # Errors
    "AuthenticationRequired",
    "ConfirmationRequired",
    "DuplicateSubmission",
    "EngagementError",
    "IllegalTransition",
    "NotTaskOwner",
    "PartialBatchFailure",
    "RemoteOperationFailed",
    "ResourceNotFound",
    "ValidationFailed",
    # Rules
    "Bucket",
    "BatchResult",
    "ChatTimeline",
    "EventSections",
    "FeedbackSubmission",
    "FilterSet",
    "SkillMatch",
    "SubmissionGuard",
    "TaskBoard",
    "TimeWindow",
    "WindowKind",
    "claim",
    "claim_many",
    "classify",
    "feedback_action_label",
    "filter_events",
    "lifecycle_status",
    "match",
    "registration_open",
    "release",
    "sections",
    "submit_feedback",
    "update_feedback",
    "update_status",
]

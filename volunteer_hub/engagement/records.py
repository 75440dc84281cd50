# volunteer_hub/engagement/records.py
"""
Typed records the engagement rules operate on.

Rows loaded from the database are converted into these records once, at the
store boundary, so rule functions never see ORM objects or loose dicts.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime

from .enums import EventCategory, EventStatus, LocationType, RegistrationStatus, TaskStatus
from .errors import AuthenticationRequired


@dataclass(frozen=True)
class Skill:
    skill_id: int
    name: str
    icon: str | None = None


@dataclass(frozen=True)
class ActorSession:
    """The authenticated volunteer performing an action."""

    volunteer_id: int
    email: str
    display_name: str


def require_actor(session: ActorSession | None) -> ActorSession:
    """Abort with AuthenticationRequired unless a volunteer is signed in."""
    if session is None:
        raise AuthenticationRequired()
    return session


@dataclass(frozen=True)
class EventRecord:
    event_id: int
    title: str
    start: datetime
    end: datetime
    category: EventCategory
    location_type: LocationType
    location_name: str | None = None
    description: str | None = None
    registration_deadline: datetime | None = None
    thumbnail: str | None = None
    stored_status: EventStatus | None = None
    capacity: int | None = None


@dataclass(frozen=True)
class RegistrationRecord:
    volunteer_id: int
    event_id: int
    status: RegistrationStatus
    updated_at: datetime | None = None
    feedback: str | None = None
    star_rating: int | None = None
    feedback_submitted_at: datetime | None = None

    @property
    def is_registered(self) -> bool:
        return self.status is RegistrationStatus.REGISTERED

    @property
    def has_feedback(self) -> bool:
        return bool(self.feedback) or self.star_rating is not None


@dataclass(frozen=True)
class TaskRecord:
    task_id: int
    event_id: int
    description: str
    status: TaskStatus = TaskStatus.UNASSIGNED
    feedback: str | None = None
    volunteer_id: int | None = None
    volunteer_email: str | None = None
    required_skills: tuple[Skill, ...] = ()

    def __post_init__(self):
        if (self.volunteer_id is None) != (self.status is TaskStatus.UNASSIGNED):
            raise ValueError(
                f"Task {self.task_id} has status {self.status.value} "
                f"but volunteer_id={self.volunteer_id}"
            )

    @property
    def is_assigned(self) -> bool:
        return self.volunteer_id is not None

    def with_changes(self, **changes) -> "TaskRecord":
        return replace(self, **changes)


@dataclass(frozen=True)
class ChatMessageRecord:
    event_id: int
    volunteer_name: str
    body: str
    created_at: datetime
    message_id: int | None = None
    volunteer_id: int | None = None
    volunteer_email: str | None = None
    client_ref: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.message_id is None


@dataclass(frozen=True)
class VolunteerProfile:
    volunteer_id: int
    email: str
    full_name: str | None = None
    mobile: str | None = None
    age: int | None = None
    organization: str | None = None
    skill_ids: frozenset[int] = field(default_factory=frozenset)
    work_types: tuple[str, ...] = ()
    preferred_location: str | None = None
    availability_start: date | None = None
    availability_end: date | None = None
    time_preference: str | None = None
    days_available: tuple[str, ...] = ()
    onboarding_step: int = 1
    onboarding_completed: bool = False

    @property
    def display_name(self) -> str:
        if self.full_name:
            return self.full_name
        return self.email.split("@")[0] if self.email else "Anonymous"

    def session(self) -> ActorSession:
        return ActorSession(volunteer_id=self.volunteer_id, email=self.email, display_name=self.display_name)

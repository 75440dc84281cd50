# volunteer_hub/engagement/enums.py
"""
Enums shared by the engagement rules and the database models.
"""

from enum import Enum as PyEnum


class EventCategory(PyEnum):
    """Event category enumeration (mirrors the volunteer work types)"""

    EDUCATION = "education"
    ENVIRONMENT = "environment"
    HEALTHCARE = "healthcare"
    COMMUNITY = "community"
    EVENTS = "events"
    TECH = "tech"
    ADMIN = "admin"


class LocationType(PyEnum):
    """Where an event takes place"""

    PHYSICAL = "physical"
    VIRTUAL = "virtual"


class EventStatus(PyEnum):
    """Event lifecycle status enumeration"""

    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class RegistrationStatus(PyEnum):
    """Registration status enumeration"""

    REGISTERED = "registered"
    NOT_REGISTERED = "not_registered"


class TaskStatus(PyEnum):
    """
    Task status enumeration.

    Ordered lifecycle: unassigned -> to_do -> in_progress -> done. Every status
    other than UNASSIGNED implies an assigned volunteer.
    """

    UNASSIGNED = "unassigned"
    TO_DO = "to_do"
    IN_PROGRESS = "in_progress"
    DONE = "done"

    @property
    def ordinal(self):
        return _TASK_STATUS_ORDER.index(self)

    @property
    def is_assigned(self):
        return self is not TaskStatus.UNASSIGNED

    @classmethod
    def assigned_statuses(cls):
        return tuple(status for status in _TASK_STATUS_ORDER if status.is_assigned)

    @classmethod
    def initial_assigned(cls):
        """Lowest-ordinal assigned sub-status, used when a task is claimed"""
        return min(cls.assigned_statuses(), key=lambda status: status.ordinal)

    @classmethod
    def parse(cls, value):
        """Parse a status code, accepting the older dashboard spellings"""
        if isinstance(value, cls):
            return value
        if value is None:
            raise ValueError("Task status is required")
        key = str(value).strip().lower()
        if key in _TASK_STATUS_ALIASES:
            return _TASK_STATUS_ALIASES[key]
        raise ValueError(f"Unknown task status: {value}")


_TASK_STATUS_ORDER = [TaskStatus.UNASSIGNED, TaskStatus.TO_DO, TaskStatus.IN_PROGRESS, TaskStatus.DONE]

_TASK_STATUS_ALIASES = {
    "unassigned": TaskStatus.UNASSIGNED,
    "to_do": TaskStatus.TO_DO,
    "to do": TaskStatus.TO_DO,
    "todo": TaskStatus.TO_DO,
    "assigned": TaskStatus.TO_DO,
    "in_progress": TaskStatus.IN_PROGRESS,
    "in progress": TaskStatus.IN_PROGRESS,
    "inprogress": TaskStatus.IN_PROGRESS,
    "doing": TaskStatus.IN_PROGRESS,
    "done": TaskStatus.DONE,
    "complete": TaskStatus.DONE,
    "completed": TaskStatus.DONE,
}


class WorkType(PyEnum):
    """Kinds of volunteer work offered during onboarding"""

    EDUCATION = "education"
    ENVIRONMENT = "environment"
    HEALTHCARE = "healthcare"
    COMMUNITY = "community"
    EVENTS = "events"
    TECH = "tech"
    ADMIN = "admin"


class TimePreference(PyEnum):
    """Preferred time of day"""

    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    FLEXIBLE = "flexible"


class Weekday(PyEnum):
    """Days of the week a volunteer can be available"""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


WORK_TYPE_LABELS = {
    WorkType.EDUCATION: "Education & Tutoring",
    WorkType.ENVIRONMENT: "Environmental Conservation",
    WorkType.HEALTHCARE: "Healthcare Support",
    WorkType.COMMUNITY: "Community Outreach",
    WorkType.EVENTS: "Event Organization",
    WorkType.TECH: "Technical Support",
    WorkType.ADMIN: "Administrative Work",
}

TIME_PREFERENCE_LABELS = {
    TimePreference.MORNING: "Morning (8am - 12pm)",
    TimePreference.AFTERNOON: "Afternoon (12pm - 5pm)",
    TimePreference.EVENING: "Evening (5pm - 9pm)",
    TimePreference.FLEXIBLE: "Flexible",
}

# volunteer_hub/engagement/stats.py
"""
Dashboard aggregates: volunteer stats, recent discussions and upcoming
opportunities.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Mapping

from .classifier import Bucket, classify, registration_open
from .enums import RegistrationStatus, TaskStatus
from .records import ChatMessageRecord, EventRecord, RegistrationRecord, TaskRecord

DEFAULT_PREVIEW_LENGTH = 120
DEFAULT_LIMIT = 5


@dataclass(frozen=True)
class VolunteerStats:
    completed_tasks: int
    registered_events: int
    attended_events: int


@dataclass(frozen=True)
class DiscussionPreview:
    message_id: int | None
    event_id: int
    event_title: str
    volunteer_name: str
    preview: str
    created_at: datetime


def truncate(text: str, max_length: int = DEFAULT_PREVIEW_LENGTH) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def volunteer_stats(
    now: datetime,
    tasks: Iterable[TaskRecord],
    registrations: Iterable[RegistrationRecord],
    events: Mapping[int, EventRecord],
) -> VolunteerStats:
    completed = sum(1 for task in tasks if task.status is TaskStatus.DONE)
    registered = [registration for registration in registrations if registration.is_registered]
    attended = 0
    for registration in registered:
        event = events.get(registration.event_id)
        if event is not None and classify(now, event, RegistrationStatus.REGISTERED) is Bucket.PAST:
            attended += 1
    return VolunteerStats(completed_tasks=completed, registered_events=len(registered), attended_events=attended)


def recent_discussions(
    messages: Iterable[ChatMessageRecord],
    titles: Mapping[int, str],
    registered_event_ids: Iterable[int],
    limit: int = DEFAULT_LIMIT,
    preview_length: int = DEFAULT_PREVIEW_LENGTH,
) -> list[DiscussionPreview]:
    """Newest messages from the events the volunteer is registered for."""
    allowed = set(registered_event_ids)
    relevant = [message for message in messages if message.event_id in allowed]
    relevant.sort(key=lambda message: (message.created_at, message.message_id or 0), reverse=True)
    return [
        DiscussionPreview(
            message_id=message.message_id,
            event_id=message.event_id,
            event_title=titles.get(message.event_id, "Unknown Event"),
            volunteer_name=message.volunteer_name,
            preview=truncate(message.body, preview_length),
            created_at=message.created_at,
        )
        for message in relevant[:limit]
    ]


def upcoming_opportunities(
    now: datetime,
    events: Iterable[EventRecord],
    registrations: Mapping[int, RegistrationRecord],
    limit: int = DEFAULT_LIMIT,
) -> list[EventRecord]:
    """Events the volunteer could still sign up for, soonest first."""
    candidates = []
    for event in events:
        registration = registrations.get(event.event_id)
        if registration is not None and registration.is_registered:
            continue
        if event.start > now and registration_open(now, event):
            candidates.append(event)
    candidates.sort(key=lambda event: event.start)
    return candidates[:limit]

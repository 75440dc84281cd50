# volunteer_hub/engagement/classifier.py
"""
Event classification relative to the current time.

Buckets are a pure function of ``now``; callers pass the current time on every
request instead of storing a bucket on the event.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, Mapping

from .enums import EventStatus, RegistrationStatus
from .records import EventRecord, RegistrationRecord


class Bucket(Enum):
    REGISTERED_UPCOMING = "registered_upcoming"
    NOT_REGISTERED_UPCOMING = "not_registered_upcoming"
    PAST = "past"


def classify(now: datetime, event: EventRecord, registration_status: RegistrationStatus | None) -> Bucket:
    """Place one event into exactly one bucket."""
    registered = registration_status is RegistrationStatus.REGISTERED
    if registered and event.end > now:
        return Bucket.REGISTERED_UPCOMING
    if not registered and event.start > now:
        return Bucket.NOT_REGISTERED_UPCOMING
    if event.end <= now:
        return Bucket.PAST
    # Already running and not registered: still open to view, not yet past
    return Bucket.NOT_REGISTERED_UPCOMING


def registration_status_for(
    event_id: int, registrations: Mapping[int, RegistrationRecord]
) -> RegistrationStatus:
    registration = registrations.get(event_id)
    return registration.status if registration else RegistrationStatus.NOT_REGISTERED


@dataclass(frozen=True)
class EventSections:
    registered_upcoming: tuple[EventRecord, ...]
    not_registered_upcoming: tuple[EventRecord, ...]
    past: tuple[EventRecord, ...]

    def bucket(self, bucket: Bucket) -> tuple[EventRecord, ...]:
        return {
            Bucket.REGISTERED_UPCOMING: self.registered_upcoming,
            Bucket.NOT_REGISTERED_UPCOMING: self.not_registered_upcoming,
            Bucket.PAST: self.past,
        }[bucket]


def sections(
    now: datetime,
    events: Iterable[EventRecord],
    registrations: Mapping[int, RegistrationRecord],
) -> EventSections:
    """Split events into the three dashboard sections, keeping input order."""
    grouped: dict[Bucket, list[EventRecord]] = {bucket: [] for bucket in Bucket}
    for event in events:
        status = registration_status_for(event.event_id, registrations)
        grouped[classify(now, event, status)].append(event)
    return EventSections(
        registered_upcoming=tuple(grouped[Bucket.REGISTERED_UPCOMING]),
        not_registered_upcoming=tuple(grouped[Bucket.NOT_REGISTERED_UPCOMING]),
        past=tuple(grouped[Bucket.PAST]),
    )


def lifecycle_status(now: datetime, event: EventRecord) -> EventStatus:
    """Stored cancellation wins; otherwise the status follows the clock."""
    if event.stored_status is EventStatus.CANCELLED:
        return EventStatus.CANCELLED
    if event.start > now:
        return EventStatus.UPCOMING
    if event.end > now:
        return EventStatus.ONGOING
    return EventStatus.COMPLETED


def registration_open(now: datetime, event: EventRecord) -> bool:
    """Registration closes at the deadline, or at the start when there is none."""
    if event.stored_status is EventStatus.CANCELLED:
        return False
    if event.registration_deadline:
        return now < event.registration_deadline
    return now < event.start

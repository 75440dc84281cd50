"""Tests for dashboard aggregates"""

from datetime import datetime, timedelta, timezone

from volunteer_hub.engagement import (
    ChatMessageRecord,
    EventCategory,
    EventRecord,
    LocationType,
    RegistrationRecord,
    RegistrationStatus,
    TaskRecord,
    TaskStatus,
)
from volunteer_hub.engagement.stats import (
    recent_discussions,
    truncate,
    upcoming_opportunities,
    volunteer_stats,
)

NOW = datetime(2024, 9, 1, 10, 0, tzinfo=timezone.utc)


def event(event_id, days, deadline_days=None):
    start = NOW + timedelta(days=days)
    return EventRecord(
        event_id=event_id,
        title=f"Event {event_id}",
        start=start,
        end=start + timedelta(hours=3),
        category=EventCategory.COMMUNITY,
        location_type=LocationType.PHYSICAL,
        registration_deadline=NOW + timedelta(days=deadline_days) if deadline_days is not None else None,
    )


def registration(event_id, status=RegistrationStatus.REGISTERED):
    return RegistrationRecord(volunteer_id=1, event_id=event_id, status=status)


def chat(message_id, event_id, minutes, body="hello"):
    return ChatMessageRecord(
        event_id=event_id,
        volunteer_name="Pat",
        body=body,
        created_at=NOW - timedelta(minutes=minutes),
        message_id=message_id,
    )


class TestVolunteerStats:
    """Test counting completed tasks and attended events"""

    def test_counts(self):
        events = {1: event(1, -10), 2: event(2, 5), 3: event(3, -3)}
        tasks = [
            TaskRecord(1, 1, "a", status=TaskStatus.DONE, volunteer_id=1),
            TaskRecord(2, 1, "b", status=TaskStatus.IN_PROGRESS, volunteer_id=1),
            TaskRecord(3, 2, "c", status=TaskStatus.DONE, volunteer_id=1),
        ]
        registrations = [
            registration(1),
            registration(2),
            registration(3, RegistrationStatus.NOT_REGISTERED),
        ]

        stats = volunteer_stats(NOW, tasks, registrations, events)

        assert stats.completed_tasks == 2
        assert stats.registered_events == 2
        assert stats.attended_events == 1

    def test_empty(self):
        stats = volunteer_stats(NOW, [], [], {})
        assert (stats.completed_tasks, stats.registered_events, stats.attended_events) == (0, 0, 0)


class TestRecentDiscussions:
    """Test the recent discussion previews"""

    def test_only_registered_events_newest_first(self):
        messages = [chat(1, 1, 30), chat(2, 2, 5), chat(3, 1, 10), chat(4, 3, 1)]
        previews = recent_discussions(messages, {1: "Cleanup", 2: "Tutoring"}, [1, 2], limit=2)

        assert [p.message_id for p in previews] == [2, 3]
        assert previews[0].event_title == "Tutoring"

    def test_unknown_title(self):
        previews = recent_discussions([chat(1, 8, 1)], {}, [8])
        assert previews[0].event_title == "Unknown Event"

    def test_preview_is_truncated(self):
        previews = recent_discussions([chat(1, 1, 1, body="x" * 200)], {1: "E"}, [1], preview_length=10)
        assert previews[0].preview == "x" * 10 + "..."

    def test_truncate_short_text(self):
        assert truncate("short", 10) == "short"


class TestUpcomingOpportunities:
    """Test events still open for sign up"""

    def test_open_unregistered_events_soonest_first(self):
        events = [event(1, 9), event(2, 2), event(3, -1), event(4, 4, deadline_days=-1), event(5, 3)]
        result = upcoming_opportunities(NOW, events, {5: registration(5)}, limit=5)

        assert [e.event_id for e in result] == [2, 1]

    def test_not_registered_row_is_an_opportunity(self):
        result = upcoming_opportunities(
            NOW, [event(1, 2)], {1: registration(1, RegistrationStatus.NOT_REGISTERED)}
        )
        assert len(result) == 1

    def test_limit(self):
        events = [event(i, i) for i in range(1, 9)]
        assert len(upcoming_opportunities(NOW, events, {}, limit=3)) == 3

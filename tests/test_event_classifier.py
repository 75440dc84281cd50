"""Tests for bucketing events relative to the current time"""

from datetime import datetime, timedelta, timezone

import pytest

from volunteer_hub.engagement import (
    Bucket,
    EventCategory,
    EventRecord,
    EventStatus,
    LocationType,
    RegistrationRecord,
    RegistrationStatus,
    classify,
    lifecycle_status,
    registration_open,
    sections,
)

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def event(event_id=1, start_in=24, duration=2, **kwargs):
    start = NOW + timedelta(hours=start_in)
    return EventRecord(
        event_id=event_id,
        title=f"Event {event_id}",
        start=start,
        end=start + timedelta(hours=duration),
        category=EventCategory.COMMUNITY,
        location_type=LocationType.PHYSICAL,
        **kwargs,
    )


def registered(event_id, volunteer_id=1):
    return RegistrationRecord(volunteer_id=volunteer_id, event_id=event_id, status=RegistrationStatus.REGISTERED)


class TestClassify:
    """Test single-event classification"""

    def test_registered_future_event(self):
        assert classify(NOW, event(), RegistrationStatus.REGISTERED) is Bucket.REGISTERED_UPCOMING

    def test_registered_ongoing_event_stays_upcoming(self):
        """A registered event counts as upcoming until it ends"""
        ongoing = event(start_in=-1, duration=3)
        assert classify(NOW, ongoing, RegistrationStatus.REGISTERED) is Bucket.REGISTERED_UPCOMING

    def test_unregistered_future_event(self):
        assert classify(NOW, event(), RegistrationStatus.NOT_REGISTERED) is Bucket.NOT_REGISTERED_UPCOMING
        assert classify(NOW, event(), None) is Bucket.NOT_REGISTERED_UPCOMING

    @pytest.mark.parametrize("status", [RegistrationStatus.REGISTERED, RegistrationStatus.NOT_REGISTERED, None])
    def test_finished_event_is_past(self, status):
        assert classify(NOW, event(start_in=-5, duration=2), status) is Bucket.PAST

    def test_end_equal_to_now_is_past(self):
        finished = event(start_in=-2, duration=2)
        assert classify(NOW, finished, RegistrationStatus.REGISTERED) is Bucket.PAST

    def test_unregistered_ongoing_event(self):
        ongoing = event(start_in=-1, duration=3)
        assert classify(NOW, ongoing, RegistrationStatus.NOT_REGISTERED) is Bucket.NOT_REGISTERED_UPCOMING

    def test_same_event_moves_as_time_passes(self):
        record = event(start_in=1, duration=1)
        later = NOW + timedelta(hours=3)

        assert classify(NOW, record, RegistrationStatus.REGISTERED) is Bucket.REGISTERED_UPCOMING
        assert classify(later, record, RegistrationStatus.REGISTERED) is Bucket.PAST


class TestSections:
    """Test splitting a list of events into dashboard sections"""

    def test_every_event_lands_in_one_section(self):
        events = [event(1), event(2), event(3, start_in=-10), event(4, start_in=5)]
        result = sections(NOW, events, {1: registered(1), 3: registered(3)})

        assert [e.event_id for e in result.registered_upcoming] == [1]
        assert [e.event_id for e in result.not_registered_upcoming] == [2, 4]
        assert [e.event_id for e in result.past] == [3]
        assert result.bucket(Bucket.PAST) == result.past

    def test_not_registered_row_counts_as_unregistered(self):
        rows = {1: RegistrationRecord(1, 1, RegistrationStatus.NOT_REGISTERED)}
        result = sections(NOW, [event(1)], rows)

        assert result.registered_upcoming == ()
        assert len(result.not_registered_upcoming) == 1


class TestLifecycle:
    """Test derived event status and registration windows"""

    def test_status_follows_clock(self):
        assert lifecycle_status(NOW, event(start_in=2)) is EventStatus.UPCOMING
        assert lifecycle_status(NOW, event(start_in=-1, duration=3)) is EventStatus.ONGOING
        assert lifecycle_status(NOW, event(start_in=-5)) is EventStatus.COMPLETED

    def test_stored_cancellation_wins(self):
        cancelled = event(stored_status=EventStatus.CANCELLED)
        assert lifecycle_status(NOW, cancelled) is EventStatus.CANCELLED

    def test_stored_non_cancel_status_is_ignored(self):
        stale = event(start_in=-5, stored_status=EventStatus.UPCOMING)
        assert lifecycle_status(NOW, stale) is EventStatus.COMPLETED

    def test_registration_closes_at_deadline(self):
        record = event(start_in=48, registration_deadline=NOW + timedelta(hours=1))
        assert registration_open(NOW, record) is True
        assert registration_open(NOW + timedelta(hours=2), record) is False

    def test_registration_closes_at_start_without_deadline(self):
        record = event(start_in=1)
        assert registration_open(NOW, record) is True
        assert registration_open(NOW + timedelta(hours=1), record) is False

    def test_cancelled_event_is_closed(self):
        assert registration_open(NOW, event(stored_status=EventStatus.CANCELLED)) is False

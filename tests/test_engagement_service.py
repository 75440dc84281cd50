"""Tests for the engagement service operations against a real database"""

from datetime import date, timedelta

import pytest

from volunteer_hub.engagement import (
    AuthenticationRequired,
    Bucket,
    ConfirmationRequired,
    EventStatus,
    FilterSet,
    IllegalTransition,
    NotTaskOwner,
    PartialBatchFailure,
    RegistrationStatus,
    RemoteOperationFailed,
    ResourceNotFound,
    SubmissionGuard,
    TaskStatus,
    ValidationFailed,
)
from volunteer_hub.engagement.onboarding import Availability, PersonalInfo, WorkPreferences
from volunteer_hub.services.chat_feed import ChatFeed
from volunteer_hub.services.engagement_service import EngagementService
from volunteer_hub.services.store import EngagementStore, profile_record


@pytest.fixture
def actor(volunteer):
    return profile_record(volunteer).session()


@pytest.fixture
def other_actor(other_user):
    return profile_record(other_user.volunteer).session()


class TestOnboardingAndProfile:
    """Test onboarding steps and profile edits"""

    def test_onboarding_flow(self, service, new_user):
        actor = profile_record(new_user.volunteer).session()

        profile = service.complete_onboarding_step(actor, 1, PersonalInfo("New Person", "555-0100", 30))
        assert profile.onboarding_step == 2
        assert profile.full_name == "New Person"

        profile = service.complete_onboarding_step(actor, 2, WorkPreferences(["community"], True, False))
        assert profile.onboarding_step == 3
        assert profile.preferred_location == "virtual"

        profile = service.complete_onboarding_step(
            actor, 3, Availability(date(2024, 5, 1), "morning", ["weekend"])
        )
        assert profile.onboarding_completed is True
        assert profile.days_available == ("saturday", "sunday")

    def test_step_out_of_order(self, service, new_user):
        actor = profile_record(new_user.volunteer).session()
        with pytest.raises(ValidationFailed):
            service.complete_onboarding_step(actor, 2, WorkPreferences(["community"], True, False))

    def test_update_profile_with_skills(self, service, actor, skills):
        profile = service.update_profile(
            actor,
            PersonalInfo("Vol Unteer", "555-0101", 41, "Food Bank"),
            WorkPreferences(["healthcare"], False, True, "Bristol"),
            Availability(date(2024, 5, 1), "flexible", ["friday"]),
            skill_ids=[skills["First Aid"].id],
        )
        assert profile.organization == "Food Bank"
        assert profile.preferred_location == "Bristol"
        assert profile.skill_ids == {skills["First Aid"].id}

    def test_update_profile_unknown_skill(self, service, actor, skills):
        with pytest.raises(ValidationFailed) as exc_info:
            service.update_profile(
                actor,
                PersonalInfo("Vol", "555", 41),
                WorkPreferences(["tech"], True, False),
                Availability(date(2024, 5, 1), "flexible", ["friday"]),
                skill_ids=[9999],
            )
        assert exc_info.value.field == "skill_ids"

    def test_update_availability(self, service, actor):
        profile = service.update_availability(actor, Availability(date(2024, 5, 1), "evening", ["monday"]))
        assert profile.time_preference == "evening"

    def test_requires_actor(self, service):
        with pytest.raises(AuthenticationRequired):
            service.profile(None)


class TestBrowsingAndDashboard:
    """Test dashboard aggregation and event browsing"""

    def test_dashboard(self, service, actor, volunteer, make_event, register, make_task, post_message):
        past = make_event("Past", start_in=-48)
        upcoming = make_event("Registered", start_in=24)
        open_event = make_event("Open", start_in=72)
        register(volunteer, past)
        register(volunteer, upcoming)
        make_task(past, volunteer=volunteer, status=TaskStatus.DONE)
        post_message(upcoming, volunteer, "See you there")

        view = service.dashboard(actor)

        assert view.stats.completed_tasks == 1
        assert view.stats.registered_events == 2
        assert view.stats.attended_events == 1
        assert [e.event_id for e in view.upcoming] == [open_event.id]
        assert [d.preview for d in view.discussions] == ["See you there"]
        assert view.discussions[0].event_title == "Registered"
        assert len(view.my_tasks) == 1

    def test_browse_events(self, service, actor, volunteer, make_event, register):
        registered = make_event("Mine", start_in=24)
        other = make_event("Other", start_in=30)
        past = make_event("Done", start_in=-30)
        register(volunteer, registered)

        result, registrations = service.browse_events(actor)

        assert [e.event_id for e in result.registered_upcoming] == [registered.id]
        assert [e.event_id for e in result.not_registered_upcoming] == [other.id]
        assert [e.event_id for e in result.past] == [past.id]
        assert set(registrations) == {registered.id}

    def test_browse_with_filter(self, service, actor, volunteer, make_event, register):
        registered = make_event("Mine", start_in=24)
        make_event("Other", start_in=30)
        register(volunteer, registered)

        criteria = FilterSet(registration_statuses=frozenset({RegistrationStatus.REGISTERED}))
        result, _ = service.browse_events(actor, criteria)

        assert result.not_registered_upcoming == ()
        assert len(result.registered_upcoming) == 1

    def test_event_detail(self, service, actor, volunteer, make_event, register):
        event = make_event(capacity=5)
        register(volunteer, event, star_rating=4, feedback="nice")

        detail = service.event_detail(actor, event.id)

        assert detail.status is EventStatus.UPCOMING
        assert detail.bucket is Bucket.REGISTERED_UPCOMING
        assert detail.is_registered
        assert detail.registered_count == 1
        assert detail.feedback_label == "Update"
        assert detail.registration_open is True

    def test_event_detail_not_found(self, service, actor):
        with pytest.raises(ResourceNotFound):
            service.event_detail(actor, 9999)

    def test_latest_events(self, service, make_event):
        make_event("Early", start_in=10)
        make_event("Late", start_in=100)
        assert [e.title for e in service.latest_events(1)] == ["Late"]


class TestRegistration:
    """Test register and unregister"""

    def test_register(self, service, actor, test_event):
        registration = service.register(actor, test_event.id)
        assert registration.is_registered

    def test_register_twice_is_idempotent(self, service, actor, test_event):
        service.register(actor, test_event.id)
        service.register(actor, test_event.id)
        assert service.store.count_registered(test_event.id) == 1

    def test_register_closed(self, service, actor, make_event, now):
        event = make_event(registration_deadline=now - timedelta(hours=1))
        with pytest.raises(ValidationFailed):
            service.register(actor, event.id)

    def test_register_cancelled(self, service, actor, make_event):
        event = make_event(event_status=EventStatus.CANCELLED)
        with pytest.raises(ValidationFailed) as exc_info:
            service.register(actor, event.id)
        assert "cancelled" in exc_info.value.message

    def test_register_full(self, service, actor, other_user, make_event, register):
        event = make_event(capacity=1)
        register(other_user.volunteer, event)
        with pytest.raises(ValidationFailed) as exc_info:
            service.register(actor, event.id)
        assert exc_info.value.message == "This event is full"

    def test_unregister_keeps_feedback(self, service, actor, volunteer, test_event, register):
        register(volunteer, test_event, star_rating=5, feedback="great")
        registration = service.unregister(actor, test_event.id)

        assert registration.status is RegistrationStatus.NOT_REGISTERED
        assert registration.star_rating == 5

        again = service.register(actor, test_event.id)
        assert again.is_registered
        assert again.feedback == "great"

    def test_unregister_when_not_registered(self, service, actor, test_event):
        with pytest.raises(ValidationFailed):
            service.unregister(actor, test_event.id)


class TestInterest:
    """Test flagging upcoming events as interesting"""

    def test_express_interest_twice_leaves_one_row(self, service, actor, volunteer, test_event):
        assert service.express_interest(actor, test_event.id) is True
        assert service.express_interest(actor, test_event.id) is False
        assert service.store.interested_event_ids(volunteer.id) == {test_event.id}

    def test_interest_does_not_register(self, service, actor, volunteer, test_event):
        service.express_interest(actor, test_event.id)
        assert service.store.get_registration(volunteer.id, test_event.id) is None

    def test_interest_shows_on_dashboard(self, service, actor, make_event):
        liked = make_event("Liked", start_in=72)
        make_event("Other", start_in=96)
        service.express_interest(actor, liked.id)

        assert service.dashboard(actor).interested == {liked.id}

    def test_requires_actor(self, service, test_event):
        with pytest.raises(AuthenticationRequired):
            service.express_interest(None, test_event.id)

    def test_unknown_event(self, service, actor):
        with pytest.raises(ResourceNotFound):
            service.express_interest(actor, 9999)


class TestTasks:
    """Test task listing, claiming, edits and release"""

    def test_event_tasks_with_skill_match(self, service, actor, volunteer, test_event, register, make_task, skills, give_skills):
        register(volunteer, test_event)
        give_skills(volunteer, skills["Teaching"])
        make_task(test_event, skills=[skills["Teaching"], skills["First Aid"]])

        views = service.event_tasks(actor, test_event.id)

        assert len(views) == 1
        assert [s.name for s in views[0].skills.matching] == ["Teaching"]
        assert [s.name for s in views[0].skills.missing] == ["First Aid"]

    def test_event_tasks_requires_registration(self, service, actor, test_event):
        with pytest.raises(ValidationFailed):
            service.event_tasks(actor, test_event.id)

    def test_claim_tasks(self, service, actor, volunteer, test_event, register, make_task):
        register(volunteer, test_event)
        first = make_task(test_event, "first")
        second = make_task(test_event, "second")

        result = service.claim_tasks(actor, test_event.id, [first.id, second.id, first.id])

        assert result.committed_ids == [first.id, second.id]
        assert all(task.status is TaskStatus.TO_DO for task in result.committed)

    def test_claim_partial_failure(self, service, actor, volunteer, other_user, test_event, register, make_task):
        register(volunteer, test_event)
        free = make_task(test_event, "free")
        taken = make_task(test_event, "taken", volunteer=other_user.volunteer)

        with pytest.raises(PartialBatchFailure) as exc_info:
            service.claim_tasks(actor, test_event.id, [taken.id, free.id])

        assert exc_info.value.committed == (free.id,)
        assert exc_info.value.failed_id == taken.id
        assert service.store.get_task(free.id).volunteer_id == volunteer.id

    def test_claim_unknown_task(self, service, actor, volunteer, test_event, register):
        register(volunteer, test_event)
        with pytest.raises(ResourceNotFound):
            service.claim_tasks(actor, test_event.id, [9999])

    def test_claim_task_from_other_event(self, service, actor, volunteer, make_event, register, make_task):
        event = make_event("One")
        other_event = make_event("Two")
        register(volunteer, event)
        task = make_task(other_event)
        with pytest.raises(ValidationFailed):
            service.claim_tasks(actor, event.id, [task.id])

    def test_submit_task_changes(self, service, actor, volunteer, test_event, make_task):
        first = make_task(test_event, "first", volunteer=volunteer)
        second = make_task(test_event, "second", volunteer=volunteer)

        result = service.submit_task_changes(
            actor,
            [
                {"task_id": first.id, "status": "in_progress"},
                {"task_id": second.id, "feedback": "Brought extra gloves"},
            ],
        )

        assert result.committed_ids == [first.id, second.id]
        assert service.store.get_task(first.id).status is TaskStatus.IN_PROGRESS
        assert service.store.get_task(second.id).feedback == "Brought extra gloves"

    def test_submit_without_real_changes(self, service, actor, volunteer, test_event, make_task):
        task = make_task(test_event, volunteer=volunteer)
        result = service.submit_task_changes(actor, [{"task_id": task.id, "status": "to_do"}])
        assert result.committed == ()

    def test_submit_other_volunteers_task(self, service, actor, other_user, test_event, make_task):
        task = make_task(test_event, volunteer=other_user.volunteer)
        with pytest.raises(NotTaskOwner):
            service.submit_task_changes(actor, [{"task_id": task.id, "status": "done"}])

    def test_submit_unclaimed_task(self, service, actor, test_event, make_task):
        task = make_task(test_event)
        with pytest.raises(IllegalTransition):
            service.submit_task_changes(actor, [{"task_id": task.id, "status": "done"}])

    def test_submit_empty(self, service, actor):
        with pytest.raises(ValidationFailed):
            service.submit_task_changes(actor, [])

    def test_submit_stops_at_first_failure(self, service, actor, volunteer, test_event, make_task, monkeypatch):
        first = make_task(test_event, "first", volunteer=volunteer)
        second = make_task(test_event, "second", volunteer=volunteer)
        real_commit = service.store.commit_task

        def failing_commit(record, *, holder):
            if record.task_id == second.id:
                raise RemoteOperationFailed("write rejected", operation="commit_task")
            return real_commit(record, holder=holder)

        monkeypatch.setattr(service.store, "commit_task", failing_commit)
        with pytest.raises(PartialBatchFailure) as exc_info:
            service.submit_task_changes(
                actor,
                [{"task_id": first.id, "status": "done"}, {"task_id": second.id, "status": "done"}],
            )

        assert exc_info.value.committed == (first.id,)
        assert exc_info.value.pending == (second.id,)
        assert service.store.get_task(first.id).status is TaskStatus.DONE
        assert service.store.get_task(second.id).status is TaskStatus.TO_DO

    def test_release_task(self, service, actor, volunteer, test_event, make_task):
        task = make_task(test_event, volunteer=volunteer, status=TaskStatus.IN_PROGRESS)

        with pytest.raises(ConfirmationRequired):
            service.release_task(actor, task.id)

        released = service.release_task(actor, task.id, confirmed=True)
        assert released.volunteer_id is None
        assert released.status is TaskStatus.UNASSIGNED

    def test_release_missing_task(self, service, actor):
        with pytest.raises(ResourceNotFound):
            service.release_task(actor, 9999, confirmed=True)


class TestFeedbackAndChat:
    """Test event feedback and chat messages"""

    def test_submit_and_update_feedback(self, service, actor, volunteer, test_event, register):
        register(volunteer, test_event)

        first = service.submit_feedback(actor, test_event.id, 4, "Well organised")
        second = service.submit_feedback(actor, test_event.id, 5, "Even better on reflection")

        assert first.is_update is False
        assert second.is_update is True
        assert second.registration.star_rating == 5
        assert second.registration.feedback_submitted_at is not None

    def test_feedback_requires_registration(self, service, actor, test_event):
        with pytest.raises(ValidationFailed):
            service.submit_feedback(actor, test_event.id, 4, "Well organised")

    def test_send_message_publishes(self, service, actor, volunteer, test_event, register):
        register(volunteer, test_event)
        subscription = service.subscribe(actor, test_event.id)

        stored = service.send_message(actor, test_event.id, "Bring water", client_ref="abc")

        assert stored.message_id is not None
        assert stored.client_ref == "abc"
        assert stored.volunteer_name == "Vol Unteer"
        assert subscription.get(timeout=1) == stored
        assert service.messages(actor, test_event.id) == [stored]
        subscription.cancel()

    def test_resend_with_same_ref(self, service, actor, volunteer, test_event, register):
        """A retried send returns the stored message and is not broadcast twice"""
        register(volunteer, test_event)
        subscription = service.subscribe(actor, test_event.id)

        first = service.send_message(actor, test_event.id, "hello", client_ref="tab-1")
        again = service.send_message(actor, test_event.id, "hello", client_ref="tab-1")

        assert again == first
        assert service.messages(actor, test_event.id) == [first]
        assert subscription.get(timeout=1) == first
        assert subscription.get(timeout=0.05) is None
        subscription.cancel()

    def test_two_volunteers_same_ref(self, service, actor, other_actor, volunteer, other_user, test_event, register):
        register(volunteer, test_event)
        register(other_user.volunteer, test_event)

        mine = service.send_message(actor, test_event.id, "first", client_ref="1")
        theirs = service.send_message(other_actor, test_event.id, "second", client_ref="1")

        assert mine.message_id != theirs.message_id
        assert [m.body for m in service.messages(actor, test_event.id)] == ["first", "second"]

    def test_send_message_generates_client_ref(self, service, actor, volunteer, test_event, register):
        register(volunteer, test_event)
        stored = service.send_message(actor, test_event.id, "Hello")
        assert stored.client_ref

    def test_send_empty_message(self, service, actor, volunteer, test_event, register):
        register(volunteer, test_event)
        with pytest.raises(ValidationFailed):
            service.send_message(actor, test_event.id, "   ")

    def test_chat_requires_registration(self, service, actor, test_event):
        with pytest.raises(ValidationFailed):
            service.send_message(actor, test_event.id, "Hello")
        with pytest.raises(ValidationFailed):
            service.subscribe(actor, test_event.id)


class TestServiceConstruction:
    def test_injected_collaborators(self, app, now):
        feed = ChatFeed()
        guard = SubmissionGuard()
        store = EngagementStore()
        service = EngagementService(store=store, feed=feed, guard=guard, clock=lambda: now, upcoming_limit=2)

        assert service.store is store
        assert service.feed is feed
        assert service.guard is guard
        assert service.clock() == now
        assert service.upcoming_limit == 2

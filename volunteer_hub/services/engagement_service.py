"""
Engagement service: the seam between the HTTP routes and the engagement rules.

Every operation follows the same order: check the actor, load typed records
from the store, run the pure rule, then persist what the rule returned. Rule
violations surface as EngagementError subclasses and are answered by the JSON
error handler.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import partial
from typing import Any, Callable, Iterable

from volunteer_hub.engagement import (
    ActorSession,
    BatchResult,
    Bucket,
    ChatMessageRecord,
    EventRecord,
    EventSections,
    EventStatus,
    FeedbackSubmission,
    FilterSet,
    RegistrationRecord,
    RegistrationStatus,
    ResourceNotFound,
    SkillMatch,
    SubmissionGuard,
    TaskBoard,
    TaskRecord,
    ValidationFailed,
    VolunteerProfile,
    claim_many,
    classify,
    feedback_action_label,
    filter_events,
    lifecycle_status,
    match,
    registration_open,
    release,
    require_actor,
    sections,
    submit_feedback,
    update_feedback,
)
from volunteer_hub.engagement.chat import new_client_ref, validate_body
from volunteer_hub.engagement.onboarding import (
    Availability,
    PersonalInfo,
    WorkPreferences,
    complete_step,
    validate_availability,
    validate_profile,
)
from volunteer_hub.engagement.stats import (
    DiscussionPreview,
    VolunteerStats,
    recent_discussions,
    upcoming_opportunities,
    volunteer_stats,
)

from .chat_feed import ChatFeed, Subscription, chat_feed
from .store import EngagementStore

logger = logging.getLogger(__name__)

# Shared across requests so two concurrent submits from one volunteer collide
submission_guard = SubmissionGuard()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DashboardView:
    profile: VolunteerProfile
    stats: VolunteerStats
    upcoming: list[EventRecord]
    discussions: list[DiscussionPreview]
    my_tasks: list[TaskRecord]
    interested: frozenset[int] = frozenset()


@dataclass(frozen=True)
class EventDetail:
    event: EventRecord
    status: EventStatus
    bucket: Bucket
    registration: RegistrationRecord | None
    registration_open: bool
    registered_count: int
    feedback_label: str

    @property
    def is_registered(self) -> bool:
        return self.registration is not None and self.registration.is_registered


@dataclass(frozen=True)
class TaskView:
    task: TaskRecord
    skills: SkillMatch


class EngagementService:
    """Volunteer-facing operations over the engagement store."""

    def __init__(
        self,
        store: EngagementStore | None = None,
        feed: ChatFeed | None = None,
        guard: SubmissionGuard | None = None,
        clock: Callable[[], datetime] | None = None,
        upcoming_limit: int = 5,
        discussions_limit: int = 5,
        preview_length: int = 120,
    ):
        self.store = store or EngagementStore()
        self.feed = feed or chat_feed
        self.guard = guard or submission_guard
        self.clock = clock or utc_now
        self.upcoming_limit = upcoming_limit
        self.discussions_limit = discussions_limit
        self.preview_length = preview_length

    # Lookups ------------------------------------------------------------------

    def _event(self, event_id: int) -> EventRecord:
        event = self.store.get_event(event_id)
        if event is None:
            raise ResourceNotFound("Event", event_id)
        return event

    def _require_registered(self, actor: ActorSession, event_id: int) -> RegistrationRecord:
        registration = self.store.get_registration(actor.volunteer_id, event_id)
        if registration is None or not registration.is_registered:
            raise ValidationFailed("You must be registered for this event")
        return registration

    def profile(self, actor: ActorSession | None) -> VolunteerProfile:
        actor = require_actor(actor)
        profile = self.store.get_profile(actor.volunteer_id)
        if profile is None:
            raise ResourceNotFound("Volunteer profile", actor.volunteer_id)
        return profile

    # Onboarding and profile ---------------------------------------------------

    def complete_onboarding_step(self, actor: ActorSession | None, step: int, payload) -> VolunteerProfile:
        profile = self.profile(actor)
        changes = complete_step(profile, step, payload)
        updated = self.store.update_profile(profile.volunteer_id, changes)
        logger.info("Volunteer %s completed onboarding step %s", profile.volunteer_id, step)
        return updated

    def update_profile(
        self,
        actor: ActorSession | None,
        info: PersonalInfo,
        prefs: WorkPreferences,
        availability: Availability,
        skill_ids: Iterable[int] | None = None,
    ) -> VolunteerProfile:
        profile = self.profile(actor)
        changes = validate_profile(info, prefs, availability)
        if skill_ids is not None:
            known = {skill.skill_id for skill in self.store.list_skills()}
            skill_ids = list(dict.fromkeys(skill_ids))
            unknown = [skill_id for skill_id in skill_ids if skill_id not in known]
            if unknown:
                raise ValidationFailed(f"Unknown skill: {unknown[0]}", field="skill_ids")
            changes["skill_ids"] = skill_ids
        return self.store.update_profile(profile.volunteer_id, changes)

    def update_availability(self, actor: ActorSession | None, availability: Availability) -> VolunteerProfile:
        profile = self.profile(actor)
        changes = validate_availability(availability)
        return self.store.update_profile(profile.volunteer_id, changes)

    # Dashboard and browsing ---------------------------------------------------

    def dashboard(self, actor: ActorSession | None) -> DashboardView:
        profile = self.profile(actor)
        now = self.clock()
        events = self.store.list_events()
        registrations = self.store.registrations_for(profile.volunteer_id)
        my_tasks = self.store.tasks_for_volunteer(profile.volunteer_id)
        registered_ids = [event_id for event_id, reg in registrations.items() if reg.is_registered]
        messages = self.store.recent_messages(registered_ids, self.discussions_limit)
        events_by_id = {event.event_id: event for event in events}
        titles = {event.event_id: event.title for event in events}
        return DashboardView(
            profile=profile,
            stats=volunteer_stats(now, my_tasks, registrations.values(), events_by_id),
            upcoming=upcoming_opportunities(now, events, registrations, limit=self.upcoming_limit),
            discussions=recent_discussions(
                messages,
                titles,
                registered_ids,
                limit=self.discussions_limit,
                preview_length=self.preview_length,
            ),
            my_tasks=my_tasks,
            interested=frozenset(self.store.interested_event_ids(profile.volunteer_id)),
        )

    def browse_events(
        self, actor: ActorSession | None, criteria: FilterSet | None = None
    ) -> tuple[EventSections, dict[int, RegistrationRecord]]:
        actor = require_actor(actor)
        now = self.clock()
        registrations = self.store.registrations_for(actor.volunteer_id)
        events = self.store.list_events()
        if criteria is not None:
            events = filter_events(events, criteria, now, registrations)
        return sections(now, events, registrations), registrations

    def latest_events(self, limit: int = 6) -> list[EventRecord]:
        """Public landing-page list, newest start first."""
        return self.store.latest_events(limit)

    def event_detail(self, actor: ActorSession | None, event_id: int) -> EventDetail:
        actor = require_actor(actor)
        now = self.clock()
        event = self._event(event_id)
        registration = self.store.get_registration(actor.volunteer_id, event_id)
        status = registration.status if registration else RegistrationStatus.NOT_REGISTERED
        return EventDetail(
            event=event,
            status=lifecycle_status(now, event),
            bucket=classify(now, event, status),
            registration=registration,
            registration_open=registration_open(now, event),
            registered_count=self.store.count_registered(event_id),
            feedback_label=feedback_action_label(registration),
        )

    # Registration -------------------------------------------------------------

    def register(self, actor: ActorSession | None, event_id: int) -> RegistrationRecord:
        actor = require_actor(actor)
        now = self.clock()
        event = self._event(event_id)
        existing = self.store.get_registration(actor.volunteer_id, event_id)
        if existing is not None and existing.is_registered:
            return existing
        if event.stored_status is EventStatus.CANCELLED:
            raise ValidationFailed("This event has been cancelled")
        if not registration_open(now, event):
            raise ValidationFailed("Registration for this event has closed")
        if event.capacity is not None and self.store.count_registered(event_id) >= event.capacity:
            raise ValidationFailed("This event is full")

        record = RegistrationRecord(
            volunteer_id=actor.volunteer_id, event_id=event_id, status=RegistrationStatus.REGISTERED
        )
        if existing is not None:
            record = RegistrationRecord(
                volunteer_id=existing.volunteer_id,
                event_id=existing.event_id,
                status=RegistrationStatus.REGISTERED,
                feedback=existing.feedback,
                star_rating=existing.star_rating,
                feedback_submitted_at=existing.feedback_submitted_at,
            )
        with self.guard.hold(actor.volunteer_id, f"register:{event_id}"):
            stored = self.store.save_registration(record)
        logger.info("Volunteer %s registered for event %s", actor.volunteer_id, event_id)
        return stored

    def unregister(self, actor: ActorSession | None, event_id: int) -> RegistrationRecord:
        actor = require_actor(actor)
        self._event(event_id)
        existing = self._require_registered(actor, event_id)
        record = RegistrationRecord(
            volunteer_id=existing.volunteer_id,
            event_id=existing.event_id,
            status=RegistrationStatus.NOT_REGISTERED,
            feedback=existing.feedback,
            star_rating=existing.star_rating,
            feedback_submitted_at=existing.feedback_submitted_at,
        )
        with self.guard.hold(actor.volunteer_id, f"register:{event_id}"):
            stored = self.store.save_registration(record)
        logger.info("Volunteer %s unregistered from event %s", actor.volunteer_id, event_id)
        return stored

    def express_interest(self, actor: ActorSession | None, event_id: int) -> bool:
        """Flag an event as interesting. Repeating it is a no-op; returns True the first time."""
        actor = require_actor(actor)
        self._event(event_id)
        created = self.store.save_interest(actor.volunteer_id, event_id)
        if created:
            logger.info("Volunteer %s is interested in event %s", actor.volunteer_id, event_id)
        return created

    # Tasks --------------------------------------------------------------------

    def event_tasks(self, actor: ActorSession | None, event_id: int) -> list[TaskView]:
        profile = self.profile(actor)
        self._event(event_id)
        self._require_registered(profile.session(), event_id)
        return [
            TaskView(task=task, skills=match(task.required_skills, profile.skill_ids))
            for task in self.store.tasks_for_event(event_id)
        ]

    def claim_tasks(self, actor: ActorSession | None, event_id: int, task_ids: Iterable[int]) -> BatchResult:
        actor = require_actor(actor)
        self._event(event_id)
        self._require_registered(actor, event_id)
        task_ids = list(dict.fromkeys(task_ids))
        tasks = self.store.get_tasks(task_ids)
        found = {task.task_id for task in tasks}
        missing = [task_id for task_id in task_ids if task_id not in found]
        if missing:
            raise ResourceNotFound("Task", missing[0])
        foreign = [task.task_id for task in tasks if task.event_id != event_id]
        if foreign:
            raise ValidationFailed(f"Task {foreign[0]} does not belong to this event", field="task_ids")
        with self.guard.hold(actor.volunteer_id, "claim_tasks"):
            result = claim_many(tasks, actor, partial(self.store.commit_task, holder=None))
        logger.info("Volunteer %s claimed tasks %s", actor.volunteer_id, result.committed_ids)
        return result

    def submit_task_changes(self, actor: ActorSession | None, changes: Iterable[dict[str, Any]]) -> BatchResult:
        """
        Apply staged edits to the actor's own tasks. Each change names a
        ``task_id`` and optionally a ``status`` and/or ``feedback``.
        """
        actor = require_actor(actor)
        changes = list(changes)
        if not changes:
            raise ValidationFailed("There are no task changes to submit", field="changes")
        board = TaskBoard(self.store.tasks_for_volunteer(actor.volunteer_id), actor)
        for change in changes:
            task_id = change.get("task_id")
            if task_id not in board:
                task = self.store.get_task(task_id) if isinstance(task_id, int) else None
                if task is None:
                    raise ResourceNotFound("Task", task_id if isinstance(task_id, int) else None)
                # Someone else's or an unclaimed task: the ownership rule names the problem
                update_feedback(task, actor, task.feedback)
            if "status" in change and change["status"] is not None:
                board.stage_status(task_id, change["status"])
            if "feedback" in change:
                board.stage_feedback(task_id, change["feedback"])
        if not board.has_changes:
            return BatchResult()
        with self.guard.hold(actor.volunteer_id, "submit_task_changes"):
            result = board.submit(partial(self.store.commit_task, holder=actor.volunteer_id))
        logger.info("Volunteer %s updated tasks %s", actor.volunteer_id, result.committed_ids)
        return result

    def release_task(self, actor: ActorSession | None, task_id: int, confirmed: bool = False) -> TaskRecord:
        actor = require_actor(actor)
        task = self.store.get_task(task_id)
        if task is None:
            raise ResourceNotFound("Task", task_id)
        released = release(task, actor, confirmed=confirmed)
        with self.guard.hold(actor.volunteer_id, f"release_task:{task_id}"):
            stored = self.store.commit_task(released, holder=actor.volunteer_id)
        logger.info("Volunteer %s released task %s", actor.volunteer_id, task_id)
        return stored

    # Feedback -----------------------------------------------------------------

    def submit_feedback(self, actor: ActorSession | None, event_id: int, rating, text: str | None) -> FeedbackSubmission:
        actor = require_actor(actor)
        self._event(event_id)
        registration = self.store.get_registration(actor.volunteer_id, event_id)
        submission = submit_feedback(registration, actor, rating, text, self.clock())
        with self.guard.hold(actor.volunteer_id, f"feedback:{event_id}"):
            stored = self.store.save_registration(submission.registration)
        return FeedbackSubmission(registration=stored, is_update=submission.is_update)

    # Chat ---------------------------------------------------------------------

    def messages(self, actor: ActorSession | None, event_id: int) -> list[ChatMessageRecord]:
        actor = require_actor(actor)
        self._event(event_id)
        self._require_registered(actor, event_id)
        return self.store.messages_for_event(event_id)

    def send_message(
        self, actor: ActorSession | None, event_id: int, body: str | None, client_ref: str | None = None
    ) -> ChatMessageRecord:
        actor = require_actor(actor)
        body = validate_body(body)
        self._event(event_id)
        self._require_registered(actor, event_id)
        record = ChatMessageRecord(
            event_id=event_id,
            volunteer_id=actor.volunteer_id,
            volunteer_name=actor.display_name,
            volunteer_email=actor.email,
            body=body,
            created_at=self.clock(),
            client_ref=client_ref or new_client_ref(),
        )
        stored, created = self.store.add_message(record)
        if not created:
            logger.info("Message %s on event %s resent with ref %s", stored.message_id, event_id, stored.client_ref)
            return stored
        delivered = self.feed.publish(stored)
        logger.debug("Message %s on event %s delivered to %s subscribers", stored.message_id, event_id, delivered)
        return stored

    def subscribe(self, actor: ActorSession | None, event_id: int) -> Subscription:
        actor = require_actor(actor)
        self._event(event_id)
        self._require_registered(actor, event_id)
        return self.feed.subscribe(event_id)

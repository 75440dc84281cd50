"""
Store adapter between the SQLAlchemy models and the engagement rules.

Rows are turned into engagement records here and nowhere else. Every database
failure is rolled back, logged and re-raised as RemoteOperationFailed so the
routes can answer with a retryable error.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterable, Iterator

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from volunteer_hub.engagement import (
    ChatMessageRecord,
    EventRecord,
    IllegalTransition,
    RegistrationRecord,
    RegistrationStatus,
    RemoteOperationFailed,
    Skill as SkillRecord,
    TaskRecord,
    ValidationFailed,
    VolunteerProfile,
)
from volunteer_hub.models import (
    ChatMessage,
    Event,
    EventInterest,
    Registration,
    Skill,
    Task,
    TaskSkill,
    Volunteer,
    VolunteerSkill,
    db,
)

logger = logging.getLogger(__name__)


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; they are stored as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_storage(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def skill_record(skill: Skill) -> SkillRecord:
    return SkillRecord(skill_id=skill.id, name=skill.name, icon=skill.icon)


def event_record(event: Event) -> EventRecord:
    return EventRecord(
        event_id=event.id,
        title=event.title,
        start=as_utc(event.start_date),
        end=as_utc(event.end_date),
        category=event.category,
        location_type=event.location_type,
        location_name=event.location_name,
        description=event.description,
        registration_deadline=as_utc(event.registration_deadline),
        thumbnail=event.thumbnail_image,
        stored_status=event.event_status,
        capacity=event.capacity,
    )


def registration_record(registration: Registration) -> RegistrationRecord:
    return RegistrationRecord(
        volunteer_id=registration.volunteer_id,
        event_id=registration.event_id,
        status=registration.status,
        updated_at=as_utc(registration.updated_at),
        feedback=registration.feedback,
        star_rating=registration.star_rating,
        feedback_submitted_at=as_utc(registration.feedback_submitted_at),
    )


def task_record(task: Task) -> TaskRecord:
    volunteer = task.volunteer
    return TaskRecord(
        task_id=task.id,
        event_id=task.event_id,
        description=task.description,
        status=task.task_status,
        feedback=task.feedback,
        volunteer_id=task.volunteer_id,
        volunteer_email=volunteer.user.email if volunteer is not None and volunteer.user else None,
        required_skills=tuple(skill_record(link.skill) for link in task.required_skills),
    )


def message_record(message: ChatMessage) -> ChatMessageRecord:
    volunteer = message.volunteer
    return ChatMessageRecord(
        message_id=message.id,
        event_id=message.event_id,
        volunteer_id=message.volunteer_id,
        volunteer_name=message.volunteer_name,
        volunteer_email=volunteer.user.email if volunteer is not None and volunteer.user else None,
        body=message.body,
        created_at=as_utc(message.created_at),
        client_ref=message.client_ref,
    )


def profile_record(volunteer: Volunteer) -> VolunteerProfile:
    return VolunteerProfile(
        volunteer_id=volunteer.id,
        email=volunteer.user.email if volunteer.user else "",
        full_name=volunteer.full_name,
        mobile=volunteer.mobile,
        age=volunteer.age,
        organization=volunteer.organization,
        skill_ids=volunteer.skill_ids,
        work_types=tuple(volunteer.work_types or ()),
        preferred_location=volunteer.preferred_location,
        availability_start=volunteer.availability_start,
        availability_end=volunteer.availability_end,
        time_preference=volunteer.time_preference,
        days_available=tuple(volunteer.days_available or ()),
        onboarding_step=volunteer.onboarding_step,
        onboarding_completed=volunteer.onboarding_completed,
    )


class EngagementStore:
    """Reads and writes engagement records through a SQLAlchemy session."""

    def __init__(self, session: Session | None = None):
        self.session = session or db.session

    @contextmanager
    def _operation(self, name: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Store operation %s failed: %s", name, exc)
            raise RemoteOperationFailed("The server could not save your changes; please retry", operation=name)

    # Events -----------------------------------------------------------------

    def list_events(self) -> list[EventRecord]:
        with self._operation("list_events"):
            rows = self.session.query(Event).order_by(Event.start_date.asc(), Event.id.asc()).all()
            return [event_record(row) for row in rows]

    def latest_events(self, limit: int) -> list[EventRecord]:
        with self._operation("latest_events"):
            rows = self.session.query(Event).order_by(Event.start_date.desc(), Event.id.desc()).limit(limit).all()
            return [event_record(row) for row in rows]

    def get_event(self, event_id: int) -> EventRecord | None:
        with self._operation("get_event"):
            row = self.session.get(Event, event_id)
            return event_record(row) if row is not None else None

    # Registrations ----------------------------------------------------------

    def registrations_for(self, volunteer_id: int) -> dict[int, RegistrationRecord]:
        with self._operation("registrations_for"):
            rows = self.session.query(Registration).filter_by(volunteer_id=volunteer_id).all()
            return {row.event_id: registration_record(row) for row in rows}

    def get_registration(self, volunteer_id: int, event_id: int) -> RegistrationRecord | None:
        with self._operation("get_registration"):
            row = self.session.query(Registration).filter_by(volunteer_id=volunteer_id, event_id=event_id).first()
            return registration_record(row) if row is not None else None

    def count_registered(self, event_id: int) -> int:
        with self._operation("count_registered"):
            return (
                self.session.query(func.count(Registration.id))
                .filter_by(event_id=event_id, status=RegistrationStatus.REGISTERED)
                .scalar()
                or 0
            )

    def save_registration(self, record: RegistrationRecord) -> RegistrationRecord:
        """Upsert keyed by (volunteer, event)."""
        with self._operation("save_registration"):
            row = (
                self.session.query(Registration)
                .filter_by(volunteer_id=record.volunteer_id, event_id=record.event_id)
                .first()
            )
            if row is None:
                row = Registration(volunteer_id=record.volunteer_id, event_id=record.event_id)
                self.session.add(row)
            row.status = record.status
            row.feedback = record.feedback
            row.star_rating = record.star_rating
            row.feedback_submitted_at = to_storage(record.feedback_submitted_at)
            self.session.commit()
            return registration_record(row)

    # Interest ---------------------------------------------------------------

    def save_interest(self, volunteer_id: int, event_id: int) -> bool:
        """Record interest once per (volunteer, event). Returns True if a row was added."""
        with self._operation("save_interest"):
            row = self.session.query(EventInterest).filter_by(volunteer_id=volunteer_id, event_id=event_id).first()
            if row is not None:
                return False
            self.session.add(EventInterest(volunteer_id=volunteer_id, event_id=event_id))
            self.session.commit()
            return True

    def interested_event_ids(self, volunteer_id: int) -> set[int]:
        with self._operation("interested_event_ids"):
            rows = self.session.query(EventInterest.event_id).filter_by(volunteer_id=volunteer_id).all()
            return {event_id for (event_id,) in rows}

    # Tasks ------------------------------------------------------------------

    def _task_query(self):
        return self.session.query(Task).options(
            selectinload(Task.required_skills).selectinload(TaskSkill.skill),
            selectinload(Task.volunteer).selectinload(Volunteer.user),
        )

    def tasks_for_event(self, event_id: int) -> list[TaskRecord]:
        with self._operation("tasks_for_event"):
            rows = self._task_query().filter(Task.event_id == event_id).order_by(Task.id.asc()).all()
            return [task_record(row) for row in rows]

    def tasks_for_volunteer(self, volunteer_id: int) -> list[TaskRecord]:
        with self._operation("tasks_for_volunteer"):
            rows = self._task_query().filter(Task.volunteer_id == volunteer_id).order_by(Task.id.asc()).all()
            return [task_record(row) for row in rows]

    def get_tasks(self, task_ids: Iterable[int]) -> list[TaskRecord]:
        """Tasks in the order the ids were given; unknown ids are skipped."""
        task_ids = list(task_ids)
        with self._operation("get_tasks"):
            rows = {row.id: row for row in self._task_query().filter(Task.id.in_(task_ids)).all()}
            return [task_record(rows[task_id]) for task_id in task_ids if task_id in rows]

    def get_task(self, task_id: int) -> TaskRecord | None:
        tasks = self.get_tasks([task_id])
        return tasks[0] if tasks else None

    def commit_task(self, record: TaskRecord, *, holder: int | None) -> TaskRecord:
        """
        Persist one task, provided the row is still held by ``holder``.

        ``holder=None`` is a claim: the row must still be unassigned, so two
        volunteers racing for the same task cannot both win. Any other value is
        an edit or release by that volunteer, refused once the task has been
        released or handed to someone else since the caller loaded it.
        """
        with self._operation("commit_task"):
            row = self.session.get(Task, record.task_id)
            if row is None:
                raise ValidationFailed(f"Task {record.task_id} no longer exists", field="task_id")
            if holder is None:
                held = Task.volunteer_id.is_(None)
            else:
                held = Task.volunteer_id == holder
            updated = (
                self.session.query(Task)
                .filter(Task.id == record.task_id, held)
                .update(
                    {
                        Task.volunteer_id: record.volunteer_id,
                        Task.task_status: record.status,
                        Task.feedback: record.feedback,
                    },
                    synchronize_session="fetch",
                )
            )
            if updated != 1:
                self.session.rollback()
                if holder is None:
                    raise IllegalTransition("This task has already been claimed", task_id=record.task_id)
                raise IllegalTransition("This task is no longer assigned to you", task_id=record.task_id)
            self.session.commit()
            self.session.expire(row)
            return task_record(self._task_query().filter(Task.id == record.task_id).one())

    # Chat -------------------------------------------------------------------

    def messages_for_event(self, event_id: int) -> list[ChatMessageRecord]:
        with self._operation("messages_for_event"):
            rows = (
                self.session.query(ChatMessage)
                .filter_by(event_id=event_id)
                .order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())
                .all()
            )
            return [message_record(row) for row in rows]

    def recent_messages(self, event_ids: Iterable[int], limit: int) -> list[ChatMessageRecord]:
        event_ids = list(event_ids)
        if not event_ids:
            return []
        with self._operation("recent_messages"):
            rows = (
                self.session.query(ChatMessage)
                .filter(ChatMessage.event_id.in_(event_ids))
                .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
                .limit(limit)
                .all()
            )
            return [message_record(row) for row in rows]

    def add_message(self, record: ChatMessageRecord) -> tuple[ChatMessageRecord, bool]:
        """
        Insert a message unless the sender already stored one under the same
        ``client_ref``. Returns the stored record and whether it was created.
        """
        with self._operation("add_message"):
            if record.client_ref is not None and record.volunteer_id is not None:
                existing = (
                    self.session.query(ChatMessage)
                    .filter_by(volunteer_id=record.volunteer_id, client_ref=record.client_ref)
                    .first()
                )
                if existing is not None:
                    if existing.event_id != record.event_id:
                        raise ValidationFailed("This message reference is already in use", field="client_ref")
                    return message_record(existing), False
            row = ChatMessage(
                event_id=record.event_id,
                volunteer_id=record.volunteer_id,
                volunteer_name=record.volunteer_name,
                body=record.body,
                client_ref=record.client_ref,
                created_at=to_storage(record.created_at),
            )
            self.session.add(row)
            self.session.commit()
            return message_record(row), True

    # Volunteers -------------------------------------------------------------

    def get_profile(self, volunteer_id: int) -> VolunteerProfile | None:
        with self._operation("get_profile"):
            row = self.session.get(Volunteer, volunteer_id)
            return profile_record(row) if row is not None else None

    def update_profile(self, volunteer_id: int, changes: dict[str, Any]) -> VolunteerProfile:
        with self._operation("update_profile"):
            row = self.session.get(Volunteer, volunteer_id)
            if row is None:
                raise ValidationFailed("Volunteer profile not found")
            skill_ids = changes.pop("skill_ids", None)
            for key, value in changes.items():
                setattr(row, key, value)
            if skill_ids is not None:
                wanted = set(skill_ids)
                row.skills = [link for link in row.skills if link.skill_id in wanted]
                held = {link.skill_id for link in row.skills}
                for skill_id in skill_ids:
                    if skill_id not in held:
                        held.add(skill_id)
                        row.skills.append(VolunteerSkill(skill_id=skill_id))
            self.session.commit()
            return profile_record(row)

    def list_skills(self) -> list[SkillRecord]:
        with self._operation("list_skills"):
            return [skill_record(row) for row in self.session.query(Skill).order_by(Skill.name.asc()).all()]

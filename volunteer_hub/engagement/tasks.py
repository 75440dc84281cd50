# volunteer_hub/engagement/tasks.py
"""
Task mutation rules.

A task is either unassigned or assigned to exactly one volunteer with a
sub-status of to_do, in_progress or done. ``done`` is a resting state: the
assignee can still edit feedback or release the task.

Commits go through a ``committer`` callable supplied by the caller. It
persists one task row and returns the stored record, raising an
EngagementError (usually RemoteOperationFailed) when the store refuses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable

from .enums import TaskStatus
from .errors import (
    ConfirmationRequired,
    DuplicateSubmission,
    EngagementError,
    IllegalTransition,
    NotTaskOwner,
    PartialBatchFailure,
    ValidationFailed,
)
from .records import ActorSession, TaskRecord, require_actor

TaskCommitter = Callable[[TaskRecord], "TaskRecord | None"]


@dataclass(frozen=True)
class BatchResult:
    committed: tuple[TaskRecord, ...] = ()

    @property
    def committed_ids(self) -> list[int]:
        return [task.task_id for task in self.committed]


def _require_assignee(task: TaskRecord, actor: ActorSession) -> None:
    if not task.is_assigned:
        raise IllegalTransition("This task is not assigned to anyone", task_id=task.task_id)
    if task.volunteer_id != actor.volunteer_id:
        raise NotTaskOwner(task.task_id)


def _normalize_feedback(text: str | None) -> str | None:
    if text is None:
        return None
    return text if text.strip() else None


def claim(task: TaskRecord, actor: ActorSession | None) -> TaskRecord:
    """Assign an unassigned task to the actor with the initial sub-status."""
    actor = require_actor(actor)
    if task.is_assigned:
        raise IllegalTransition("This task has already been claimed", task_id=task.task_id)
    return task.with_changes(
        volunteer_id=actor.volunteer_id,
        volunteer_email=actor.email,
        status=TaskStatus.initial_assigned(),
    )


def update_status(task: TaskRecord, actor: ActorSession | None, status: TaskStatus | str) -> TaskRecord:
    actor = require_actor(actor)
    _require_assignee(task, actor)
    try:
        new_status = TaskStatus.parse(status)
    except ValueError as exc:
        raise ValidationFailed(str(exc), field="status")
    if not new_status.is_assigned:
        raise IllegalTransition("Release the task to return it to the pool", task_id=task.task_id)
    return task.with_changes(status=new_status)


def update_feedback(task: TaskRecord, actor: ActorSession | None, text: str | None) -> TaskRecord:
    actor = require_actor(actor)
    _require_assignee(task, actor)
    return task.with_changes(feedback=_normalize_feedback(text))


def release(task: TaskRecord, actor: ActorSession | None, confirmed: bool = False) -> TaskRecord:
    """Return an assigned task to the general pool once the actor has confirmed."""
    actor = require_actor(actor)
    _require_assignee(task, actor)
    if not confirmed:
        raise ConfirmationRequired("Confirm that you want to release this task back to the pool")
    return task.with_changes(volunteer_id=None, volunteer_email=None, status=TaskStatus.UNASSIGNED)


def claim_many(tasks: Iterable[TaskRecord], actor: ActorSession | None, committer: TaskCommitter) -> BatchResult:
    """
    Claim several tasks. Rows are independent: every row is attempted, and any
    failure is reported through PartialBatchFailure after the loop.
    """
    actor = require_actor(actor)
    tasks = list(tasks)
    if not tasks:
        raise ValidationFailed("Select at least one task to claim", field="task_ids")

    committed: list[TaskRecord] = []
    failures: dict[int, str] = {}
    for task in tasks:
        try:
            claimed = claim(task, actor)
            stored = committer(claimed)
        except EngagementError as exc:
            failures[task.task_id] = exc.message
            continue
        committed.append(stored or claimed)

    if failures:
        failed_ids = list(failures)
        raise PartialBatchFailure(
            f"Failed to claim {len(failures)} of {len(tasks)} tasks",
            committed=[task.task_id for task in committed],
            failed_id=failed_ids[0],
            pending=failed_ids,
            failures=failures,
        )
    return BatchResult(committed=tuple(committed))


class _Entry:
    __slots__ = ("committed", "status", "feedback")

    def __init__(self, task: TaskRecord):
        self.committed = task
        self.status = task.status
        self.feedback = task.feedback

    @property
    def modified(self) -> bool:
        return self.status is not self.committed.status or (self.feedback or None) != (
            self.committed.feedback or None
        )

    def staged(self) -> TaskRecord:
        return self.committed.with_changes(status=self.status, feedback=self.feedback)


class TaskBoard:
    """
    Staged edits over the actor's assigned tasks.

    Edits are kept locally until ``submit``; the last-committed snapshot of a
    task only moves forward when its own commit succeeds.
    """

    def __init__(self, tasks: Iterable[TaskRecord], actor: ActorSession | None):
        self.actor = require_actor(actor)
        self._entries: dict[int, _Entry] = {}
        for task in tasks:
            _require_assignee(task, self.actor)
            self._entries[task.task_id] = _Entry(task)
        self._order: list[int] = []
        self._in_flight = False

    def __contains__(self, task_id: int) -> bool:
        return task_id in self._entries

    def _entry(self, task_id: int) -> _Entry:
        try:
            return self._entries[task_id]
        except KeyError:
            raise IllegalTransition("This task is not assigned to you", task_id=task_id)

    def _touch(self, task_id: int) -> None:
        if task_id not in self._order:
            self._order.append(task_id)

    def stage_status(self, task_id: int, status: TaskStatus | str) -> TaskRecord:
        entry = self._entry(task_id)
        entry.status = update_status(entry.staged(), self.actor, status).status
        self._touch(task_id)
        return entry.staged()

    def stage_feedback(self, task_id: int, text: str | None) -> TaskRecord:
        entry = self._entry(task_id)
        entry.feedback = update_feedback(entry.staged(), self.actor, text).feedback
        self._touch(task_id)
        return entry.staged()

    def committed(self, task_id: int) -> TaskRecord:
        return self._entry(task_id).committed

    def staged(self, task_id: int) -> TaskRecord:
        return self._entry(task_id).staged()

    def is_modified(self, task_id: int) -> bool:
        return self._entry(task_id).modified

    def modified(self) -> list[TaskRecord]:
        """Modified tasks in the order they were first edited."""
        return [self._entries[task_id].staged() for task_id in self._order if self._entries[task_id].modified]

    @property
    def has_changes(self) -> bool:
        return any(entry.modified for entry in self._entries.values())

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def submit(self, committer: TaskCommitter) -> BatchResult:
        """
        Commit modified tasks one at a time. The first failure stops the batch:
        earlier tasks stay committed, the failing task and the rest stay staged.
        """
        if self._in_flight:
            raise DuplicateSubmission("submit_task_changes")
        self._in_flight = True
        try:
            pending = self.modified()
            committed: list[TaskRecord] = []
            for index, staged in enumerate(pending):
                try:
                    stored = committer(staged) or staged
                except EngagementError as exc:
                    raise PartialBatchFailure(
                        f"Failed to update task {staged.task_id}; please retry",
                        committed=[task.task_id for task in committed],
                        failed_id=staged.task_id,
                        pending=[task.task_id for task in pending[index:]],
                        failures={staged.task_id: exc.message},
                    )
                entry = self._entries[staged.task_id]
                entry.committed = stored
                entry.status = stored.status
                entry.feedback = stored.feedback
                committed.append(stored)
            self._order = [task_id for task_id in self._order if self._entries[task_id].modified]
            return BatchResult(committed=tuple(committed))
        finally:
            self._in_flight = False

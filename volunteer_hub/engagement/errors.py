# volunteer_hub/engagement/errors.py
"""
Error taxonomy for the engagement rules.

Every error carries a user-facing ``message`` and the HTTP status the JSON
error handler answers with. All of them are recoverable: a rule that raised
can be called again once the caller fixes the input or retries.
"""

from __future__ import annotations

from typing import Any, Sequence


class EngagementError(Exception):
    """Base class for rule violations surfaced to the volunteer."""

    status_code = 400
    code = "engagement_error"

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": False, "error": self.message, "code": self.code}
        payload.update({key: value for key, value in self.details.items() if value is not None})
        return payload


class AuthenticationRequired(EngagementError):
    status_code = 401
    code = "authentication_required"

    def __init__(self, message: str = "You must be logged in"):
        super().__init__(message)


class ValidationFailed(EngagementError):
    """A precondition on user input does not hold; nothing was attempted."""

    status_code = 400
    code = "validation_failed"

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message, field=field)
        self.field = field


class IllegalTransition(EngagementError):
    status_code = 409
    code = "illegal_transition"

    def __init__(self, message: str, task_id: int | None = None):
        super().__init__(message, task_id=task_id)
        self.task_id = task_id


class NotTaskOwner(EngagementError):
    status_code = 403
    code = "not_task_owner"

    def __init__(self, task_id: int):
        super().__init__("Only the assigned volunteer can change this task", task_id=task_id)
        self.task_id = task_id


class ResourceNotFound(EngagementError):
    status_code = 404
    code = "not_found"

    def __init__(self, resource: str, resource_id: int | None = None):
        super().__init__(f"{resource} not found", resource=resource.lower(), resource_id=resource_id)
        self.resource_id = resource_id


class ConfirmationRequired(EngagementError):
    status_code = 400
    code = "confirmation_required"


class DuplicateSubmission(EngagementError):
    status_code = 409
    code = "duplicate_submission"

    def __init__(self, action: str):
        super().__init__("This action is already being submitted", action=action)
        self.action = action


class RemoteOperationFailed(EngagementError):
    """The store rejected a read or write. Local state is left unchanged."""

    status_code = 503
    code = "remote_operation_failed"

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(message, operation=operation)
        self.operation = operation


class PartialBatchFailure(EngagementError):
    """
    A multi-row commit stopped part way.

    ``committed`` lists the ids that were written, ``failed_id`` is the first
    row that failed and ``pending`` the rows left staged after it. ``failures``
    maps every failed row id to its error message.
    """

    status_code = 409
    code = "partial_batch_failure"

    def __init__(
        self,
        message: str,
        *,
        committed: Sequence[int] = (),
        failed_id: int | None = None,
        pending: Sequence[int] = (),
        failures: dict[int, str] | None = None,
    ):
        super().__init__(
            message,
            committed=list(committed),
            failed_id=failed_id,
            pending=list(pending),
            failures={str(key): value for key, value in (failures or {}).items()},
        )
        self.committed = tuple(committed)
        self.failed_id = failed_id
        self.pending = tuple(pending)
        self.failures = dict(failures or {})

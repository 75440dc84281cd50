# volunteer_hub/engagement/feedback.py
"""
Event feedback rules.

Feedback lives on the volunteer's registration row. The first submission
creates it and later ones update it; both are the same upsert keyed by
(volunteer, event).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime

from .errors import ValidationFailed
from .records import ActorSession, RegistrationRecord, require_actor

MIN_RATING = 1
MAX_RATING = 5


@dataclass(frozen=True)
class FeedbackSubmission:
    registration: RegistrationRecord
    is_update: bool


def feedback_action_label(registration: RegistrationRecord | None) -> str:
    """Button label: 'Update' once feedback exists, 'Submit' before."""
    if registration is not None and registration.has_feedback:
        return "Update"
    return "Submit"


def validate_rating(rating) -> int:
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationFailed("Rating must be a whole number of stars", field="star_rating")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationFailed(
            f"Rating must be between {MIN_RATING} and {MAX_RATING} stars", field="star_rating"
        )
    return rating


def validate_text(text: str | None) -> str:
    if text is None or not text.strip():
        raise ValidationFailed("Please write some feedback before submitting", field="feedback")
    return text.strip()


def submit_feedback(
    registration: RegistrationRecord | None,
    actor: ActorSession | None,
    rating,
    text: str | None,
    now: datetime,
) -> FeedbackSubmission:
    """
    Validate a feedback submission and return the registration to upsert.
    Nothing here touches the store; callers persist ``registration`` only
    after this returns.
    """
    actor = require_actor(actor)
    rating = validate_rating(rating)
    text = validate_text(text)
    if registration is None or not registration.is_registered:
        raise ValidationFailed("You are not registered for this event")
    if registration.volunteer_id != actor.volunteer_id:
        raise ValidationFailed("You can only leave feedback on your own registration")

    updated = replace(registration, feedback=text, star_rating=rating, feedback_submitted_at=now)
    return FeedbackSubmission(registration=updated, is_update=registration.has_feedback)

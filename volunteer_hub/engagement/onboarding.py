# volunteer_hub/engagement/onboarding.py
"""
Onboarding and profile rules.

The flow has three steps: personal information, work preferences and
availability. Each step validates its own fields and returns the changes to
store on the volunteer profile; the caller persists them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Sequence

from .enums import TimePreference, Weekday, WorkType
from .errors import ValidationFailed
from .records import VolunteerProfile

MIN_AGE = 16
MAX_AGE = 120
FINAL_STEP = 3
WEEKEND = "weekend"
WEEKEND_DAYS = (Weekday.SATURDAY.value, Weekday.SUNDAY.value)
VIRTUAL = "virtual"

STEP_NAMES = {
    1: "Personal Information",
    2: "Work Preferences",
    3: "Availability",
}


@dataclass(frozen=True)
class PersonalInfo:
    full_name: str
    mobile: str
    age: Any
    organization: str | None = None


@dataclass(frozen=True)
class WorkPreferences:
    work_types: Sequence[str]
    is_virtual: bool
    is_in_person: bool
    place_name: str | None = None


@dataclass(frozen=True)
class Availability:
    start_date: date | None
    time_preference: str | None
    days_available: Sequence[str]
    end_date: date | None = None


def require_step(profile: VolunteerProfile, step: int) -> None:
    """Steps must be taken in order; a later step needs the earlier ones done."""
    if profile.onboarding_step < step:
        resume = profile.onboarding_step
        raise ValidationFailed(
            f"Please complete step {resume} ({STEP_NAMES.get(resume, 'onboarding')}) first",
            field="onboarding_step",
        )


def validate_personal_info(info: PersonalInfo) -> dict[str, Any]:
    full_name = (info.full_name or "").strip()
    if not full_name:
        raise ValidationFailed("Full name is required", field="full_name")
    mobile = (info.mobile or "").strip()
    if not mobile:
        raise ValidationFailed("Mobile number is required", field="mobile")
    try:
        age = int(info.age)
    except (TypeError, ValueError):
        raise ValidationFailed("Age must be a number", field="age")
    if not MIN_AGE <= age <= MAX_AGE:
        raise ValidationFailed(f"Age must be between {MIN_AGE} and {MAX_AGE}", field="age")
    organization = (info.organization or "").strip() or None
    return {"full_name": full_name, "mobile": mobile, "age": age, "organization": organization}


def format_preferred_location(is_virtual: bool, is_in_person: bool, place_name: str | None) -> str:
    place = (place_name or "").strip()
    if is_virtual and is_in_person:
        return f"{VIRTUAL}, {place}"
    if is_in_person:
        return place
    return VIRTUAL


def parse_preferred_location(value: str | None) -> tuple[bool, bool, str]:
    """Inverse of format_preferred_location: (is_virtual, is_in_person, place)."""
    value = (value or "").strip()
    if not value:
        return False, False, ""
    if value == VIRTUAL:
        return True, False, ""
    if value.startswith(f"{VIRTUAL},"):
        return True, True, value.split(",", 1)[1].strip()
    return False, True, value


def validate_work_preferences(prefs: WorkPreferences) -> dict[str, Any]:
    work_types = _unique(prefs.work_types)
    if not work_types:
        raise ValidationFailed("Please select at least one work type", field="work_types")
    valid = {work_type.value for work_type in WorkType}
    unknown = [work_type for work_type in work_types if work_type not in valid]
    if unknown:
        raise ValidationFailed(f"Unknown work type: {unknown[0]}", field="work_types")
    if not prefs.is_virtual and not prefs.is_in_person:
        raise ValidationFailed("Please select at least one location type", field="location")
    if prefs.is_in_person and not (prefs.place_name or "").strip():
        raise ValidationFailed("Please enter a place name for in-person volunteering", field="place_name")
    return {
        "work_types": work_types,
        "preferred_location": format_preferred_location(prefs.is_virtual, prefs.is_in_person, prefs.place_name),
    }


def validate_availability(availability: Availability) -> dict[str, Any]:
    if availability.start_date is None:
        raise ValidationFailed("Please select a start date", field="start_date")
    if availability.end_date is not None and availability.end_date < availability.start_date:
        raise ValidationFailed("End date cannot be before the start date", field="end_date")
    valid_times = {preference.value for preference in TimePreference}
    if not availability.time_preference:
        raise ValidationFailed("Please select a time preference", field="time_preference")
    if availability.time_preference not in valid_times:
        raise ValidationFailed(f"Unknown time preference: {availability.time_preference}", field="time_preference")
    days = selected_days(availability.days_available)
    if not days:
        raise ValidationFailed("Please select at least one day of availability", field="days_available")
    valid_days = {day.value for day in Weekday}
    unknown = [day for day in days if day not in valid_days]
    if unknown:
        raise ValidationFailed(f"Unknown day: {unknown[0]}", field="days_available")
    return {
        "availability_start": availability.start_date,
        "availability_end": availability.end_date,
        "time_preference": availability.time_preference,
        "days_available": days,
    }


def complete_step(profile: VolunteerProfile, step: int, payload) -> dict[str, Any]:
    """
    Validate one onboarding step and return the profile changes, including the
    step bookkeeping.
    """
    require_step(profile, step)
    if step == 1:
        changes = validate_personal_info(payload)
    elif step == 2:
        changes = validate_work_preferences(payload)
    elif step == FINAL_STEP:
        changes = validate_availability(payload)
    else:
        raise ValidationFailed(f"Unknown onboarding step: {step}", field="onboarding_step")

    if step == FINAL_STEP:
        changes["onboarding_step"] = FINAL_STEP
        changes["onboarding_completed"] = True
    else:
        changes["onboarding_step"] = max(profile.onboarding_step, step + 1)
    return changes


def validate_profile(info: PersonalInfo, prefs: WorkPreferences, availability: Availability) -> dict[str, Any]:
    """Profile edits re-run every onboarding validation in one pass."""
    changes: dict[str, Any] = {}
    changes.update(validate_personal_info(info))
    changes.update(validate_work_preferences(prefs))
    changes.update(validate_availability(availability))
    return changes


def toggle_day(days: Iterable[str], day: str, checked: bool) -> list[str]:
    """
    Apply a day checkbox change. "weekend" selects or clears saturday and
    sunday together.
    """
    current = _unique(days)
    day = str(day).strip().lower()
    targets = list(WEEKEND_DAYS) if day == WEEKEND else [day]
    if checked:
        return _unique(current + targets)
    return [existing for existing in current if existing not in targets]


def selected_days(days: Iterable[str] | None) -> list[str]:
    """The submitted checkboxes, applied in order."""
    selected: list[str] = []
    for day in days or ():
        selected = toggle_day(selected, day, True)
    return selected


def _unique(values: Iterable[str] | None) -> list[str]:
    seen: list[str] = []
    for value in values or ():
        value = str(value).strip().lower()
        if value and value not in seen:
            seen.append(value)
    return seen

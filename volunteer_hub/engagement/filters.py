# volunteer_hub/engagement/filters.py
"""
Event filter engine.

Each axis of a FilterSet is optional; present axes combine with AND and the
output keeps the input order. Filtering is recomputed from scratch on every
call.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Iterable, Mapping

from .classifier import registration_status_for
from .enums import EventCategory, LocationType, RegistrationStatus
from .errors import ValidationFailed
from .records import EventRecord, RegistrationRecord


class WindowKind(Enum):
    ALL = "all"
    NEXT_7_DAYS = "next_7_days"
    NEXT_MONTH = "next_month"
    CUSTOM = "custom"


def add_months(moment: datetime, months: int) -> datetime:
    """Shift by calendar months, clamping the day to the target month's length."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


@dataclass(frozen=True)
class TimeWindow:
    kind: WindowKind = WindowKind.ALL
    start: datetime | None = None
    end: datetime | None = None

    @classmethod
    def all(cls) -> "TimeWindow":
        return cls(WindowKind.ALL)

    @classmethod
    def next_7_days(cls) -> "TimeWindow":
        return cls(WindowKind.NEXT_7_DAYS)

    @classmethod
    def next_month(cls) -> "TimeWindow":
        return cls(WindowKind.NEXT_MONTH)

    @classmethod
    def custom(cls, start: datetime, end: datetime) -> "TimeWindow":
        if start is None or end is None:
            raise ValidationFailed("A custom date range needs both a start and an end", field="window")
        if end < start:
            raise ValidationFailed("The end of the date range must not be before its start", field="window")
        return cls(WindowKind.CUSTOM, start, end)

    def bounds(self, now: datetime) -> tuple[datetime, datetime] | None:
        """Open interval (lower, upper) for event start times, or None for no constraint."""
        if self.kind is WindowKind.NEXT_7_DAYS:
            return now, now + timedelta(days=7)
        if self.kind is WindowKind.NEXT_MONTH:
            return now, add_months(now, 1)
        if self.kind is WindowKind.CUSTOM:
            return self.start, self.end
        return None


@dataclass(frozen=True)
class FilterSet:
    registration_statuses: frozenset[RegistrationStatus] = field(default_factory=frozenset)
    categories: frozenset[EventCategory] = field(default_factory=frozenset)
    location_types: frozenset[str] = field(default_factory=frozenset)
    time_window: TimeWindow = field(default_factory=TimeWindow.all)

    @property
    def registration_filter(self) -> RegistrationStatus | None:
        """The single status to keep, or None when the axis imposes nothing."""
        if len(self.registration_statuses) == 1:
            return next(iter(self.registration_statuses))
        return None

    @classmethod
    def from_mapping(cls, args: Mapping[str, Any]) -> "FilterSet":
        """Build a FilterSet from request query arguments."""
        statuses = set()
        for raw in _values(args, "registration"):
            key = raw.strip().lower().replace("-", "_")
            try:
                statuses.add(RegistrationStatus(key))
            except ValueError:
                raise ValidationFailed(f"Unknown registration status: {raw}", field="registration")

        categories = set()
        for raw in _values(args, "category"):
            try:
                categories.add(EventCategory(raw.strip().lower()))
            except ValueError:
                raise ValidationFailed(f"Unknown event category: {raw}", field="category")

        location_types = set()
        valid_locations = {location.value for location in LocationType}
        for raw in _values(args, "location_type"):
            key = raw.strip().lower()
            if key not in valid_locations:
                raise ValidationFailed(f"Unknown location type: {raw}", field="location_type")
            location_types.add(key)

        window_values = _values(args, "window")
        window_key = window_values[0].strip().lower() if window_values else WindowKind.ALL.value
        try:
            kind = WindowKind(window_key)
        except ValueError:
            raise ValidationFailed(f"Unknown time window: {window_key}", field="window")
        if kind is WindowKind.CUSTOM:
            window = TimeWindow.custom(_parse_moment(args, "from"), _parse_moment(args, "to"))
        else:
            window = TimeWindow(kind)

        return cls(
            registration_statuses=frozenset(statuses),
            categories=frozenset(categories),
            location_types=frozenset(location_types),
            time_window=window,
        )


def _values(args: Mapping[str, Any], key: str) -> list[str]:
    if hasattr(args, "getlist"):
        raw_values = args.getlist(key)
    else:
        raw = args.get(key)
        if raw is None:
            raw_values = []
        elif isinstance(raw, (list, tuple, set, frozenset)):
            raw_values = list(raw)
        else:
            raw_values = [raw]
    values: list[str] = []
    for raw in raw_values:
        values.extend(part for part in str(raw).split(",") if part.strip())
    return values


def _parse_moment(args: Mapping[str, Any], key: str) -> datetime | None:
    values = _values(args, key)
    if not values:
        return None
    try:
        moment = datetime.fromisoformat(values[0].strip())
    except ValueError:
        raise ValidationFailed(f"Invalid date for '{key}': {values[0]}", field="window")
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def matches(
    event: EventRecord,
    criteria: FilterSet,
    now: datetime,
    registrations: Mapping[int, RegistrationRecord],
) -> bool:
    wanted_status = criteria.registration_filter
    if wanted_status is not None and registration_status_for(event.event_id, registrations) is not wanted_status:
        return False
    if criteria.categories and event.category not in criteria.categories:
        return False
    if criteria.location_types:
        wanted = {location.lower() for location in criteria.location_types}
        if event.location_type.value.lower() not in wanted:
            return False
    bounds = criteria.time_window.bounds(now)
    if bounds is not None:
        lower, upper = bounds
        if not (lower < event.start < upper):
            return False
    return True


def filter_events(
    events: Iterable[EventRecord],
    criteria: FilterSet,
    now: datetime,
    registrations: Mapping[int, RegistrationRecord] | None = None,
) -> list[EventRecord]:
    registrations = registrations or {}
    return [event for event in events if matches(event, criteria, now, registrations)]

# volunteer_hub/utils/formatting.py
"""
Human-readable date and time strings for the dashboard
"""

from datetime import timedelta


def _time(moment):
    return f"{moment.hour % 12 or 12}:{moment:%M} {moment:%p}"


def _long_date(moment):
    return f"{moment:%B} {moment.day}, {moment.year}"


def _short_date(moment):
    return f"{moment:%b} {moment.day}"


def format_event_date(start, end):
    """'March 3, 2026' for single-day events, 'Mar 3 - Mar 5, 2026' otherwise"""
    if start.date() == end.date():
        return _long_date(start)
    return f"{_short_date(start)} - {_short_date(end)}, {end.year}"


def format_event_time(start, end):
    return f"{_time(start)} - {_time(end)}"


def format_deadline(deadline):
    if deadline is None:
        return None
    return f"{_long_date(deadline)} at {_time(deadline)}"


def format_message_time(timestamp, now):
    """Today shows only the time; yesterday is labelled; older messages get the date"""
    if timestamp.date() == now.date():
        return _time(timestamp)
    if timestamp.date() == (now - timedelta(days=1)).date():
        return f"Yesterday, {_time(timestamp)}"
    return f"{_short_date(timestamp)}, {_time(timestamp)}"

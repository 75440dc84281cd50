# volunteer_hub/models/event/__init__.py
"""
Event models package.
"""

from .enums import EventCategory, EventStatus, LocationType, RegistrationStatus
from .models import Event, EventInterest, Registration

__all__ = [
    # Models
    "Event",
    "Registration",
    "EventInterest",
    # Enums
    "EventCategory",
    "EventStatus",
    "LocationType",
    "RegistrationStatus",
]

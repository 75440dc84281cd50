# volunteer_hub/models/event/enums.py
"""
Event enums. The column types store the enum names; the values are the codes
used on the JSON surface.
"""

from ...engagement.enums import EventCategory, EventStatus, LocationType, RegistrationStatus

__all__ = ["EventCategory", "EventStatus", "LocationType", "RegistrationStatus"]

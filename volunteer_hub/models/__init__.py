# volunteer_hub/models/__init__.py
"""
Database models package
"""

from .base import BaseModel, db
from .chat import ChatMessage
from .event import Event, EventCategory, EventInterest, EventStatus, LocationType, Registration, RegistrationStatus
from .task import Task, TaskSkill
from .user import User
from .volunteer import Skill, Volunteer, VolunteerSkill

__all__ = [
    "db",
    "BaseModel",
    "User",
    "Volunteer",
    "Skill",
    "VolunteerSkill",
    # Event models
    "Event",
    "Registration",
    "EventInterest",
    "Task",
    "TaskSkill",
    "ChatMessage",
    # Enums
    "EventCategory",
    "EventStatus",
    "LocationType",
    "RegistrationStatus",
]

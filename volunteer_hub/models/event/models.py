# volunteer_hub/models/event/models.py

from flask import current_app
from sqlalchemy import CheckConstraint, Enum, Index, UniqueConstraint
from sqlalchemy.exc import SQLAlchemyError

from ..base import BaseModel, db
from .enums import EventCategory, EventStatus, LocationType, RegistrationStatus


class Event(BaseModel):
    """Volunteer event that volunteers register for, claim tasks on and chat about"""

    __tablename__ = "events"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)

    # Enums
    category = db.Column(
        Enum(EventCategory, name="event_category_enum"),
        default=EventCategory.COMMUNITY,
        nullable=False,
        index=True,
    )
    location_type = db.Column(
        Enum(LocationType, name="location_type_enum"),
        default=LocationType.PHYSICAL,
        nullable=False,
        index=True,
    )
    # Only CANCELLED is authoritative; other statuses are derived from the dates
    event_status = db.Column(Enum(EventStatus, name="event_status_enum"), nullable=True)

    # Dates and times (naive UTC)
    start_date = db.Column(db.DateTime, nullable=False, index=True)
    end_date = db.Column(db.DateTime, nullable=False, index=True)
    registration_deadline = db.Column(db.DateTime, nullable=True)

    location_name = db.Column(db.String(200), nullable=True)
    thumbnail_image = db.Column(db.String(500), nullable=True)
    capacity = db.Column(db.Integer, nullable=True)  # Maximum registered volunteers

    # Relationships
    registrations = db.relationship("Registration", back_populates="event", cascade="all, delete-orphan")
    tasks = db.relationship("Task", back_populates="event", cascade="all, delete-orphan", order_by="Task.id")
    messages = db.relationship("ChatMessage", back_populates="event", cascade="all, delete-orphan")
    interests = db.relationship("EventInterest", back_populates="event", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="check_event_dates"),
        CheckConstraint("capacity IS NULL OR capacity > 0", name="check_event_capacity"),
        Index("idx_event_category_start", "category", "start_date"),
    )

    def __repr__(self):
        return f"<Event {self.title}>"

    @staticmethod
    def find_by_id(event_id):
        """Find event by ID with error handling"""
        try:
            return db.session.get(Event, event_id)
        except SQLAlchemyError as e:
            current_app.logger.error(f"Database error finding event by id {event_id}: {str(e)}")
            return None


class Registration(BaseModel):
    """A volunteer's registration for an event, including post-event feedback"""

    __tablename__ = "registrations"

    id = db.Column(db.Integer, primary_key=True)
    volunteer_id = db.Column(db.Integer, db.ForeignKey("volunteers.id"), nullable=False, index=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id"), nullable=False, index=True)

    status = db.Column(
        Enum(RegistrationStatus, name="registration_status_enum"),
        default=RegistrationStatus.REGISTERED,
        nullable=False,
        index=True,
    )

    feedback = db.Column(db.Text, nullable=True)
    star_rating = db.Column(db.Integer, nullable=True)
    feedback_submitted_at = db.Column(db.DateTime, nullable=True)

    # Relationships
    volunteer = db.relationship("Volunteer", back_populates="registrations")
    event = db.relationship("Event", back_populates="registrations")

    __table_args__ = (
        UniqueConstraint("volunteer_id", "event_id", name="uq_registration_volunteer_event"),
        CheckConstraint("star_rating IS NULL OR (star_rating >= 1 AND star_rating <= 5)", name="check_star_rating"),
        Index("idx_registration_event_status", "event_id", "status"),
    )

    def __repr__(self):
        return f"<Registration {self.volunteer_id}:{self.event_id} ({self.status.value})>"

    @staticmethod
    def find(volunteer_id, event_id):
        """Find the registration row for a volunteer/event pair"""
        try:
            return Registration.query.filter_by(volunteer_id=volunteer_id, event_id=event_id).first()
        except SQLAlchemyError as e:
            current_app.logger.error(
                f"Database error finding registration for volunteer {volunteer_id} event {event_id}: {str(e)}"
            )
            return None


class EventInterest(BaseModel):
    """An upcoming event a volunteer has flagged as interesting"""

    __tablename__ = "event_interests"

    id = db.Column(db.Integer, primary_key=True)
    volunteer_id = db.Column(db.Integer, db.ForeignKey("volunteers.id"), nullable=False, index=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id"), nullable=False, index=True)

    volunteer = db.relationship("Volunteer")
    event = db.relationship("Event", back_populates="interests")

    __table_args__ = (UniqueConstraint("volunteer_id", "event_id", name="uq_interest_volunteer_event"),)

    def __repr__(self):
        return f"<EventInterest {self.volunteer_id}:{self.event_id}>"

# volunteer_hub/models/volunteer.py
"""
Volunteer profile and skill catalogue models
"""

from flask import current_app
from sqlalchemy import CheckConstraint, Index, UniqueConstraint
from sqlalchemy.exc import SQLAlchemyError

from .base import BaseModel, db


class Skill(BaseModel):
    """Catalogue entry for a skill a volunteer can hold or a task can require"""

    __tablename__ = "skills"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    icon = db.Column(db.String(100), nullable=True)

    def __repr__(self):
        return f"<Skill {self.name}>"

    @staticmethod
    def find_by_name(name):
        try:
            return Skill.query.filter_by(name=name).first()
        except SQLAlchemyError as e:
            current_app.logger.error(f"Database error finding skill {name}: {str(e)}")
            return None


class Volunteer(BaseModel):
    """Volunteer profile owned by a user account, filled in through onboarding"""

    __tablename__ = "volunteers"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), unique=True, nullable=False, index=True)

    # Step 1: personal information
    full_name = db.Column(db.String(200), nullable=True)
    mobile = db.Column(db.String(50), nullable=True)
    age = db.Column(db.Integer, nullable=True)
    organization = db.Column(db.String(200), nullable=True)

    # Step 2: work preferences
    work_types = db.Column(db.JSON, nullable=False, default=list)
    preferred_location = db.Column(db.String(255), nullable=True)  # "virtual", "<place>" or "virtual, <place>"

    # Step 3: availability
    availability_start = db.Column(db.Date, nullable=True)
    availability_end = db.Column(db.Date, nullable=True)
    time_preference = db.Column(db.String(20), nullable=True)
    days_available = db.Column(db.JSON, nullable=False, default=list)

    onboarding_step = db.Column(db.Integer, nullable=False, default=1)
    onboarding_completed = db.Column(db.Boolean, nullable=False, default=False)

    # Relationships
    user = db.relationship("User", back_populates="volunteer")
    skills = db.relationship("VolunteerSkill", back_populates="volunteer", cascade="all, delete-orphan")
    registrations = db.relationship("Registration", back_populates="volunteer", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("onboarding_step BETWEEN 1 AND 3", name="check_onboarding_step"),
        CheckConstraint("age IS NULL OR (age >= 16 AND age <= 120)", name="check_volunteer_age"),
    )

    def __repr__(self):
        return f"<Volunteer {self.id} ({self.user_id})>"

    @property
    def skill_ids(self):
        return frozenset(link.skill_id for link in self.skills)

    @staticmethod
    def find_by_id(volunteer_id):
        """Find volunteer by ID with error handling"""
        try:
            return db.session.get(Volunteer, volunteer_id)
        except SQLAlchemyError as e:
            current_app.logger.error(f"Database error finding volunteer by id {volunteer_id}: {str(e)}")
            return None

    @staticmethod
    def find_by_user_id(user_id):
        """Find the profile belonging to a user account"""
        try:
            return Volunteer.query.filter_by(user_id=user_id).first()
        except SQLAlchemyError as e:
            current_app.logger.error(f"Database error finding volunteer for user {user_id}: {str(e)}")
            return None


class VolunteerSkill(BaseModel):
    """Skill held by a volunteer"""

    __tablename__ = "volunteer_skills"

    id = db.Column(db.Integer, primary_key=True)
    volunteer_id = db.Column(db.Integer, db.ForeignKey("volunteers.id"), nullable=False, index=True)
    skill_id = db.Column(db.Integer, db.ForeignKey("skills.id"), nullable=False, index=True)

    volunteer = db.relationship("Volunteer", back_populates="skills")
    skill = db.relationship("Skill")

    __table_args__ = (
        UniqueConstraint("volunteer_id", "skill_id", name="uq_volunteer_skill"),
        Index("idx_volunteer_skill_skill", "skill_id", "volunteer_id"),
    )

    def __repr__(self):
        return f"<VolunteerSkill {self.volunteer_id}:{self.skill_id}>"

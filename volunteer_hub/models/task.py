# volunteer_hub/models/task.py
"""
Event task models
"""

from sqlalchemy import CheckConstraint, Enum, Index, UniqueConstraint

from ..engagement.enums import TaskStatus
from .base import BaseModel, db


class Task(BaseModel):
    """Unit of work attached to an event, optionally claimed by a volunteer"""

    __tablename__ = "tasks"

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id"), nullable=False, index=True)
    description = db.Column(db.Text, nullable=False)
    task_status = db.Column(
        Enum(TaskStatus, name="task_status_enum"),
        default=TaskStatus.UNASSIGNED,
        nullable=False,
        index=True,
    )
    volunteer_id = db.Column(db.Integer, db.ForeignKey("volunteers.id"), nullable=True, index=True)
    feedback = db.Column(db.Text, nullable=True)

    # Relationships
    event = db.relationship("Event", back_populates="tasks")
    volunteer = db.relationship("Volunteer")
    required_skills = db.relationship(
        "TaskSkill", back_populates="task", cascade="all, delete-orphan", order_by="TaskSkill.position"
    )

    # Enum columns store names, so the constraint compares against them
    __table_args__ = (
        CheckConstraint(
            "(volunteer_id IS NULL AND task_status = 'UNASSIGNED') "
            "OR (volunteer_id IS NOT NULL AND task_status != 'UNASSIGNED')",
            name="check_task_assignment",
        ),
        Index("idx_task_volunteer_status", "volunteer_id", "task_status"),
    )

    def __repr__(self):
        return f"<Task {self.id} ({self.task_status.value})>"


class TaskSkill(BaseModel):
    """Skill required by a task, kept in display order"""

    __tablename__ = "task_skills"

    id = db.Column(db.Integer, primary_key=True)
    task_id = db.Column(db.Integer, db.ForeignKey("tasks.id"), nullable=False, index=True)
    skill_id = db.Column(db.Integer, db.ForeignKey("skills.id"), nullable=False)
    position = db.Column(db.Integer, nullable=False, default=0)

    task = db.relationship("Task", back_populates="required_skills")
    skill = db.relationship("Skill")

    __table_args__ = (UniqueConstraint("task_id", "skill_id", name="uq_task_skill"),)

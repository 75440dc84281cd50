# volunteer_hub/models/base.py
"""
Shared SQLAlchemy handle and base model with safe CRUD helpers
"""

from datetime import datetime, timezone

from flask import current_app
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.exc import SQLAlchemyError

db = SQLAlchemy()


def utcnow():
    return datetime.now(timezone.utc)


class BaseModel(db.Model):
    """Abstract base adding timestamps and (result, error) CRUD helpers"""

    __abstract__ = True

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    @classmethod
    def safe_create(cls, **kwargs):
        """Create and commit a row. Returns (instance, None) or (None, error)."""
        try:
            instance = cls(**kwargs)
            db.session.add(instance)
            db.session.commit()
            return instance, None
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Error creating {cls.__name__}: {str(e)}")
            return None, str(e)

    def safe_update(self, **kwargs):
        """Apply attribute changes and commit. Returns (True, None) or (False, error)."""
        try:
            for key, value in kwargs.items():
                if hasattr(self, key):
                    setattr(self, key, value)
            db.session.commit()
            return True, None
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Error updating {self.__class__.__name__} {getattr(self, 'id', None)}: {str(e)}")
            return False, str(e)

    def safe_delete(self):
        """Delete and commit. Returns (True, None) or (False, error)."""
        try:
            db.session.delete(self)
            db.session.commit()
            return True, None
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Error deleting {self.__class__.__name__} {getattr(self, 'id', None)}: {str(e)}")
            return False, str(e)

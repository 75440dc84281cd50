# volunteer_hub/utils/session.py
"""
Bridge from the Flask-Login session to the engagement actor
"""

from flask_login import current_user

from ..engagement.records import ActorSession
from ..models import Volunteer


def current_volunteer():
    """The signed-in user's volunteer profile, or None"""
    if not current_user or not current_user.is_authenticated:
        return None
    return Volunteer.find_by_user_id(current_user.id)


def current_actor():
    """ActorSession for the signed-in volunteer; None when nobody is signed in"""
    volunteer = current_volunteer()
    if volunteer is None:
        return None
    email = current_user.email
    display_name = volunteer.full_name or (email.split("@")[0] if email else "Anonymous")
    return ActorSession(volunteer_id=volunteer.id, email=email, display_name=display_name)

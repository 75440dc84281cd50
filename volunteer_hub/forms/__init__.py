# volunteer_hub/forms/__init__.py
"""
WTForms package
"""

from .auth import LoginForm, SignupForm
from .engagement import ChatMessageForm, ClaimTasksForm, FeedbackForm, ReleaseTaskForm
from .onboarding import AvailabilityForm, PersonalInfoForm, ProfileForm, WorkPreferencesForm

__all__ = [
    "LoginForm",
    "SignupForm",
    "PersonalInfoForm",
    "WorkPreferencesForm",
    "AvailabilityForm",
    "ProfileForm",
    "ClaimTasksForm",
    "ReleaseTaskForm",
    "FeedbackForm",
    "ChatMessageForm",
]

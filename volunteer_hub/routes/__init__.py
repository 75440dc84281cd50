# volunteer_hub/routes/__init__.py
"""
Application routes package
"""

from .auth import register_auth_routes
from .chat import register_chat_routes
from .dashboard import register_dashboard_routes
from .event import register_event_routes
from .onboarding import register_onboarding_routes
from .profile import register_profile_routes
from .task import register_task_routes


def init_routes(app):
    """Initialize all application routes"""
    register_auth_routes(app)
    register_onboarding_routes(app)
    register_profile_routes(app)
    register_dashboard_routes(app)
    register_event_routes(app)
    register_task_routes(app)
    register_chat_routes(app)

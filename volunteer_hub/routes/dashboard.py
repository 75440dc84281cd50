# volunteer_hub/routes/dashboard.py
"""
Dashboard and event browsing routes
"""

from flask import current_app, jsonify, request
from flask_login import login_required

from ..engagement import FilterSet
from ..utils.serializers import discussion_to_dict, event_to_dict, profile_to_dict, task_to_dict
from ..utils.session import current_actor
from .helpers import engagement_service


def register_dashboard_routes(app):
    """Register dashboard routes"""

    @app.route("/api/dashboard")
    @login_required
    def dashboard():
        service = engagement_service()
        view = service.dashboard(current_actor())
        now = service.clock()
        return jsonify(
            {
                "success": True,
                "profile": profile_to_dict(view.profile),
                "stats": {
                    "completed_tasks": view.stats.completed_tasks,
                    "registered_events": view.stats.registered_events,
                    "attended_events": view.stats.attended_events,
                },
                "upcoming_opportunities": [
                    dict(event_to_dict(event), interested=event.event_id in view.interested) for event in view.upcoming
                ],
                "recent_discussions": [discussion_to_dict(preview, now) for preview in view.discussions],
                "my_tasks": [task_to_dict(task) for task in view.my_tasks],
            }
        )

    @app.route("/api/events")
    @login_required
    def list_events():
        """Dashboard event sections, filtered by the query string"""
        criteria = FilterSet.from_mapping(request.args)
        sections, registrations = engagement_service().browse_events(current_actor(), criteria)

        def serialize(events):
            items = []
            for event in events:
                data = event_to_dict(event)
                registration = registrations.get(event.event_id)
                data["registration_status"] = registration.status.value if registration else "not_registered"
                items.append(data)
            return items

        return jsonify(
            {
                "success": True,
                "registered_upcoming": serialize(sections.registered_upcoming),
                "not_registered_upcoming": serialize(sections.not_registered_upcoming),
                "past": serialize(sections.past),
            }
        )

    @app.route("/api/events/latest")
    def latest_events():
        """Public list for the landing page"""
        limit = request.args.get("limit", 6, type=int)
        limit = max(1, min(limit, current_app.config.get("LATEST_EVENTS_MAX", 24)))
        events = engagement_service().latest_events(limit)
        return jsonify({"success": True, "events": [event_to_dict(event) for event in events]})

# volunteer_hub/routes/event.py
"""
Event detail, registration and feedback routes
"""

from flask import current_app, jsonify
from flask_login import login_required

from ..forms import FeedbackForm
from ..utils.serializers import event_to_dict, registration_to_dict
from ..utils.session import current_actor
from .helpers import engagement_service, form_error_response


def register_event_routes(app):
    """Register event routes"""

    @app.route("/api/events/<int:event_id>")
    @login_required
    def event_detail(event_id):
        detail = engagement_service().event_detail(current_actor(), event_id)
        data = event_to_dict(detail.event)
        data["status"] = detail.status.value
        return jsonify(
            {
                "success": True,
                "event": data,
                "section": detail.bucket.value,
                "is_registered": detail.is_registered,
                "registration": registration_to_dict(detail.registration),
                "registration_open": detail.registration_open,
                "registered_count": detail.registered_count,
                "feedback_action": detail.feedback_label,
            }
        )

    @app.route("/api/events/<int:event_id>/register", methods=["POST"])
    @login_required
    def register_for_event(event_id):
        registration = engagement_service().register(current_actor(), event_id)
        return jsonify({"success": True, "message": "You are registered for this event", "registration": registration_to_dict(registration)})

    @app.route("/api/events/<int:event_id>/unregister", methods=["POST"])
    @login_required
    def unregister_from_event(event_id):
        registration = engagement_service().unregister(current_actor(), event_id)
        return jsonify({"success": True, "message": "Your registration has been cancelled", "registration": registration_to_dict(registration)})

    @app.route("/api/events/<int:event_id>/interest", methods=["POST"])
    @login_required
    def express_interest(event_id):
        created = engagement_service().express_interest(current_actor(), event_id)
        return jsonify({"success": True, "message": "Interest saved", "created": created}), 201 if created else 200

    @app.route("/api/events/<int:event_id>/feedback", methods=["POST"])
    @login_required
    def submit_event_feedback(event_id):
        form = FeedbackForm()
        if not form.validate_on_submit():
            return form_error_response(form)
        submission = engagement_service().submit_feedback(
            current_actor(), event_id, form.star_rating.data, form.feedback.data
        )
        current_app.logger.info(
            f"Feedback {'updated' if submission.is_update else 'submitted'} for event {event_id}"
        )
        return jsonify(
            {
                "success": True,
                "message": "Feedback updated" if submission.is_update else "Thank you for your feedback",
                "is_update": submission.is_update,
                "registration": registration_to_dict(submission.registration),
            }
        )

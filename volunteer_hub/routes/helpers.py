# volunteer_hub/routes/helpers.py
"""
Shared helpers for the JSON routes
"""

from flask import current_app, jsonify

from ..services.engagement_service import EngagementService


def engagement_service():
    """Service configured from the app's domain settings"""
    config = current_app.config
    return EngagementService(
        upcoming_limit=config.get("UPCOMING_OPPORTUNITIES_LIMIT", 5),
        discussions_limit=config.get("RECENT_DISCUSSIONS_LIMIT", 5),
        preview_length=config.get("MESSAGE_PREVIEW_LENGTH", 120),
    )


def form_error_response(form):
    """400 response naming the first failing field"""
    field, messages = next(iter(form.errors.items()), (None, ["Invalid request"]))
    message = messages[0] if messages else "Invalid request"
    if isinstance(message, dict):
        message = "Invalid request"
    return jsonify({"success": False, "error": message, "code": "validation_failed", "field": field, "errors": form.errors}), 400

# volunteer_hub/routes/chat.py
"""
Event discussion routes, including the server-sent event stream
"""

import json

from flask import Response, current_app, jsonify
from flask_login import login_required

from ..forms import ChatMessageForm
from ..utils.serializers import message_to_dict
from ..utils.session import current_actor
from .helpers import engagement_service, form_error_response


def _sse(message):
    data = json.dumps(message_to_dict(message))
    return f"id: {message.message_id}\nevent: message\ndata: {data}\n\n"


def register_chat_routes(app):
    """Register chat routes"""

    @app.route("/api/events/<int:event_id>/messages", methods=["GET"])
    @login_required
    def list_messages(event_id):
        service = engagement_service()
        messages = service.messages(current_actor(), event_id)
        now = service.clock()
        return jsonify({"success": True, "messages": [message_to_dict(message, now) for message in messages]})

    @app.route("/api/events/<int:event_id>/messages", methods=["POST"])
    @login_required
    def post_message(event_id):
        form = ChatMessageForm()
        if not form.validate_on_submit():
            return form_error_response(form)
        message = engagement_service().send_message(current_actor(), event_id, form.body.data, form.client_ref.data or None)
        return jsonify({"success": True, "message": message_to_dict(message)}), 201

    @app.route("/api/events/<int:event_id>/messages/stream")
    @login_required
    def stream_messages(event_id):
        subscription = engagement_service().subscribe(current_actor(), event_id)
        keepalive = current_app.config.get("CHAT_STREAM_KEEPALIVE_SECONDS", 15)
        current_app.logger.debug(f"Chat stream opened for event {event_id}")

        def generate():
            try:
                yield ": connected\n\n"
                while True:
                    message = subscription.get(timeout=keepalive)
                    if message is None:
                        yield ": keepalive\n\n"
                        continue
                    yield _sse(message)
            finally:
                subscription.cancel()

        response = Response(generate(), mimetype="text/event-stream")
        response.headers["Cache-Control"] = "no-cache"
        response.headers["X-Accel-Buffering"] = "no"
        return response

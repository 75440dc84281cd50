# volunteer_hub/routes/task.py
"""
Task claim, update and release routes
"""

from flask import jsonify, request
from flask_login import login_required

from ..engagement import ValidationFailed
from ..forms import ClaimTasksForm, ReleaseTaskForm
from ..utils.serializers import batch_to_dict, task_to_dict
from ..utils.session import current_actor
from .helpers import engagement_service, form_error_response


def _parse_changes(payload):
    """Validate the shape of a task-changes submission"""
    changes = (payload or {}).get("changes")
    if not isinstance(changes, list):
        raise ValidationFailed("Expected a list of task changes", field="changes")
    parsed = []
    for change in changes:
        if not isinstance(change, dict):
            raise ValidationFailed("Each change must be an object", field="changes")
        task_id = change.get("task_id")
        if isinstance(task_id, bool) or not isinstance(task_id, int):
            raise ValidationFailed("Each change needs a numeric task_id", field="task_id")
        item = {"task_id": task_id}
        if "status" in change:
            item["status"] = change["status"]
        if "feedback" in change:
            feedback = change["feedback"]
            if feedback is not None and not isinstance(feedback, str):
                raise ValidationFailed("Feedback must be text", field="feedback")
            item["feedback"] = feedback
        parsed.append(item)
    return parsed


def register_task_routes(app):
    """Register task routes"""

    @app.route("/api/events/<int:event_id>/tasks")
    @login_required
    def event_tasks(event_id):
        views = engagement_service().event_tasks(current_actor(), event_id)
        return jsonify({"success": True, "tasks": [task_to_dict(view.task, view.skills) for view in views]})

    @app.route("/api/events/<int:event_id>/tasks/claim", methods=["POST"])
    @login_required
    def claim_event_tasks(event_id):
        form = ClaimTasksForm()
        if not form.validate_on_submit():
            return form_error_response(form)
        result = engagement_service().claim_tasks(current_actor(), event_id, form.task_ids.data)
        return jsonify(batch_to_dict(result))

    @app.route("/api/tasks/submit", methods=["POST"])
    @login_required
    def submit_task_changes():
        changes = _parse_changes(request.get_json(silent=True))
        result = engagement_service().submit_task_changes(current_actor(), changes)
        return jsonify(batch_to_dict(result))

    @app.route("/api/tasks/<int:task_id>/release", methods=["POST"])
    @login_required
    def release_task(task_id):
        form = ReleaseTaskForm()
        if not form.validate_on_submit():
            return form_error_response(form)
        task = engagement_service().release_task(current_actor(), task_id, confirmed=bool(form.confirmed.data))
        return jsonify({"success": True, "message": "Task released", "task": task_to_dict(task)})

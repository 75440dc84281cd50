# volunteer_hub/routes/onboarding.py
"""
Three-step onboarding flow
"""

from flask import jsonify
from flask_login import login_required

from ..engagement.onboarding import FINAL_STEP, STEP_NAMES
from ..forms import AvailabilityForm, PersonalInfoForm, WorkPreferencesForm
from ..utils.serializers import profile_to_dict
from ..utils.session import current_actor
from .helpers import engagement_service, form_error_response

STEP_FORMS = {
    1: (PersonalInfoForm, "to_personal_info"),
    2: (WorkPreferencesForm, "to_work_preferences"),
    3: (AvailabilityForm, "to_availability"),
}


def _status(profile):
    return {
        "success": True,
        "current_step": profile.onboarding_step,
        "step_name": STEP_NAMES.get(profile.onboarding_step),
        "total_steps": FINAL_STEP,
        "completed": profile.onboarding_completed,
        "profile": profile_to_dict(profile),
    }


def register_onboarding_routes(app):
    """Register onboarding routes"""

    @app.route("/api/onboarding/status")
    @login_required
    def onboarding_status():
        return jsonify(_status(engagement_service().profile(current_actor())))

    @app.route("/api/onboarding/step-<int:step>", methods=["POST"])
    @login_required
    def onboarding_step(step):
        if step not in STEP_FORMS:
            return jsonify({"success": False, "error": f"Unknown onboarding step: {step}"}), 404
        form_class, converter = STEP_FORMS[step]
        form = form_class()
        if not form.validate_on_submit():
            return form_error_response(form)
        profile = engagement_service().complete_onboarding_step(current_actor(), step, getattr(form, converter)())
        payload = _status(profile)
        payload["next"] = "/api/dashboard" if profile.onboarding_completed else f"/api/onboarding/step-{profile.onboarding_step}"
        return jsonify(payload)

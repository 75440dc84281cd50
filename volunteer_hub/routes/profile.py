# volunteer_hub/routes/profile.py
"""
Volunteer profile routes
"""

from flask import jsonify
from flask_login import login_required

from ..engagement.onboarding import parse_preferred_location
from ..forms import AvailabilityForm, ProfileForm
from ..services.store import EngagementStore
from ..utils.serializers import profile_to_dict, skill_to_dict
from ..utils.session import current_actor
from .helpers import engagement_service, form_error_response


def register_profile_routes(app):
    """Register profile routes"""

    @app.route("/api/profile", methods=["GET"])
    @login_required
    def view_profile():
        profile = engagement_service().profile(current_actor())
        is_virtual, is_in_person, place_name = parse_preferred_location(profile.preferred_location)
        data = profile_to_dict(profile)
        data.update({"is_virtual": is_virtual, "is_in_person": is_in_person, "place_name": place_name})
        return jsonify({"success": True, "profile": data, "skills": [skill_to_dict(skill) for skill in EngagementStore().list_skills()]})

    @app.route("/api/profile", methods=["POST"])
    @login_required
    def update_profile():
        form = ProfileForm()
        if not form.validate_on_submit():
            return form_error_response(form)
        skill_ids = form.skill_ids.data if form.skill_ids.raw_data else None
        profile = engagement_service().update_profile(
            current_actor(),
            form.to_personal_info(),
            form.to_work_preferences(),
            form.to_availability(),
            skill_ids=skill_ids,
        )
        return jsonify({"success": True, "message": "Profile updated successfully", "profile": profile_to_dict(profile)})

    @app.route("/api/profile/availability", methods=["POST"])
    @login_required
    def update_availability():
        form = AvailabilityForm()
        if not form.validate_on_submit():
            return form_error_response(form)
        profile = engagement_service().update_availability(current_actor(), form.to_availability())
        return jsonify({"success": True, "message": "Availability updated", "profile": profile_to_dict(profile)})

# volunteer_hub/routes/auth.py
"""
Authentication routes
"""

from flask import current_app, jsonify
from flask_login import current_user, login_required, login_user, logout_user
from flask_wtf.csrf import generate_csrf

from ..forms import LoginForm, SignupForm
from ..models import User, Volunteer, db
from ..utils.serializers import profile_to_dict
from ..utils.session import current_actor
from .helpers import engagement_service, form_error_response


def register_auth_routes(app):
    """Register authentication routes"""

    @app.route("/signup", methods=["POST"])
    def signup():
        form = SignupForm()
        if not form.validate_on_submit():
            return form_error_response(form)

        email = form.email.data.strip().lower()
        if User.find_by_email(email):
            return jsonify({"success": False, "error": "An account with this email already exists", "field": "email"}), 409

        user = User(email=email)
        user.set_password(form.password.data)
        user.volunteer = Volunteer(full_name=(form.full_name.data or "").strip() or None)
        db.session.add(user)
        db.session.commit()
        login_user(user)
        current_app.logger.info(f"New volunteer account created: {email}")
        return jsonify({"success": True, "user_id": user.id, "next": "/api/onboarding/status"}), 201

    @app.route("/login", methods=["POST"])
    def login():
        form = LoginForm()
        if not form.validate_on_submit():
            return form_error_response(form)

        user = User.find_by_email(form.email.data)
        if user is None or not user.check_password(form.password.data):
            current_app.logger.warning(f"Failed login attempt for {form.email.data}")
            return jsonify({"success": False, "error": "Invalid email or password"}), 401
        if not user.is_active:
            return jsonify({"success": False, "error": "This account has been deactivated"}), 403

        login_user(user, remember=form.remember_me.data)
        user.update_last_login()
        current_app.logger.info(f"User {user.email} logged in")
        volunteer = user.volunteer
        onboarded = bool(volunteer and volunteer.onboarding_completed)
        return jsonify({"success": True, "onboarding_completed": onboarded, "next": "/api/dashboard" if onboarded else "/api/onboarding/status"})

    @app.route("/logout", methods=["POST"])
    @login_required
    def logout():
        current_app.logger.info(f"User {current_user.email} logged out")
        logout_user()
        return jsonify({"success": True})

    @app.route("/api/me")
    @login_required
    def me():
        profile = engagement_service().profile(current_actor())
        return jsonify({"success": True, "user": {"id": current_user.id, "email": current_user.email}, "profile": profile_to_dict(profile), "csrf_token": generate_csrf()})

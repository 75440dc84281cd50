# volunteer_hub/utils/error_handler.py
"""
JSON error responses and alerting for unhandled errors
"""

import smtplib
import traceback
from datetime import datetime, timedelta, timezone
from email.mime.text import MIMEText

import requests
from flask import current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from ..engagement.errors import EngagementError
from ..models import db

ALERT_WINDOW = timedelta(hours=1)
DEFAULT_RATE_LIMIT = 5


class ErrorAlertingSystem:
    """Sends rate-limited alerts by email, Slack and webhook. Never raises."""

    def __init__(self, app=None):
        self.app = app
        self.alert_methods = []
        self.rate_limits = {}
        self.error_counts = {}
        if app is not None:
            self.configure(app)

    def configure(self, app):
        self.app = app
        config = app.config
        self.rate_limits = {
            "email": config.get("EMAIL_ALERT_RATE_LIMIT", DEFAULT_RATE_LIMIT),
            "slack": config.get("SLACK_ALERT_RATE_LIMIT", 10),
            "webhook": config.get("WEBHOOK_ALERT_RATE_LIMIT", 20),
        }
        self.alert_methods = []
        if config.get("ENABLE_EMAIL_ALERTS"):
            self.alert_methods.append(("email", self._send_email_alert))
        if config.get("ENABLE_SLACK_ALERTS"):
            self.alert_methods.append(("slack", self._send_slack_alert))
        if config.get("ENABLE_WEBHOOK_ALERTS"):
            self.alert_methods.append(("webhook", self._send_webhook_alert))

    def should_send_alert(self, alert_type, error_key):
        """Allow at most rate_limits[alert_type] alerts per error key per hour"""
        now = datetime.now(timezone.utc)
        limit = self.rate_limits.get(alert_type, DEFAULT_RATE_LIMIT)
        recent = [sent for sent in self.error_counts.get(error_key, []) if now - sent < ALERT_WINDOW]
        if len(recent) >= limit:
            self.error_counts[error_key] = recent
            return False
        recent.append(now)
        self.error_counts[error_key] = recent
        return True

    def send_error_alert(self, error, context=None):
        context = context or {}
        endpoint = context.get("endpoint") or "unknown"
        error_key = f"{type(error).__name__}_{endpoint}"
        for alert_type, sender in self.alert_methods:
            if not self.should_send_alert(alert_type, error_key):
                continue
            try:
                sender(error, context)
            except (smtplib.SMTPException, OSError, requests.RequestException) as e:
                self.app.logger.error(f"Failed to send {alert_type} alert: {str(e)}")

    def _format_message(self, error, context):
        lines = [
            f"{self.app.config.get('APP_NAME', 'Volunteer Hub')} error: {type(error).__name__}: {error}",
            f"Time: {datetime.now(timezone.utc).isoformat()}",
        ]
        for key, value in sorted(context.items()):
            lines.append(f"{key}: {value}")
        stack = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        if error.__traceback__ is not None:
            lines.extend(["", stack])
        return "\n".join(lines)

    def _send_email_alert(self, error, context):
        config = self.app.config
        recipients = [address for address in config.get("ADMIN_EMAILS") or [] if address]
        if not config.get("MAIL_SERVER") or not recipients:
            self.app.logger.warning("Email alerts enabled but MAIL_SERVER or ADMIN_EMAILS is not configured")
            return
        message = MIMEText(self._format_message(error, context))
        message["Subject"] = f"[{config.get('APP_NAME', 'Volunteer Hub')}] {type(error).__name__}"
        message["From"] = config.get("MAIL_FROM", "noreply@example.com")
        message["To"] = ", ".join(recipients)

        server = smtplib.SMTP(config["MAIL_SERVER"], config.get("MAIL_PORT", 587), timeout=10)
        try:
            if config.get("MAIL_USE_TLS", True):
                server.starttls()
            if config.get("MAIL_USERNAME") and config.get("MAIL_PASSWORD"):
                server.login(config["MAIL_USERNAME"], config["MAIL_PASSWORD"])
            server.sendmail(message["From"], recipients, message.as_string())
        finally:
            server.quit()

    def _send_slack_alert(self, error, context):
        url = self.app.config.get("SLACK_WEBHOOK_URL")
        if not url:
            self.app.logger.warning("Slack alerts enabled but SLACK_WEBHOOK_URL is not configured")
            return
        response = requests.post(url, json={"text": self._format_message(error, context)}, timeout=10)
        response.raise_for_status()

    def _send_webhook_alert(self, error, context):
        url = self.app.config.get("WEBHOOK_URL")
        if not url:
            self.app.logger.warning("Webhook alerts enabled but WEBHOOK_URL is not configured")
            return
        payload = {
            "app": self.app.config.get("APP_NAME", "Volunteer Hub"),
            "error_type": type(error).__name__,
            "message": str(error),
            "context": context,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        response = requests.post(
            url, json=payload, headers=self.app.config.get("WEBHOOK_HEADERS") or {}, timeout=10
        )
        response.raise_for_status()


error_alerter = ErrorAlertingSystem()


def _request_context():
    return {
        "endpoint": request.path,
        "method": request.method,
        "remote_addr": request.remote_addr,
    }


def init_error_alerting(app):
    """Register JSON error handlers and configure the shared alerter"""
    error_alerter.configure(app)
    app.extensions["error_alerter"] = error_alerter

    @app.errorhandler(EngagementError)
    def handle_engagement_error(error):
        if error.status_code >= 500:
            current_app.logger.warning(f"{type(error).__name__} on {request.path}: {error.message}")
        else:
            current_app.logger.info(f"{type(error).__name__} on {request.path}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({"success": False, "error": error.description, "code": error.name.lower().replace(" ", "_")}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        current_app.logger.error(f"Unhandled error on {request.path}: {str(error)}", exc_info=True)
        if app.config.get("ERROR_ALERTING_ENABLED"):
            error_alerter.send_error_alert(error, _request_context())
        return jsonify({"success": False, "error": "An unexpected error occurred", "code": "internal_error"}), 500

    return error_alerter

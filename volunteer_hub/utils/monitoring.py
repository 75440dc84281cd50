# volunteer_hub/utils/monitoring.py
"""
Health checks and request timing
"""

import time
from datetime import datetime, timezone

from flask import current_app, g, jsonify, request
from sqlalchemy import text

from ..models import db
from ..services.chat_feed import chat_feed


class HealthChecker:
    """Answers the health endpoints"""

    def __init__(self, app=None):
        self.app = app
        self.started_at = datetime.now(timezone.utc)

    def _check_database(self):
        try:
            db.session.execute(text("SELECT 1"))
            return {"status": "healthy"}
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"Health check database error: {str(e)}")
            return {"status": "unhealthy", "error": str(e)}

    def basic_health_check(self):
        database = self._check_database()
        timestamp = datetime.now(timezone.utc).isoformat()
        if database["status"] != "healthy":
            return jsonify({"status": "unhealthy", "error": database["error"], "timestamp": timestamp}), 503
        return jsonify({"status": "healthy", "timestamp": timestamp}), 200

    def detailed_health_check(self):
        checks = {"database": self._check_database()}
        checks["chat_feed"] = {"status": "healthy", "subscribers": chat_feed.total_subscribers()}
        healthy = all(check["status"] == "healthy" for check in checks.values())
        config = current_app.config
        payload = {
            "status": "healthy" if healthy else "degraded",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime_seconds": int((datetime.now(timezone.utc) - self.started_at).total_seconds()),
            "app": {"name": config.get("APP_NAME"), "version": config.get("APP_VERSION")},
            "checks": checks,
        }
        return jsonify(payload), 200 if healthy else 503


class PerformanceMonitor:
    """Logs requests slower than SLOW_REQUEST_THRESHOLD_MS"""

    def __init__(self, app=None):
        self.app = app
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self.app = app
        app.before_request(self._start_timer)
        app.after_request(self._log_request)

    def _start_timer(self):
        g.request_started = time.perf_counter()

    def _log_request(self, response):
        started = g.pop("request_started", None)
        if started is None:
            return response
        elapsed_ms = (time.perf_counter() - started) * 1000
        threshold = current_app.config.get("SLOW_REQUEST_THRESHOLD_MS", 1000)
        if elapsed_ms >= threshold:
            current_app.logger.warning(
                f"Slow request {request.method} {request.path}: {elapsed_ms:.0f}ms (status {response.status_code})"
            )
        return response


def init_monitoring(app):
    """Register the health endpoints and request timing"""
    health_checker = HealthChecker(app)
    app.extensions["health_checker"] = health_checker
    health_endpoint = app.config.get("HEALTH_CHECK_ENDPOINT", "/health")

    @app.route(health_endpoint)
    def health_check():
        return health_checker.basic_health_check()

    @app.route(f"{health_endpoint}/detailed")
    def detailed_health_check():
        return health_checker.detailed_health_check()

    if app.config.get("MONITORING_ENABLED", False):
        PerformanceMonitor(app)
    return health_checker

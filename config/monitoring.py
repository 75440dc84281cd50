# config/monitoring.py

import os

from .base import _coerce_bool, _coerce_int


def _split_list(value):
    return [item.strip() for item in value.split(",") if item.strip()] if value else []


class MonitoringConfig:
    """Logging, health check and alerting configuration"""

    MONITORING_ENABLED = _coerce_bool(os.environ.get("MONITORING_ENABLED"), default=False)
    HEALTH_CHECK_ENDPOINT = os.environ.get("HEALTH_CHECK_ENDPOINT", "/health")
    SLOW_REQUEST_THRESHOLD_MS = _coerce_int(os.environ.get("SLOW_REQUEST_THRESHOLD_MS"), 1000)

    # Error alerting
    ERROR_ALERTING_ENABLED = _coerce_bool(os.environ.get("ERROR_ALERTING_ENABLED"), default=False)

    # Logging
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "json")  # 'json' or 'text'
    LOG_DIR = os.environ.get("LOG_DIR", "logs")
    LOG_FILE_MAX_BYTES = _coerce_int(os.environ.get("LOG_FILE_MAX_BYTES"), 10485760)  # 10MB
    LOG_FILE_BACKUP_COUNT = _coerce_int(os.environ.get("LOG_FILE_BACKUP_COUNT"), 10)
    ENABLE_FILE_LOGGING = _coerce_bool(os.environ.get("ENABLE_FILE_LOGGING"), default=True)
    ENABLE_CONSOLE_LOGGING = _coerce_bool(os.environ.get("ENABLE_CONSOLE_LOGGING"), default=True)

    # Email alerts
    ENABLE_EMAIL_ALERTS = _coerce_bool(os.environ.get("ENABLE_EMAIL_ALERTS"), default=False)
    MAIL_SERVER = os.environ.get("MAIL_SERVER")
    MAIL_PORT = _coerce_int(os.environ.get("MAIL_PORT"), 587, maximum=65535)
    MAIL_USE_TLS = _coerce_bool(os.environ.get("MAIL_USE_TLS"), default=True)
    MAIL_USERNAME = os.environ.get("MAIL_USERNAME")
    MAIL_PASSWORD = os.environ.get("MAIL_PASSWORD")
    MAIL_FROM = os.environ.get("MAIL_FROM", "noreply@example.com")
    ADMIN_EMAILS = _split_list(os.environ.get("ADMIN_EMAILS"))

    # Alerts per error key per hour
    EMAIL_ALERT_RATE_LIMIT = _coerce_int(os.environ.get("EMAIL_ALERT_RATE_LIMIT"), 5)
    SLACK_ALERT_RATE_LIMIT = _coerce_int(os.environ.get("SLACK_ALERT_RATE_LIMIT"), 10)
    WEBHOOK_ALERT_RATE_LIMIT = _coerce_int(os.environ.get("WEBHOOK_ALERT_RATE_LIMIT"), 20)

    # Slack and generic webhooks
    ENABLE_SLACK_ALERTS = _coerce_bool(os.environ.get("ENABLE_SLACK_ALERTS"), default=False)
    SLACK_WEBHOOK_URL = os.environ.get("SLACK_WEBHOOK_URL")
    ENABLE_WEBHOOK_ALERTS = _coerce_bool(os.environ.get("ENABLE_WEBHOOK_ALERTS"), default=False)
    WEBHOOK_URL = os.environ.get("WEBHOOK_URL")
    WEBHOOK_HEADERS = {}

    APP_NAME = os.environ.get("APP_NAME", "Volunteer Hub")
    APP_VERSION = os.environ.get("APP_VERSION", "1.0.0")


class DevelopmentMonitoringConfig(MonitoringConfig):
    LOG_LEVEL = "DEBUG"
    LOG_FORMAT = "text"
    ENABLE_FILE_LOGGING = False
    ENABLE_EMAIL_ALERTS = False
    ENABLE_SLACK_ALERTS = False
    ENABLE_WEBHOOK_ALERTS = False


class ProductionMonitoringConfig(MonitoringConfig):
    LOG_LEVEL = "INFO"
    LOG_FORMAT = "json"
    ENABLE_CONSOLE_LOGGING = False  # container platforms collect stdout separately
    EMAIL_ALERT_RATE_LIMIT = 3
    SLACK_ALERT_RATE_LIMIT = 5
    WEBHOOK_ALERT_RATE_LIMIT = 10


class TestingMonitoringConfig(MonitoringConfig):
    MONITORING_ENABLED = False
    ERROR_ALERTING_ENABLED = False
    LOG_LEVEL = "WARNING"
    LOG_FORMAT = "text"
    ENABLE_FILE_LOGGING = False
    ENABLE_CONSOLE_LOGGING = False
    ENABLE_EMAIL_ALERTS = False
    ENABLE_SLACK_ALERTS = False
    ENABLE_WEBHOOK_ALERTS = False

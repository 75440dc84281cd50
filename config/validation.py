# config/validation.py
"""
Start-up checks for the environment a production server needs.
"""

import os
import sys
from typing import List, Tuple

INSECURE_SECRET_KEYS = {"", "your-secret-key", "your_secret_key", "dev-secret-key-change-in-production"}

# flag -> settings that must be present when the flag is on
CONDITIONAL_REQUIREMENTS = {
    "ENABLE_EMAIL_ALERTS": ("MAIL_SERVER", "MAIL_USERNAME", "MAIL_PASSWORD", "ADMIN_EMAILS"),
    "ENABLE_SLACK_ALERTS": ("SLACK_WEBHOOK_URL",),
    "ENABLE_WEBHOOK_ALERTS": ("WEBHOOK_URL",),
}

POSITIVE_INT_SETTINGS = (
    "UPCOMING_OPPORTUNITIES_LIMIT",
    "RECENT_DISCUSSIONS_LIMIT",
    "MESSAGE_PREVIEW_LENGTH",
    "CHAT_STREAM_KEEPALIVE_SECONDS",
)


def _flag(environ, name):
    return environ.get(name, "false").strip().lower() in {"1", "true", "yes", "on"}


def validate_environment(flask_env: str = None, environ=None) -> Tuple[bool, List[str]]:
    """
    Check required settings. Only production is validated.

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    environ = os.environ if environ is None else environ
    if flask_env is None:
        flask_env = environ.get("FLASK_ENV", "development")
    if flask_env != "production":
        return True, []

    errors = []
    if environ.get("SECRET_KEY", "") in INSECURE_SECRET_KEYS:
        errors.append("SECRET_KEY is required in production and must not be a placeholder value.")
    if not environ.get("DATABASE_URL"):
        errors.append("DATABASE_URL is required in production.")

    for flag, required in CONDITIONAL_REQUIREMENTS.items():
        if not _flag(environ, flag):
            continue
        for name in required:
            if not environ.get(name):
                errors.append(f"{name} is required when {flag}=true")

    for name in POSITIVE_INT_SETTINGS:
        raw = environ.get(name)
        if raw is None:
            continue
        try:
            valid = int(raw) > 0
        except ValueError:
            valid = False
        if not valid:
            errors.append(f"{name} must be a positive integer (got {raw!r})")

    return not errors, errors


def validate_and_exit(flask_env: str = None) -> None:
    """Print every problem and exit when validation fails."""
    is_valid, errors = validate_environment(flask_env)
    if is_valid:
        return

    print("=" * 80, file=sys.stderr)
    print("ENVIRONMENT VALIDATION FAILED", file=sys.stderr)
    print("=" * 80, file=sys.stderr)
    for i, error in enumerate(errors, 1):
        print(f"{i}. {error}", file=sys.stderr)
    print("=" * 80, file=sys.stderr)
    sys.exit(1)

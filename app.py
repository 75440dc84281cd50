# app.py

import logging
import os

from dotenv import load_dotenv
from flask import Flask, current_app, jsonify
from flask_login import LoginManager
from flask_wtf.csrf import CSRFProtect
from sqlalchemy import event

# Load environment variables from .env file first
load_dotenv()

# Module imports after load_dotenv() - E402 is intentional
from config import DevelopmentConfig, ProductionConfig, TestingConfig  # noqa: E402
from config.monitoring import (  # noqa: E402
    DevelopmentMonitoringConfig,
    ProductionMonitoringConfig,
    TestingMonitoringConfig,
)
from config.validation import validate_and_exit  # noqa: E402
from volunteer_hub.cli import hub_cli  # noqa: E402
from volunteer_hub.models import User, db  # noqa: E402
from volunteer_hub.routes import init_routes  # noqa: E402
from volunteer_hub.utils.error_handler import init_error_alerting  # noqa: E402
from volunteer_hub.utils.logging_config import setup_logging  # noqa: E402
from volunteer_hub.utils.monitoring import init_monitoring  # noqa: E402

logger = logging.getLogger(__name__)

CONFIGS = {
    "production": (ProductionConfig, ProductionMonitoringConfig),
    "testing": (TestingConfig, TestingMonitoringConfig),
    "development": (DevelopmentConfig, DevelopmentMonitoringConfig),
}

csrf = CSRFProtect()


def _configure_sqlite_connection(dbapi_connection, connection_record):  # pragma: no cover - instrumentation
    """Apply foreign keys and concurrency-friendly pragmas on every SQLite connection."""
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA busy_timeout=5000")
    finally:
        cursor.close()


def create_app(config_overrides=None):
    """Build the Flask application for the current FLASK_ENV"""
    flask_env = os.environ.get("FLASK_ENV", "development")
    if flask_env == "production":
        validate_and_exit(flask_env)

    app = Flask(__name__)
    app_config, monitoring_config = CONFIGS.get(flask_env, CONFIGS["development"])
    app.config.from_object(app_config)
    app.config.from_object(monitoring_config)
    if config_overrides:
        app.config.update(config_overrides)

    # Initialize extensions
    db.init_app(app)
    csrf.init_app(app)
    login_manager = LoginManager()
    login_manager.init_app(app)

    # Register login manager in app extensions for testing
    app.extensions["login_manager"] = login_manager

    @login_manager.user_loader
    def load_user(user_id):
        try:
            return db.session.get(User, int(user_id))
        except (ValueError, TypeError):
            return None
        except Exception as e:
            current_app.logger.error(f"Error loading user {user_id}: {str(e)}")
            return None

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"success": False, "error": "You must be logged in", "code": "authentication_required"}), 401

    # Initialize monitoring and logging systems
    setup_logging(app)
    init_error_alerting(app)
    init_monitoring(app)

    with app.app_context():
        engine = db.engine
        if engine.url.drivername.startswith("sqlite"):
            event.listen(engine, "connect", _configure_sqlite_connection)
        if not app.config.get("TESTING", False):
            db.create_all()

    init_routes(app)
    app.cli.add_command(hub_cli)
    return app


app = create_app()


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    app.run(host="0.0.0.0", port=port)

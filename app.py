# app.py

import logging
import os

from dotenv import load_dotenv
from flask import Flask, jsonify
from sqlalchemy import event

# Load environment variables from .env file first
load_dotenv()

# Module imports after load_dotenv() - E402 is intentional
from config import get_config_class  # noqa: E402
from config.monitoring import get_monitoring_config_class  # noqa: E402
from config.validation import validate_and_exit  # noqa: E402
from identity_app.models import db  # noqa: E402
from identity_app.routes import init_routes  # noqa: E402
from identity_app.routes.identify import INTERNAL_ERROR_MESSAGE  # noqa: E402
from identity_app.utils.logging_config import setup_logging  # noqa: E402
from identity_app.utils.monitoring import init_monitoring  # noqa: E402

logger = logging.getLogger(__name__)


def _configure_sqlite_connection_factory(*, enable_foreign_keys: bool):
    """Return a connection hook applying concurrency-friendly pragmas."""

    def _configure_sqlite_connection(dbapi_connection, connection_record):  # pragma: no cover - instrumentation
        try:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.execute("PRAGMA busy_timeout=5000")
            if enable_foreign_keys:
                cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
        except Exception as exc:
            logger.warning("Failed to apply SQLite PRAGMAs: %s", exc)

    return _configure_sqlite_connection


def register_error_handlers(app):
    """JSON error bodies for every unhandled status; no internals are leaked"""

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed_error(error):
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        app.logger.error(f"Unhandled error: {error}")
        return jsonify({"error": INTERNAL_ERROR_MESSAGE}), 500


def create_app(config_overrides=None, flask_env=None):
    """
    Build the application.

    The config class is chosen once from ``flask_env`` (defaults to FLASK_ENV);
    ``config_overrides`` is applied on top before any extension is initialised.
    """
    flask_env = flask_env or os.environ.get("FLASK_ENV", "development")

    # Validate environment variables (only in production)
    if flask_env == "production":
        validate_and_exit(flask_env)

    app = Flask(__name__)
    app.config.from_object(get_config_class(flask_env))
    app.config.from_object(get_monitoring_config_class(flask_env))
    if config_overrides:
        app.config.update(config_overrides)
    app.json.sort_keys = False

    db.init_app(app)

    setup_logging(app)
    init_monitoring(app)

    with app.app_context():
        engine = db.engine
        if engine.url.drivername.startswith("sqlite"):
            if not getattr(engine, "_sqlite_pragmas_configured", False):
                pragma_hook = _configure_sqlite_connection_factory(
                    enable_foreign_keys=not app.config.get("TESTING", False)
                )
                event.listen(engine, "connect", pragma_hook)
                engine._sqlite_pragmas_configured = True  # type: ignore[attr-defined]
        # Create the database tables only if not in testing mode
        if not app.config.get("TESTING", False):
            db.create_all()

    init_routes(app)
    register_error_handlers(app)

    return app


app = create_app()


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    app.run(host="0.0.0.0", port=port)

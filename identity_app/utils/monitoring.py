# identity_app/utils/monitoring.py

"""
Health check and Prometheus metrics endpoints
"""

from flask import Response, current_app, jsonify
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy import text

from identity_app.models import db


class HealthChecker:
    """Database-backed liveness check"""

    def __init__(self, app=None):
        self.app = app
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self.app = app
        endpoint = app.config.get("HEALTH_CHECK_ENDPOINT", "/health")
        app.add_url_rule(endpoint, "health_check", self.basic_health_check, methods=["GET"])

    def basic_health_check(self):
        try:
            db.session.execute(text("SELECT 1"))
        except Exception as e:
            current_app.logger.error(f"Health check failed: {str(e)}")
            return jsonify({"status": "unhealthy", "error": "database unavailable"}), 503
        return jsonify({"status": "healthy", "database": "connected"}), 200


def metrics_view():
    return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)


def init_monitoring(app):
    """Register the health check, and the metrics endpoint when monitoring is enabled"""
    health_checker = HealthChecker(app)
    app.extensions["health_checker"] = health_checker

    if app.config.get("MONITORING_ENABLED", False):
        endpoint = app.config.get("METRICS_ENDPOINT", "/metrics")
        app.add_url_rule(endpoint, "metrics", metrics_view, methods=["GET"])
        app.logger.info(f"Prometheus metrics exposed at {endpoint}")

    return health_checker

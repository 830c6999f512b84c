# flask_app/routes/main.py

"""
Health and metrics endpoints
"""

from flask import Response, current_app, jsonify
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from flask_app.models import db
from flask_app.utils.errors import NotFound


def register_main_routes(app):
    """Register health and metrics routes"""

    @app.route(app.config.get("HEALTH_CHECK_ENDPOINT", "/health"), methods=["GET"])
    def health():
        """Liveness check including a database round trip"""
        try:
            db.session.execute(text("SELECT 1"))
            database = "ok"
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Health check database error: {str(e)}")
            database = "unavailable"

        status_code = 200 if database == "ok" else 503
        return (
            jsonify(
                {
                    "status": "healthy" if status_code == 200 else "unhealthy",
                    "database": database,
                    "version": current_app.config.get("APP_VERSION"),
                }
            ),
            status_code,
        )

    @app.route(app.config.get("METRICS_ENDPOINT", "/metrics"), methods=["GET"])
    def metrics():
        """Prometheus exposition, only when monitoring is enabled"""
        if not current_app.config.get("MONITORING_ENABLED", False):
            raise NotFound("Metrics are disabled")
        return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)

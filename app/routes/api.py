"""API routes for the application."""

from flask import Blueprint, jsonify, current_app
from datetime import datetime

from app.schemas import HealthCheckSchema, AppInfoSchema
from app.utils.circuit_breaker import CircuitState, event_bus_circuit_breaker

bp = Blueprint("api", __name__, url_prefix="/api")

APP_NAME = "JobHub Applications"
APP_VERSION = "0.1.0"


def redis_status() -> str:
    from app import get_redis

    client = get_redis()
    if client is None:
        return "unavailable"
    try:
        client.ping()
        return "connected"
    except Exception as e:
        current_app.logger.warning(f"Redis ping failed: {e}")
        return "unavailable"


@bp.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint."""
    breaker = event_bus_circuit_breaker.get_status()
    schema = HealthCheckSchema(
        status="healthy" if breaker["state"] != CircuitState.OPEN.value else "degraded",
        timestamp=datetime.utcnow(),
        environment=current_app.config.get("ENV", "development"),
        redis=redis_status(),
        event_bus=breaker["state"],
    )
    return jsonify(schema.model_dump(mode="json")), 200


@bp.route("/info", methods=["GET"])
def app_info():
    """Get application information."""
    schema = AppInfoSchema(
        name=APP_NAME,
        version=APP_VERSION,
        environment=current_app.config.get("ENV", "development"),
        debug=current_app.debug,
        timestamp=datetime.utcnow(),
    )
    return jsonify(schema.model_dump(mode="json")), 200


@bp.route("/", methods=["GET"])
def root():
    """Root API endpoint."""
    return jsonify({
        "message": f"Welcome to the {APP_NAME} API",
        "version": APP_VERSION,
        "endpoints": {
            "health": "/api/health",
            "info": "/api/info",
            "applications": "/api/applications",
        },
    }), 200

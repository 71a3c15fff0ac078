"""Flask application factory and initialization."""

import logging
from typing import Type

from flask import Flask, request, g
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
import redis

from config.base import BaseConfig

# Initialize extensions
db = SQLAlchemy()
cors = CORS()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["2000 per day", "300 per hour"]
)
redis_client = None


def setup_logging(app: Flask, log_format: str = "json") -> None:
    """Setup logging configuration for the application."""
    log_level = app.config.get("LOG_LEVEL", "INFO")

    if log_format == "json":
        # Structured JSON logging
        from pythonjsonlogger import jsonlogger

        handler = logging.StreamHandler()
        formatter = jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s"
        )
        handler.setFormatter(formatter)
        app.logger.addHandler(handler)

        # Service modules log through their own module loggers
        package_logger = logging.getLogger("app")
        package_logger.addHandler(handler)
        package_logger.setLevel(getattr(logging, log_level))

    # Set log level
    app.logger.setLevel(getattr(logging, log_level))

    app.logger.info(
        "Application initialized",
        extra={
            "environment": app.config.get("ENV", "development"),
            "debug": app.debug,
            "testing": app.testing,
        }
    )


def setup_redis(app: Flask) -> redis.Redis:
    """Setup Redis connection."""
    redis_url = app.config.get("REDIS_URL", "redis://localhost:6379/0")

    try:
        redis_conn = redis.from_url(redis_url, decode_responses=True, socket_connect_timeout=2)
        redis_conn.ping()
        app.logger.info(f"Redis connected: {redis_url}")
        return redis_conn
    except Exception as e:
        app.logger.error(f"Failed to connect to Redis: {e}")
        if app.config.get("ENV") == "production":
            raise
        return None


def setup_error_handlers(app: Flask) -> None:
    """Register error handlers."""

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 errors."""
        return {
            "error": "Not Found",
            "message": "The requested resource was not found",
            "status": 404,
        }, 404

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        app.logger.error(f"Internal server error: {error}")
        return {
            "error": "Internal Server Error",
            "message": "An unexpected error occurred",
            "status": 500,
        }, 500

    @app.errorhandler(405)
    def method_not_allowed(error):
        """Handle 405 errors."""
        return {
            "error": "Method Not Allowed",
            "message": "The HTTP method is not allowed for this resource",
            "status": 405,
        }, 405

    @app.errorhandler(400)
    def bad_request(error):
        """Handle 400 errors."""
        return {
            "error": "Bad Request",
            "message": "The request was invalid",
            "status": 400,
        }, 400

    @app.errorhandler(429)
    def rate_limited(error):
        """Handle 429 errors."""
        return {
            "error": "Too Many Requests",
            "message": "Rate limit exceeded, retry later",
            "status": 429,
        }, 429


def register_blueprints(app: Flask) -> None:
    """Register Flask blueprints."""
    from app.routes import api
    from app.routes import application_routes

    # Health check, info
    app.register_blueprint(api.bp)

    # Application lifecycle routes
    app.register_blueprint(application_routes.application_bp)


def register_inngest(app: Flask) -> None:
    """Register Inngest background job functions."""
    if not app.config.get("INNGEST_ENABLED", True):
        app.logger.info("Inngest: disabled by configuration")
        return

    try:
        from inngest.flask import serve as inngest_serve_func
        from app.inngest import inngest_client
        from app.inngest.functions import INNGEST_FUNCTIONS

        inngest_path = app.config.get('INNGEST_SERVE_PATH', '/api/inngest')

        # serve() registers routes directly on the app
        inngest_serve_func(
            app,
            inngest_client,
            INNGEST_FUNCTIONS,
        )

        # The Inngest SDK handles its own rate limiting and retries
        @app.before_request
        def _exempt_inngest_from_rate_limit():
            """Exempt Inngest endpoints from Flask-Limiter rate limiting."""
            if request.path and request.path.startswith(inngest_path):
                g._rate_limiting_complete = True

        app.logger.info(f"Inngest: Registered {len(INNGEST_FUNCTIONS)} functions")
        app.logger.info(f"Inngest: Serving at {inngest_path}")
    except ImportError as e:
        app.logger.warning(f"Inngest not available: {e}")
    except Exception as e:
        app.logger.error(f"Failed to register Inngest: {e}", exc_info=True)


def create_app(config: Type[BaseConfig] = None) -> Flask:
    """Create and configure Flask application.

    Args:
        config: Configuration class to use. If None, uses environment-based config.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__)

    # Load configuration
    if config is None:
        from config.settings import settings

        if settings.is_production:
            from config.production import ProductionConfig
            config = ProductionConfig
        elif settings.is_testing:
            from config.testing import TestingConfig
            config = TestingConfig
        else:
            from config.development import DevelopmentConfig
            config = DevelopmentConfig

    app.config.from_object(config)

    # Setup logging
    setup_logging(app, app.config.get("LOG_FORMAT", "json"))

    # Initialize extensions
    db.init_app(app)
    limiter.init_app(app)

    cors.init_app(app, resources={
        r"/*": {
            "origins": app.config.get("CORS_ORIGINS", ["*"]),
            "methods": ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            "allow_headers": app.config.get("CORS_ALLOW_HEADERS", ["*"]),
            "expose_headers": app.config.get("CORS_EXPOSE_HEADERS", ["*"]),
            "supports_credentials": app.config.get("CORS_SUPPORTS_CREDENTIALS", True),
        }
    })

    # Setup Redis (optional outside production)
    global redis_client
    if not app.testing:
        redis_client = setup_redis(app)

    # Setup error handlers
    setup_error_handlers(app)

    # Request logging and JSON body checks
    from app.middleware import register_middleware
    register_middleware(app)

    # Register blueprints
    register_blueprints(app)

    # Register Inngest background jobs
    register_inngest(app)

    # Note: Database tables are managed via Alembic migrations (python manage.py migrate)

    app.logger.info(
        "Flask application created",
        extra={
            "config": config.__name__,
            "database": app.config.get("SQLALCHEMY_DATABASE_URI", "").split("://")[0],
            "notifications_backend": app.config.get("NOTIFICATIONS_BACKEND"),
        }
    )

    return app


def get_db():
    """Get database instance."""
    return db


def get_redis():
    """Get Redis client instance."""
    return redis_client

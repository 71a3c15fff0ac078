"""Testing environment configuration."""

import os

from .base import BaseConfig


class TestingConfig(BaseConfig):
    """Testing environment configuration."""

    ENV = "testing"

    DEBUG = True
    TESTING = True
    
    SECRET_KEY = "test-secret-key"
    
    # Use in-memory SQLite for tests
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ECHO = False
    SQLALCHEMY_ENGINE_OPTIONS = {}
    
    # Session
    SESSION_COOKIE_SECURE = False
    
    # CORS - Allow all for testing
    CORS_ORIGINS = ["*"]
    
    # Logging
    LOG_LEVEL = "DEBUG"
    LOG_FORMAT = "text"
    
    # Redis - Use separate test database
    REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/15")
    
    # No rate limiting or event bus in tests
    RATELIMIT_ENABLED = False
    NOTIFICATIONS_BACKEND = "log"
    INNGEST_ENABLED = False
    
    # Lifecycle defaults pinned so tests do not depend on the environment
    EMPLOYER_SKIP_TRANSITIONS = True
    INTERVIEW_ALLOW_PAST_DATES = False
    INTERVIEW_PAST_GRACE_SECONDS = 300
    NOTIFY_EMPLOYER_ON_WITHDRAWAL = True
    BULK_TRANSITION_MAX_IDS = 100
    
    # Allowed Hosts
    ALLOWED_HOSTS = ["*"]

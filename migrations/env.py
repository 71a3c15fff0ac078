"""Alembic environment bound to the Flask-SQLAlchemy metadata."""

from logging.config import fileConfig

from alembic import context
from flask import current_app, has_app_context

from app import create_app, db
import app.models  # noqa: F401  registers the model tables on db.metadata

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = db.metadata


def get_engine():
    if has_app_context():
        return db.engine
    flask_app = create_app()
    with flask_app.app_context():
        return db.engine


def run_migrations_offline() -> None:
    """Emit SQL to stdout without a live connection."""
    url = current_app.config["SQLALCHEMY_DATABASE_URI"] if has_app_context() else config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations against the configured database."""
    with get_engine().connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()

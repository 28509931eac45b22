"""Application factory for the school league governance core."""

from __future__ import annotations

import os

from flask import Flask

from schoolleague.config import Config
from schoolleague.extensions import db, migrate


def create_app(config_class=Config):
    """Create Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # Initialize Flask extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Ensure models are registered for migrations
    import schoolleague.models  # noqa: F401

    # Development convenience: create tables when running without migrations
    if os.getenv('SCHOOLLEAGUE_SKIP_BOOTSTRAP', '0') != '1' and not app.config.get('TESTING'):
        from schoolleague.services.db import ensure_core_tables
        with app.app_context():
            ensure_core_tables()

    # Register CLI commands
    from schoolleague.commands import register_commands
    register_commands(app)

    return app

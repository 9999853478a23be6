"""
School Site CMS - Application Factory

This module provides the Flask application factory pattern for creating
and configuring the application instance.
"""

import logging
import os

from flask import Flask
from sqlalchemy.exc import SQLAlchemyError
from schoolsite.extensions import db, login_manager, mail
from schoolsite.config import Config

logger = logging.getLogger(__name__)


def create_app(config_class=Config, storage=None):
    """Create and configure the Flask application.

    Args:
        config_class: Configuration class to use (default: Config)
        storage: Blob storage backend; built from the config when omitted

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)
    app.config.from_object(config_class)
    _configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    login_manager.init_app(app)
    mail.init_app(app)

    from schoolsite.sessions import SqlAlchemySessionInterface
    app.session_interface = SqlAlchemySessionInterface()

    from schoolsite.services import EXTENSION_KEY, build_services
    app.extensions[EXTENSION_KEY] = build_services(app, db, mail, storage=storage)

    # Register blueprints
    from schoolsite.auth import auth_bp
    from schoolsite.admin import admin_bp
    from schoolsite.public import public_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp, url_prefix='/api')
    app.register_blueprint(public_bp)

    from schoolsite.errors import register_error_handlers
    register_error_handlers(app)

    # User loader for Flask-Login
    @login_manager.user_loader
    def load_user(user_id):
        from schoolsite.models import User
        return db.session.get(User, int(user_id))

    from schoolsite.auth.decorators import unauthorized_response
    login_manager.unauthorized_handler(unauthorized_response)

    # Create database tables
    with app.app_context():
        _ensure_sqlite_dir(app.config['SQLALCHEMY_DATABASE_URI'])
        os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)
        db.create_all()
        _ensure_default_data(app)

    return app


def _ensure_sqlite_dir(uri):
    if not uri.startswith('sqlite:///'):
        return
    path = uri[len('sqlite:///'):]
    if path and path != ':memory:' and os.path.dirname(path):
        os.makedirs(os.path.dirname(path), exist_ok=True)


def _configure_logging(app):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    logging.getLogger('schoolsite').setLevel(level)


def _ensure_default_data(app):
    """Ensure the seed admin account exists."""
    from schoolsite.services.users import ensure_admin

    try:
        ensure_admin(app.config['ADMIN_USERNAME'], app.config['ADMIN_PASSWORD_PLAIN'])
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception('Error initializing database tables')

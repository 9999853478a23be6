"""
Configuration settings for the School Site CMS
"""
import os
import tempfile
from datetime import timedelta


def _env_flag(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _database_uri(basedir):
    uri = os.environ.get('DATABASE_URL') or os.environ.get('POSTGRES_URL')
    if uri:
        # Hosted Postgres providers still hand out the old scheme
        if uri.startswith('postgres://'):
            uri = uri.replace('postgres://', 'postgresql://', 1)
        return uri
    return 'sqlite:///' + os.path.join(basedir, 'instance', 'school_site.db')


class Config:
    """Flask application configuration"""

    APP_ENV = os.environ.get('APP_ENV') or os.environ.get('NODE_ENV') or 'development'

    # Flask secret key for sessions
    SECRET_KEY = os.environ.get('SECRET_KEY') or os.environ.get('SESSION_SECRET') or \
        'dev-secret-key-change-in-production-12345'

    # Database configuration
    basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
    SQLALCHEMY_DATABASE_URI = _database_uri(basedir)
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Server-side session cookie
    SESSION_COOKIE_NAME = 'school_site_sid'
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SECURE = APP_ENV == 'production'
    SESSION_COOKIE_SAMESITE = 'Lax'
    PERMANENT_SESSION_LIFETIME = timedelta(hours=24)

    # Seed admin account (created once at startup if missing)
    ADMIN_USERNAME = os.environ.get('ADMIN_USERNAME') or 'admin'
    ADMIN_PASSWORD_PLAIN = os.environ.get('ADMIN_PASSWORD_PLAIN') or 'password123'

    # Uploads
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER') or os.path.join(basedir, 'instance', 'uploads')
    UPLOAD_URL_PREFIX = '/uploads'
    MAX_CONTENT_LENGTH = 10 * 1024 * 1024  # 10 MB
    ALLOWED_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp', 'svg', 'ico'}

    # Blob storage: "vercel", "local" or empty to pick from the token
    STORAGE_BACKEND = os.environ.get('STORAGE_BACKEND', '').lower()
    BLOB_READ_WRITE_TOKEN = os.environ.get('BLOB_READ_WRITE_TOKEN')
    BLOB_API_URL = os.environ.get('BLOB_API_URL') or 'https://blob.vercel-storage.com'
    BLOB_TIMEOUT = float(os.environ.get('BLOB_TIMEOUT') or 15)

    # Outgoing mail (Flask-Mail), SMTP_* names kept for existing deployments
    MAIL_SERVER = os.environ.get('MAIL_SERVER') or os.environ.get('SMTP_HOST')
    MAIL_PORT = int(os.environ.get('MAIL_PORT') or os.environ.get('SMTP_PORT') or 587)
    MAIL_USE_SSL = _env_flag('MAIL_USE_SSL', _env_flag('SMTP_SECURE'))
    MAIL_USE_TLS = _env_flag('MAIL_USE_TLS', not MAIL_USE_SSL)
    MAIL_USERNAME = os.environ.get('MAIL_USERNAME') or os.environ.get('SMTP_USER')
    MAIL_PASSWORD = os.environ.get('MAIL_PASSWORD') or os.environ.get('SMTP_PASS')
    EMAIL_FROM_ADDRESS = os.environ.get('EMAIL_FROM_ADDRESS') or 'noreply@example.com'
    MAIL_DEFAULT_SENDER = EMAIL_FROM_ADDRESS

    # Contact form
    CONTACT_FORM_ACTION_DEFAULT = os.environ.get('CONTACT_FORM_ACTION_DEFAULT') or 'whatsapp'
    SCHOOL_WHATSAPP_NUMBER = os.environ.get('SCHOOL_WHATSAPP_NUMBER')
    SCHOOL_CONTACT_EMAIL_TO = os.environ.get('SCHOOL_CONTACT_EMAIL_TO')

    LOG_LEVEL = os.environ.get('LOG_LEVEL') or 'INFO'


class TestConfig(Config):
    """Testing configuration"""
    TESTING = True
    APP_ENV = 'testing'
    SECRET_KEY = 'test-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SESSION_COOKIE_SECURE = False
    UPLOAD_FOLDER = os.path.join(tempfile.gettempdir(), 'school_site_test_uploads')
    STORAGE_BACKEND = 'local'
    BLOB_READ_WRITE_TOKEN = None
    MAIL_SUPPRESS_SEND = True
    MAIL_SERVER = 'localhost'
    MAIL_USERNAME = None
    MAIL_PASSWORD = None
    CONTACT_FORM_ACTION_DEFAULT = 'whatsapp'
    SCHOOL_WHATSAPP_NUMBER = None
    SCHOOL_CONTACT_EMAIL_TO = None
    ADMIN_USERNAME = 'admin'
    ADMIN_PASSWORD_PLAIN = 'password123'

"""
Error Taxonomy

Every failure the API reports to a client is a SiteError. The Flask error
handler registered in create_app turns these into JSON bodies.
"""

import logging

from flask import jsonify

logger = logging.getLogger(__name__)


class SiteError(Exception):
    """Base class for errors that map onto an HTTP response."""
    status_code = 500
    default_message = 'An unexpected error occurred.'

    def __init__(self, message=None, status_code=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {'success': False, 'error': self.message, 'message': self.message}


class ValidationError(SiteError):
    status_code = 400
    default_message = 'Invalid request.'


class Unauthorized(SiteError):
    status_code = 401
    default_message = 'Unauthorized. Please log in.'

    def __init__(self, message=None, redirect_to='/login?unauthorized=true'):
        super().__init__(message)
        self.redirect_to = redirect_to

    def to_dict(self):
        data = super().to_dict()
        data['redirectTo'] = self.redirect_to
        return data


class InvalidCredentials(SiteError):
    status_code = 401
    default_message = 'Invalid credentials'


class NotFound(SiteError):
    status_code = 404
    default_message = 'Not found.'


class ConfigError(SiteError):
    status_code = 500
    default_message = 'Server configuration error.'


class StorageError(SiteError):
    status_code = 500
    default_message = 'A storage error occurred.'


class BlobStorageError(StorageError):
    default_message = 'File storage failed.'


class BlobNotFound(BlobStorageError):
    status_code = 404
    default_message = 'File does not exist.'


class SessionError(SiteError):
    status_code = 500
    default_message = 'Session error'


class EmailDeliveryError(SiteError):
    status_code = 500
    default_message = 'Failed to send message. Please try again later.'

    def to_dict(self):
        data = super().to_dict()
        data['action'] = 'email'
        return data


def register_error_handlers(app):
    """Render SiteError subclasses as JSON."""

    @app.errorhandler(SiteError)
    def handle_site_error(error):
        if error.status_code >= 500:
            logger.error('%s: %s', type(error).__name__, error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(413)
    def handle_too_large(error):
        body = ValidationError('Uploaded file is too large.').to_dict()
        return jsonify(body), 413

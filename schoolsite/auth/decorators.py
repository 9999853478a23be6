"""
Admin Decorator

Routes under /api/ answer an unauthenticated caller with a 401 JSON body that
tells the client where to log in; page routes redirect there instead.
"""

import logging
from functools import wraps

from flask import session, redirect, request, url_for
from flask_login import current_user

from schoolsite.errors import Unauthorized
from schoolsite.extensions import login_manager

logger = logging.getLogger(__name__)


def unauthorized_response():
    """Response for a request that needs an admin session but has none."""
    login_url = url_for('public.login_page', unauthorized='true')
    if request.path.startswith('/api/'):
        raise Unauthorized(redirect_to=login_url)
    return redirect(login_url)


def admin_required(f):
    """Decorator to ensure the request carries an authenticated admin session."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        if not session.is_authenticated or not current_user.is_authenticated:
            logger.info('Auth check failed for path: %s', request.path)
            return login_manager.unauthorized()
        return f(*args, **kwargs)
    return wrapper

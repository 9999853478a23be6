"""
User Service

Seeding and maintenance of admin accounts.
"""

import logging

from schoolsite.errors import InvalidCredentials
from schoolsite.extensions import db
from schoolsite.models import User

logger = logging.getLogger(__name__)


def find_user(username):
    return db.session.execute(
        db.select(User).filter_by(username=username)
    ).scalar_one_or_none()


def authenticate(username, password):
    """Return the user for a username/password pair or raise InvalidCredentials."""
    user = find_user(username)
    if user is None:
        logger.info("Login failed for username '%s' (user not found).", username)
        raise InvalidCredentials()
    if not user.check_password(password):
        logger.info("Login failed for username '%s' (password mismatch).", username)
        raise InvalidCredentials()
    return user


def ensure_admin(username, password, reset_password=False):
    """Create ``username`` if missing; optionally reset an existing password.

    Returns a ``(user, created)`` tuple.
    """
    user = find_user(username)
    if user is None:
        user = User(username=username)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        logger.info("Default admin user ('%s') created.", username)
        return user, True

    if reset_password:
        user.set_password(password)
        db.session.commit()
        logger.info("Password reset for admin user ('%s').", username)
    else:
        logger.info("Admin user ('%s') already exists.", username)
    return user, False

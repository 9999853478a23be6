"""
Auth Blueprint

Admin login, logout and session status. The session is stored server-side
and its id is rotated on every successful login.
"""

from flask import Blueprint

auth_bp = Blueprint('auth', __name__)

from schoolsite.auth import routes  # noqa: E402, F401
